"""Per-clinician settings and prompt template management."""

import uuid

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from liaise.api.deps import AUTHENTICATED, AuthenticatedUser, DbSession
from liaise.models import Profile, TemplatePreset, UserCustomTemplate, UserSettings
from liaise.schemas.common import SuccessResponse
from liaise.schemas.settings import (
    RETENTION_CHOICES_HOURS,
    CustomTemplateCreate,
    CustomTemplateItem,
    ProfileResponse,
    ProfileUpdate,
    TemplatePresetItem,
    UserSettingsResponse,
    UserSettingsUpdate,
)
from liaise.services.templates import get_user_settings

router = APIRouter(tags=["Settings"], dependencies=AUTHENTICATED)

KEEP_FOREVER = -1


@router.get("/settings", response_model=UserSettingsResponse)
async def read_settings(db: DbSession, current_user: AuthenticatedUser):
    user_settings = await get_user_settings(db, current_user.id)
    if user_settings is None:
        return UserSettingsResponse()
    return UserSettingsResponse.model_validate(user_settings)


@router.put("/settings", response_model=UserSettingsResponse)
async def update_settings(
    payload: UserSettingsUpdate,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    """Create or update the caller's settings; omitted fields are left alone."""
    changes = payload.model_dump(exclude_unset=True)
    if "retention_hours" in changes:
        hours = changes["retention_hours"]
        if hours == KEEP_FOREVER:
            changes["retention_hours"] = None
        elif hours is not None and hours not in RETENTION_CHOICES_HOURS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported retention window: {hours} hours",
            )

    user_settings = await get_user_settings(db, current_user.id)
    if user_settings is None:
        user_settings = UserSettings(
            id=uuid.uuid4(),
            user_id=current_user.id,
            auto_delete_enabled=True,
            retention_hours=72,
        )
        db.add(user_settings)
    for field, value in changes.items():
        setattr(user_settings, field, value)
    await db.commit()
    return UserSettingsResponse.model_validate(user_settings)


@router.get("/template-presets", response_model=list[TemplatePresetItem])
async def list_template_presets(db: DbSession, current_user: AuthenticatedUser):
    result = await db.execute(
        select(TemplatePreset)
        .where(TemplatePreset.is_active.is_not(False))
        .order_by(TemplatePreset.name)
    )
    return [TemplatePresetItem.model_validate(row) for row in result.scalars().all()]


@router.get("/custom-templates", response_model=list[CustomTemplateItem])
async def list_custom_templates(db: DbSession, current_user: AuthenticatedUser):
    result = await db.execute(
        select(UserCustomTemplate)
        .where(UserCustomTemplate.user_id == current_user.id)
        .order_by(UserCustomTemplate.created_at.desc())
    )
    return [CustomTemplateItem.model_validate(row) for row in result.scalars().all()]


@router.post(
    "/custom-templates",
    response_model=CustomTemplateItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_custom_template(
    payload: CustomTemplateCreate,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    template = UserCustomTemplate(
        id=uuid.uuid4(),
        user_id=current_user.id,
        name=payload.name.strip(),
        template_content=payload.template_content,
    )
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return CustomTemplateItem.model_validate(template)


@router.delete("/custom-templates/{template_id}", response_model=SuccessResponse)
async def delete_custom_template(
    template_id: uuid.UUID,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    result = await db.execute(
        select(UserCustomTemplate).where(
            UserCustomTemplate.id == template_id,
            UserCustomTemplate.user_id == current_user.id,
        )
    )
    template = result.scalar_one_or_none()
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Custom template {template_id} not found",
        )
    await db.delete(template)
    await db.commit()
    return SuccessResponse()


@router.get("/profile", response_model=ProfileResponse)
async def read_profile(db: DbSession, current_user: AuthenticatedUser):
    profile = await db.get(Profile, current_user.id)
    if profile is None:
        return ProfileResponse(id=current_user.id, email=current_user.email)
    return ProfileResponse.model_validate(profile)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdate,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    profile = await db.get(Profile, current_user.id)
    if profile is None:
        profile = Profile(id=current_user.id, email=current_user.email)
        db.add(profile)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, field, value.strip() if isinstance(value, str) else value)
    names = [part for part in (profile.first_name, profile.last_name) if part]
    profile.full_name = " ".join(names) or None
    await db.commit()
    return ProfileResponse.model_validate(profile)
