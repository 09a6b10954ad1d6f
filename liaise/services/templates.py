"""Prompt templates and per-user template resolution."""

import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liaise.models import CUSTOM_TEMPLATE_KEY, TemplatePreset, UserCustomTemplate, UserSettings

DEFAULT_SUMMARY_TEMPLATE = """You are a medical communication expert specializing in converting complex medical documents into patient-friendly language. Rewrite the document using these guidelines:

WRITING STYLE:
- Use 9th grade reading level language
- Write in a warm, empathetic, and reassuring tone
- Use plain language and avoid medical jargon
- When medical terms are necessary, provide simple explanations in parentheses
- Use "you" to address the patient directly
- Break information into clear, digestible sections

CONTENT PRIORITIES:
- Preserve ALL critical medical information
- Explain the PURPOSE and IMPORTANCE of each procedure, test, or treatment
- Detail medication functions and why they're prescribed
- Include specific follow-up instructions and timeline
- Explain warning signs to watch for

STRUCTURE:
- Why you came to the hospital
- What we found
- What treatments we provided and why
- Medications (what they do and why you need them)
- What to do at home
- Follow-up care
- When to seek immediate help"""

CLINICAL_NOTES_PROMPT = """You are a medical AI assistant that creates professional clinical notes from consultation transcriptions.

Create comprehensive, well-structured clinical notes using proper medical terminology and SOAP format where appropriate. Include:
- Chief Complaint
- History of Present Illness
- Physical Examination findings
- Assessment and Plan
- Medications and dosages
- Follow-up instructions

Use professional medical language appropriate for healthcare providers. Be thorough but concise."""

PATIENT_SUMMARY_PROMPT = """You are a medical AI assistant that creates patient-friendly summaries from consultation transcriptions.

Create a clear, easy-to-understand summary for the patient that includes:
- What was discussed during the visit
- Key findings in simple terms
- Treatment plan in everyday language
- Next steps and follow-up instructions
- Any medications with simple explanations

Use warm, reassuring language. Avoid medical jargon and explain any necessary medical terms in simple language."""

CHAT_REFUSAL = (
    "I'm sorry, but that question is outside the scope of this summary. "
    "For any medical advice or further questions, please consult with your doctor."
)


@dataclass
class ResolvedTemplate:
    content: str
    source: str  # inline, custom, saved, preset or default


def build_chat_system_prompt(summary_content: str) -> str:
    return f"""You are a helpful medical assistant. Your role is to answer questions about the provided medical summary in simple, easy-to-understand language.
The medical summary is:
---
{summary_content}
---
Please adhere to the following rules:
1. Base your answers STRICTLY on the information given in the summary.
2. If the question asks for information not present in the summary (e.g., medical advice, diagnosis, prognosis, or details about conditions not mentioned), you MUST respond with: "{CHAT_REFUSAL}"
3. Do not invent or infer any information.
4. Keep your answers concise and clear."""


def build_summary_prompt(template: str, medical_text: str | None, additional_notes: str | None) -> str:
    parts = [template, ""]
    if medical_text:
        parts.append(
            "Please convert this medical discharge document into a patient-friendly "
            f"summary following the guidelines above:\n\n{medical_text}"
        )
    else:
        parts.append(
            "Please convert the attached medical document into a patient-friendly "
            "summary following the guidelines above."
        )
    if additional_notes:
        parts.append(f"\nAdditional context/instructions: {additional_notes}")
    return "\n".join(parts)


async def get_user_settings(db: AsyncSession, user_id: uuid.UUID) -> UserSettings | None:
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    return result.scalar_one_or_none()


async def resolve_summary_template(
    db: AsyncSession,
    user_id: uuid.UUID,
    inline_template: str | None = None,
) -> ResolvedTemplate:
    """Pick the instruction text for a summary.

    Order: inline custom text, the user's saved custom template, the named
    preset, then the built-in default.
    """
    if inline_template and inline_template.strip():
        return ResolvedTemplate(inline_template.strip(), "inline")

    user_settings = await get_user_settings(db, user_id)
    if user_settings is None or not user_settings.summary_template:
        return ResolvedTemplate(DEFAULT_SUMMARY_TEMPLATE, "default")

    selected = user_settings.summary_template
    if selected == CUSTOM_TEMPLATE_KEY:
        if user_settings.custom_template and user_settings.custom_template.strip():
            return ResolvedTemplate(user_settings.custom_template.strip(), "custom")
        return ResolvedTemplate(DEFAULT_SUMMARY_TEMPLATE, "default")

    saved = await db.execute(
        select(UserCustomTemplate).where(
            UserCustomTemplate.user_id == user_id,
            UserCustomTemplate.name == selected,
        )
    )
    saved_template = saved.scalars().first()
    if saved_template is not None:
        return ResolvedTemplate(saved_template.template_content, "saved")

    preset = await db.execute(
        select(TemplatePreset).where(
            TemplatePreset.name == selected,
            TemplatePreset.is_active.is_not(False),
        )
    )
    preset_template = preset.scalars().first()
    if preset_template is not None:
        return ResolvedTemplate(preset_template.template_content, "preset")

    return ResolvedTemplate(DEFAULT_SUMMARY_TEMPLATE, "default")


async def resolve_clinical_notes_template(db: AsyncSession, user_id: uuid.UUID) -> str:
    user_settings = await get_user_settings(db, user_id)
    if (
        user_settings is not None
        and user_settings.clinical_notes_template == CUSTOM_TEMPLATE_KEY
        and user_settings.custom_clinical_template
        and user_settings.custom_clinical_template.strip()
    ):
        return user_settings.custom_clinical_template.strip()
    return CLINICAL_NOTES_PROMPT
