"""Seed the built-in summary template presets.

Revision ID: 20261001_01
Revises: 20261001_00
Create Date: 2026-10-01 00:10:00.000000
"""

import uuid

import sqlalchemy as sa

from alembic import op

revision = "20261001_01"
down_revision = "20261001_00"
branch_labels = None
depends_on = None

PRESETS = [
    (
        "Discharge summary",
        "General hospital discharge letter rewritten for the patient.",
        "Rewrite this discharge document for the patient at a 9th grade reading level. "
        "Cover why they came in, what was found, treatments given, medications, home care, "
        "follow-up appointments and when to seek urgent help.",
    ),
    (
        "Lab results",
        "Explain laboratory results in plain language.",
        "Explain each lab result in plain language: what the test measures, whether the "
        "value is in the normal range, and what the patient should discuss with their doctor. "
        "Do not speculate beyond the values given.",
    ),
    (
        "Medication plan",
        "Focus on medicines, doses and schedules.",
        "List every medication in the document with what it is for, how and when to take it, "
        "common side effects to watch for, and any changes from previous prescriptions.",
    ),
]

template_presets = sa.table(
    "template_presets",
    sa.column("id", sa.Uuid),
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("template_content", sa.Text),
    sa.column("is_active", sa.Boolean),
)


def upgrade() -> None:
    op.bulk_insert(
        template_presets,
        [
            {
                "id": uuid.uuid4(),
                "name": name,
                "description": description,
                "template_content": content,
                "is_active": True,
            }
            for name, description, content in PRESETS
        ],
    )


def downgrade() -> None:
    op.execute(
        template_presets.delete().where(
            template_presets.c.name.in_([name for name, _, _ in PRESETS])
        )
    )
