import base64
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from google.genai import types as genai_types

from conftest import OTHER_USER_ID, USER_ID, FakeDB, FakeResult
from liaise.api import summaries as summaries_api
from liaise.errors import UpstreamServiceError
from liaise.models import Summary
from liaise.schemas.common import ChatTurn
from liaise.schemas.summaries import ChatHistoryAppend, ConvertRequest
from liaise.services.gemini import file_state
from liaise.services.templates import DEFAULT_SUMMARY_TEMPLATE

SUMMARY_ID = uuid.UUID("44444444-4444-4444-4444-444444444444")


class FakeGemini:
    def __init__(self, reply="Your heart is healthy.", fail=False):
        self.reply = reply
        self.fail = fail
        self.prompts = []
        self.uploads = []
        self.files = []

    async def upload_file(self, data, mime_type, display_name):
        self.uploads.append((data, mime_type, display_name))
        return genai_types.File(
            name="files/x",
            uri="uri://x",
            mime_type=mime_type,
            state=genai_types.FileState.PROCESSING,
        )

    async def wait_until_active(self, uploaded):
        return uploaded.model_copy(update={"state": genai_types.FileState.ACTIVE})

    async def generate(self, prompt, uploaded=None):
        if self.fail:
            raise UpstreamServiceError("gemini", "boom")
        self.prompts.append(prompt)
        self.files.append(uploaded)
        return self.reply


def _summary_row(**kwargs):
    defaults = dict(
        id=SUMMARY_ID,
        user_id=USER_ID,
        patient_name="Jane",
        original_filename="a.pdf",
        summary_content="Summary",
        chat_history=None,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def test_convert_request_requires_text_or_file():
    with pytest.raises(ValueError):
        ConvertRequest.model_validate({"additionalNotes": "only notes"})

    payload = ConvertRequest.model_validate({"medicalText": "Admitted for pneumonia."})
    assert payload.medical_text == "Admitted for pneumonia."


@pytest.mark.anyio
async def test_convert_text_uses_default_template_and_persists_when_named(current_user):
    db = FakeDB()
    gemini = FakeGemini(reply="You had a mild infection and are getting better.")

    response = await summaries_api.convert_to_patient_friendly(
        ConvertRequest(medical_text="Dx: CAP. Rx: amoxicillin.", patient_name="Jane"),
        db,
        current_user,
        gemini,
    )

    assert response.summary == "You had a mild infection and are getting better."
    assert response.word_count == 9
    assert response.readability_score == "Grade 9 Level"
    assert gemini.prompts[0].startswith(DEFAULT_SUMMARY_TEMPLATE)
    assert "Dx: CAP. Rx: amoxicillin." in gemini.prompts[0]
    saved = db.added[0]
    assert isinstance(saved, Summary)
    assert saved.user_id == USER_ID
    assert saved.original_filename == "Pasted text"
    assert response.summary_id == saved.id
    assert db.commits == 1


@pytest.mark.anyio
async def test_convert_without_patient_name_does_not_persist(current_user):
    db = FakeDB()

    response = await summaries_api.convert_to_patient_friendly(
        ConvertRequest(medical_text="Dx: CAP."), db, current_user, FakeGemini()
    )

    assert response.summary_id is None
    assert db.added == []


@pytest.mark.anyio
async def test_convert_pdf_goes_through_gemini_file_upload(current_user):
    gemini = FakeGemini()
    file_data = base64.b64encode(b"%PDF-1.4 scanned").decode()

    await summaries_api.convert_to_patient_friendly(
        ConvertRequest(file_data=file_data, file_name="scan.pdf", mime_type="application/pdf"),
        FakeDB(),
        current_user,
        gemini,
    )

    assert gemini.uploads == [(b"%PDF-1.4 scanned", "application/pdf", "scan.pdf")]
    assert file_state(gemini.files[0]) == "ACTIVE"
    assert "attached medical document" in gemini.prompts[0]


@pytest.mark.anyio
async def test_convert_text_file_is_extracted_inline(current_user):
    gemini = FakeGemini()
    text = "The patient was admitted with chest pain and discharged in stable condition today."
    file_data = base64.b64encode(text.encode()).decode()

    await summaries_api.convert_to_patient_friendly(
        ConvertRequest(file_data=file_data, file_name="note.txt", mime_type="text/plain"),
        FakeDB(),
        current_user,
        gemini,
    )

    assert gemini.uploads == []
    assert text in gemini.prompts[0]


@pytest.mark.anyio
async def test_convert_unextractable_file_is_rejected(current_user):
    file_data = base64.b64encode(b"\x00\x01\x02").decode()

    with pytest.raises(HTTPException) as exc:
        await summaries_api.convert_to_patient_friendly(
            ConvertRequest(file_data=file_data, file_name="x.doc", mime_type="application/msword"),
            FakeDB(),
            current_user,
            FakeGemini(),
        )

    assert exc.value.status_code == 400


@pytest.mark.anyio
async def test_convert_oversized_file_is_413(current_user, monkeypatch):
    monkeypatch.setattr(summaries_api.settings, "max_upload_size", 4)
    file_data = base64.b64encode(b"0123456789").decode()

    with pytest.raises(HTTPException) as exc:
        await summaries_api.convert_to_patient_friendly(
            ConvertRequest(file_data=file_data, file_name="a.pdf", mime_type="application/pdf"),
            FakeDB(),
            current_user,
            FakeGemini(),
        )

    assert exc.value.status_code == 413


@pytest.mark.anyio
async def test_convert_provider_failure_propagates_and_saves_nothing(current_user):
    db = FakeDB()

    with pytest.raises(UpstreamServiceError):
        await summaries_api.convert_to_patient_friendly(
            ConvertRequest(medical_text="text", patient_name="Jane"),
            db,
            current_user,
            FakeGemini(fail=True),
        )

    assert db.added == []


@pytest.mark.anyio
async def test_list_summaries_runs_retention_sweep_first(current_user):
    prefs = SimpleNamespace(auto_delete_enabled=True, retention_hours=24)
    db = FakeDB(
        results=[
            FakeResult(prefs),
            FakeResult(rowcount=2),
            FakeResult(rows=[_summary_row()]),
        ]
    )

    items = await summaries_api.list_summaries(db, current_user)

    assert [item.id for item in items] == [SUMMARY_ID]
    assert str(db.executed[1]).startswith("DELETE FROM summaries")
    assert db.commits == 1


@pytest.mark.anyio
async def test_delete_summary_of_another_user_is_forbidden(current_user):
    db = FakeDB(results=[FakeResult(_summary_row(user_id=OTHER_USER_ID))])

    with pytest.raises(HTTPException) as exc:
        await summaries_api.delete_summary(SUMMARY_ID, db, current_user)

    assert exc.value.status_code == 403
    assert db.deleted == []


@pytest.mark.anyio
async def test_delete_missing_summary_is_404(current_user):
    with pytest.raises(HTTPException) as exc:
        await summaries_api.delete_summary(SUMMARY_ID, FakeDB(), current_user)

    assert exc.value.status_code == 404


@pytest.mark.anyio
async def test_chat_history_append_keeps_existing_turns(current_user):
    row = _summary_row(chat_history=[{"role": "user", "content": "What is CAP?"}])
    db = FakeDB(results=[FakeResult(row)])

    response = await summaries_api.append_chat_history(
        SUMMARY_ID,
        ChatHistoryAppend(turns=[ChatTurn(role="assistant", content="A lung infection.")]),
        db,
        current_user,
    )

    assert [turn.role for turn in response.chat_history] == ["user", "assistant"]
    assert row.chat_history[1]["content"] == "A lung infection."


@pytest.mark.anyio
async def test_long_assistant_reply_can_be_saved(current_user):
    reply = "Keep taking the antibiotic. " * 1000
    row = _summary_row(chat_history=[])
    db = FakeDB(results=[FakeResult(row)])

    payload = ChatHistoryAppend.model_validate(
        {"turns": [{"role": "user", "content": "Explain"}, {"role": "assistant", "content": reply}]}
    )
    await summaries_api.append_chat_history(SUMMARY_ID, payload, db, current_user)

    assert len(reply) > 8000
    assert row.chat_history[1]["content"] == reply
