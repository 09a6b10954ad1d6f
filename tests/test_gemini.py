from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from liaise.errors import UpstreamServiceError
from liaise.services import gemini
from liaise.services.gemini import GeminiService, file_state


def _file(state):
    return genai_types.File(
        name="files/abc",
        uri="https://gemini.test/v1beta/files/abc",
        mime_type="application/pdf",
        state=state,
    )


class FakeFiles:
    def __init__(self, states=(), error=None):
        self.states = list(states)
        self.error = error
        self.uploads = []
        self.lookups = []

    async def upload(self, *, file, config):
        self.uploads.append((file.read(), config))
        if self.error:
            raise self.error
        return _file(genai_types.FileState.PROCESSING)

    async def get(self, *, name):
        self.lookups.append(name)
        return _file(self.states.pop(0) if self.states else genai_types.FileState.PROCESSING)


class FakeModels:
    def __init__(self, text="Hello there", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def _service(files=None, models=None, max_poll_attempts=3):
    sleeps = []

    async def _sleep(seconds):
        sleeps.append(seconds)

    client = SimpleNamespace(
        aio=SimpleNamespace(files=files or FakeFiles(), models=models or FakeModels())
    )
    service = GeminiService(
        client,
        model="gemini-test",
        poll_interval=2.0,
        max_poll_attempts=max_poll_attempts,
        sleep=_sleep,
    )
    return service, sleeps


@pytest.mark.anyio
async def test_upload_sends_bytes_with_mime_type_and_display_name():
    files = FakeFiles()
    service, _ = _service(files=files)

    uploaded = await service.upload_file(b"%PDF-data", "application/pdf", "discharge.pdf")

    assert uploaded.name == "files/abc"
    assert file_state(uploaded) == "PROCESSING"
    data, config = files.uploads[0]
    assert data == b"%PDF-data"
    assert config.mime_type == "application/pdf"
    assert config.display_name == "discharge.pdf"


@pytest.mark.anyio
async def test_wait_until_active_polls_until_ready():
    files = FakeFiles(states=[genai_types.FileState.PROCESSING, genai_types.FileState.ACTIVE])
    service, sleeps = _service(files=files)

    active = await service.wait_until_active(_file(genai_types.FileState.PROCESSING))

    assert file_state(active) == "ACTIVE"
    assert files.lookups == ["files/abc", "files/abc"]
    assert sleeps == [2.0, 2.0]


@pytest.mark.anyio
async def test_wait_until_active_gives_up_after_attempt_cap():
    files = FakeFiles()
    service, sleeps = _service(files=files, max_poll_attempts=3)

    with pytest.raises(UpstreamServiceError):
        await service.wait_until_active(_file(genai_types.FileState.PROCESSING))
    assert len(files.lookups) == 3
    assert len(sleeps) == 3


@pytest.mark.anyio
async def test_failed_file_state_raises_immediately():
    files = FakeFiles()
    service, sleeps = _service(files=files)

    with pytest.raises(UpstreamServiceError):
        await service.wait_until_active(_file(genai_types.FileState.FAILED))
    assert sleeps == []
    assert files.lookups == []


@pytest.mark.anyio
async def test_generate_references_uploaded_file_before_prompt():
    models = FakeModels()
    service, _ = _service(models=models)

    text = await service.generate("Summarize", _file(genai_types.FileState.ACTIVE))

    assert text == "Hello there"
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    file_part, prompt = call["contents"]
    assert file_part.file_data.file_uri == "https://gemini.test/v1beta/files/abc"
    assert file_part.file_data.mime_type == "application/pdf"
    assert prompt == "Summarize"
    assert call["config"].max_output_tokens == gemini.settings.gemini_max_output_tokens


@pytest.mark.anyio
async def test_provider_errors_become_upstream_errors():
    error = genai_errors.ClientError(
        429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
    )
    service, _ = _service(models=FakeModels(error=error))

    with pytest.raises(UpstreamServiceError) as exc:
        await service.generate("Summarize")
    assert exc.value.provider == "gemini"
    assert exc.value.status_code == 429


@pytest.mark.anyio
async def test_network_errors_become_upstream_errors():
    error = httpx.ConnectError("unreachable")
    service, _ = _service(files=FakeFiles(error=error))

    with pytest.raises(UpstreamServiceError):
        await service.upload_file(b"data", "application/pdf", "scan.pdf")


@pytest.mark.anyio
@pytest.mark.parametrize("text", [None, "", "   "])
async def test_empty_generation_is_an_upstream_error(text):
    service, _ = _service(models=FakeModels(text=text))

    with pytest.raises(UpstreamServiceError):
        await service.generate("Summarize")


def test_missing_api_key_is_an_upstream_error(monkeypatch):
    monkeypatch.setattr(gemini.settings, "google_ai_api_key", None)

    with pytest.raises(UpstreamServiceError):
        gemini.get_gemini_service()
