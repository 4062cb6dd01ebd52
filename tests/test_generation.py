import base64
from types import SimpleNamespace

import pytest

from inkflow import generation
from inkflow.errors import (
    InvalidNameError,
    MissingCredentialError,
    NoImageDataError,
    RemoteServiceError,
)
from inkflow.generation import (
    SYSTEM_INSTRUCTION,
    build_prompt,
    create_client,
    extract_image_data_uri,
    generate_signature,
)
from inkflow.models.core_models import CalligraphyStyle
from inkflow.models.settings_models import GenerationParams, InkflowSettings


def make_response(*parts):
    content = SimpleNamespace(parts=list(parts))
    return SimpleNamespace(candidates=[SimpleNamespace(content=content)])


def text_part(text):
    return SimpleNamespace(text=text, inline_data=None)


def image_part(data, mime_type="image/png"):
    return SimpleNamespace(
        text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type)
    )


class FakeClient:
    """Stands in for genai.Client; records calls to models.generate_content."""

    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response
        self._error = error
        self.models = self

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response


@pytest.fixture
def settings():
    return InkflowSettings(api_key="test-key")


def test_build_prompt_mentions_name_and_style():
    prompt = build_prompt("李白", CalligraphyStyle.CURSIVE)
    assert '"李白"' in prompt
    assert "草书 (Cursive)" in prompt
    assert "white" in prompt


def test_generate_returns_data_uri(settings):
    client = FakeClient(make_response(text_part("here you go"), image_part(b"\x89PNG")))

    signature = generate_signature("李白", CalligraphyStyle.REGULAR, settings, client=client)

    assert signature.url == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
    assert signature.name == "李白"
    assert signature.style is CalligraphyStyle.REGULAR
    assert signature.id


def test_generate_sends_model_and_system_instruction(settings):
    client = FakeClient(make_response(image_part(b"img")))
    params = GenerationParams(model="custom-image-model")

    generate_signature(" 张三 ", CalligraphyStyle.ARTISTIC, settings, params, client=client)

    call = client.calls[0]
    assert call["model"] == "custom-image-model"
    assert call["config"].system_instruction == SYSTEM_INSTRUCTION
    assert '"张三"' in call["contents"]


def test_missing_credential_message_mentions_api_key():
    client = FakeClient(make_response(image_part(b"img")))
    with pytest.raises(MissingCredentialError) as excinfo:
        generate_signature("李白", CalligraphyStyle.CURSIVE, InkflowSettings(), client=client)

    assert "API key" in excinfo.value.user_message
    assert client.calls == []


def test_blank_name_rejected(settings):
    with pytest.raises(InvalidNameError):
        generate_signature("   ", CalligraphyStyle.CURSIVE, settings, client=FakeClient())


def test_remote_failure_is_wrapped(settings):
    client = FakeClient(error=RuntimeError("503 Service Unavailable"))
    with pytest.raises(RemoteServiceError) as excinfo:
        generate_signature("李白", CalligraphyStyle.CURSIVE, settings, client=client)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_client_construction_failure_is_wrapped(settings, monkeypatch):
    def reject(settings, params):
        raise ValueError("invalid base_url")

    monkeypatch.setattr(generation, "create_client", reject)
    with pytest.raises(RemoteServiceError) as excinfo:
        generate_signature("李白", CalligraphyStyle.CURSIVE, settings)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_no_image_payload_has_distinct_message(settings):
    client = FakeClient(make_response(text_part("I can only write text.")))
    with pytest.raises(NoImageDataError) as excinfo:
        generate_signature("李白", CalligraphyStyle.CURSIVE, settings, client=client)

    message = excinfo.value.user_message
    assert "no image data" in message
    assert message != RemoteServiceError.user_message


def test_extract_handles_empty_candidates():
    with pytest.raises(NoImageDataError):
        extract_image_data_uri(SimpleNamespace(candidates=None))
    with pytest.raises(NoImageDataError):
        extract_image_data_uri(
            SimpleNamespace(candidates=[SimpleNamespace(content=None)])
        )


def test_extract_keeps_mime_type_and_string_payload():
    response = make_response(image_part("QUJD", mime_type="image/jpeg"))
    assert extract_image_data_uri(response) == "data:image/jpeg;base64,QUJD"


def test_extract_defaults_mime_type():
    response = make_response(image_part(b"abc", mime_type=None))
    assert extract_image_data_uri(response).startswith("data:image/png;base64,")


def test_create_client_requires_credential():
    with pytest.raises(MissingCredentialError):
        create_client(InkflowSettings(base_url="https://proxy.example"))


def test_create_client_with_base_url():
    client = create_client(
        InkflowSettings(api_key="k", base_url="https://proxy.example")
    )
    assert hasattr(client, "models")
