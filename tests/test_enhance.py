import pytest

from sponsorship_reports.enhance.enhancer import EnhancementError, MissingApiKeyError, enhance_text
from sponsorship_reports.enhance.prompts import (
    DEFAULT_AI_CONFIG,
    EnhancementType,
    PromptSetting,
    render_prompt,
)
from sponsorship_reports.reports.records import make_request
from sponsorship_reports.reports.session import Session
from sponsorship_reports.store.settings_store import Role, User


class DummyModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return type("Resp", (), {"text": self.text})()


class DummyClient:
    def __init__(self, models):
        self.models = models


def _factory(models, seen_keys=None):
    def make(api_key):
        if seen_keys is not None:
            seen_keys.append(api_key)
        return DummyClient(models)

    return make


SETTING = PromptSetting(system_instruction="Be kind.", prompt_template="Context: {{context}}\nText: {{text}}")


def test_render_prompt_fills_placeholders():
    assert render_prompt(SETTING.prompt_template, "hello", "Child Name: Abir") == "Context: Child Name: Abir\nText: hello"


def test_empty_text_makes_no_call():
    models = DummyModels(text="unused")
    assert enhance_text("", SETTING, "", "", client_factory=_factory(models)) == ""
    assert models.calls == []


def test_missing_key_raises():
    models = DummyModels(text="unused")
    with pytest.raises(MissingApiKeyError):
        enhance_text("he go school", SETTING, "", "", client_factory=_factory(models))
    assert models.calls == []


def test_enhance_text_calls_model_with_settings():
    models = DummyModels(text="  He goes to school.  ")
    keys = []
    out = enhance_text(
        "he go school",
        SETTING,
        "Child Name: Abir",
        "key-123",
        model="gemini-test",
        temperature=0.1,
        client_factory=_factory(models, keys),
    )
    assert out == "He goes to school."
    assert keys == ["key-123"]
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"] == "Context: Child Name: Abir\nText: he go school"
    assert call["config"].system_instruction == "Be kind."
    assert call["config"].temperature == 0.1


def test_blank_answer_keeps_original():
    models = DummyModels(text="")
    assert enhance_text("original", SETTING, "", "k", client_factory=_factory(models)) == "original"


def test_client_failure_is_wrapped():
    models = DummyModels(error=RuntimeError("quota"))
    with pytest.raises(EnhancementError, match="Failed to enhance text"):
        enhance_text("text", SETTING, "", "k", client_factory=_factory(models))


def _session(allow_ai):
    user = User(username="u", name="Tester", role=Role.USER, allow_ai=allow_ai)
    return Session(user=user, defaults={}, ai_config=dict(DEFAULT_AI_CONFIG), api_key="k")


def test_session_enhance_requires_permission():
    with pytest.raises(PermissionError):
        _session(False).enhance("text", EnhancementType.CHILD_NARRATIVE, client_factory=_factory(DummyModels("x")))


def test_session_enhance_field_uses_record_context():
    models = DummyModels(text="Polished.")
    request = make_request("apr", {"child_name": "Abir", "grade": "4", "aim_in_life": "Doctor", "teachers_remarks": "good boy"})
    out = _session(True).enhance_field(request, "teachers_remarks", client_factory=_factory(models))
    assert out == "Polished."
    contents = models.calls[0]["contents"]
    assert "good boy" in contents
    assert "Child Name: Abir, Age/Grade: 4, Aim: Doctor" in contents
    expected = DEFAULT_AI_CONFIG[EnhancementType.TEACHER_EVALUATION].system_instruction
    assert models.calls[0]["config"].system_instruction == expected


def test_session_enhance_field_rejects_plain_fields():
    request = make_request("chp", {"child_name": "Mim"})
    with pytest.raises(KeyError):
        _session(True).enhance_field(request, "child_name")
