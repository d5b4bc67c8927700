from __future__ import annotations

from typing import Any, Callable, Optional

from ..logging_utils import get_logger
from .prompts import PromptSetting, render_prompt

logger = get_logger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_TEMPERATURE = 0.3


class EnhancementError(RuntimeError):
    pass


class MissingApiKeyError(EnhancementError):
    pass


def _gemini_client(api_key: str) -> Any:
    from google import genai

    return genai.Client(api_key=api_key)


def enhance_text(
    text: str,
    setting: PromptSetting,
    context: str = "",
    api_key: str = "",
    *,
    model: str = DEFAULT_MODEL,
    temperature: float = DEFAULT_TEMPERATURE,
    client_factory: Optional[Callable[[str], Any]] = None,
) -> str:
    """Return a polished replacement for ``text``.

    Empty input returns "" without calling the model. A blank model answer keeps
    the original text.
    """
    if not text:
        return ""
    if not api_key:
        raise MissingApiKeyError("API Key is missing. Please set it before using enhancement.")

    from google.genai import types as genai_types

    prompt = render_prompt(setting.prompt_template, text, context)
    client = (client_factory or _gemini_client)(api_key)
    try:
        response = client.models.generate_content(
            model=model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=setting.system_instruction,
                temperature=temperature,
            ),
        )
    except Exception as e:
        logger.error(f"Gemini API error: {e}")
        raise EnhancementError("Failed to enhance text. Please check your API Key and connection.") from e

    result = (getattr(response, "text", None) or "").strip()
    return result or text
