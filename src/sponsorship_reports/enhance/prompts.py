from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping


class EnhancementType(str, Enum):
    CHILD_NARRATIVE = "CHILD_NARRATIVE"
    TEACHER_EVALUATION = "TEACHER_EVALUATION"
    CASE_HISTORY_NARRATIVE = "CASE_HISTORY_NARRATIVE"


@dataclass(frozen=True)
class PromptSetting:
    system_instruction: str
    prompt_template: str

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "PromptSetting":
        return PromptSetting(
            system_instruction=str(data.get("system_instruction", "") or ""),
            prompt_template=str(data.get("prompt_template", "") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "system_instruction": self.system_instruction,
            "prompt_template": self.prompt_template,
        }


DEFAULT_AI_CONFIG: Dict[EnhancementType, PromptSetting] = {
    EnhancementType.CHILD_NARRATIVE: PromptSetting(
        system_instruction=(
            "You are a helpful assistant polishing text for a child's sponsorship report. "
            "You should adopt a simple and positive tone suitable for a child when writing in first person, "
            "or a clear descriptive tone when describing surroundings."
        ),
        prompt_template=(
            "Refine the following text. If the context implies a personal story or future aim, "
            "use the first person ('I am', 'I want'). If it is a description of a place (home, school), "
            "keep it descriptive. \n\nKeep the response strictly under 90 words. \n"
            "Format as a single paragraph. \nReturn only the result.\n\n"
            "Text: \"{{text}}\"\n\nContext: {{context}}"
        ),
    ),
    EnhancementType.TEACHER_EVALUATION: PromptSetting(
        system_instruction="You are a school teacher writing a report card comment. Output ONLY the final text.",
        prompt_template=(
            "Rewrite the remarks to be professional, encouraging, and specific. Use standard educational phrasing. "
            "Keep the response strictly under 30 words. Format as a single paragraph. Return only the result.\n\n"
            "Text: \"{{text}}\"\n\nContext: {{context}}"
        ),
    ),
    EnhancementType.CASE_HISTORY_NARRATIVE: PromptSetting(
        system_instruction=(
            "You are a social worker preparing a case history profile for a child sponsorship program. "
            "Maintain a professional, empathetic, and descriptive tone."
        ),
        prompt_template=(
            "Expand and polish the following details into a concise narrative paragraph. "
            "Ensure it flows well and highlights key details. \n\nKeep it under 60 words.\n\n"
            "Text: \"{{text}}\"\n\nContext: {{context}}"
        ),
    ),
}


def render_prompt(template: str, text: str, context: str = "") -> str:
    """Fill the first {{text}} and the first {{context}} placeholder, in that order."""
    return template.replace("{{text}}", text, 1).replace("{{context}}", context, 1)
