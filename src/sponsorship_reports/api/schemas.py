from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..enhance.prompts import EnhancementType


class LoginRequest(BaseModel):
    username: str
    password: str
    api_key: str = Field(default="", description="Gemini API key used for enhancement in this session")


class UserOut(BaseModel):
    username: str
    name: str
    role: str
    allow_ai: bool = False


class LoginResponse(BaseModel):
    token: str
    user: UserOut


class UserIn(BaseModel):
    username: str
    name: str
    role: str = "USER"
    allow_ai: bool = False
    password: Optional[str] = Field(default=None, description="Required for new users; omit to keep the current one")


class ExportRequest(BaseModel):
    record: Dict[str, Any] = Field(default_factory=dict, description="Flat record fields, snake_case or camelCase")


class EnhanceRequest(BaseModel):
    text: str = ""
    enhancement_type: EnhancementType
    context: str = ""


class EnhanceResponse(BaseModel):
    text: str


class PromptSettingIn(BaseModel):
    system_instruction: str
    prompt_template: str
