from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Optional, Union

from ..enhance.enhancer import DEFAULT_MODEL, DEFAULT_TEMPERATURE, enhance_text
from ..enhance.prompts import EnhancementType, PromptSetting
from ..logging_utils import get_logger
from ..store.settings_store import SettingsStore, User
from .records import (
    ENHANCEABLE_FIELDS,
    AprRecord,
    ChpRecord,
    ReportKind,
    ReportRequest,
    apply_defaults,
    enhancement_context,
    make_request,
)

logger = get_logger(__name__)


class AuthenticationError(Exception):
    pass


@dataclass
class Session:
    """Everything one logged-in user's builder needs, passed explicitly."""

    user: User
    defaults: Dict[str, str]
    ai_config: Dict[EnhancementType, PromptSetting]
    api_key: str = ""
    token: str = field(default_factory=lambda: secrets.token_urlsafe(24))

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin

    def new_record(self, kind: Union[ReportKind, str], today: Optional[date] = None) -> Union[AprRecord, ChpRecord]:
        return apply_defaults(kind, self.defaults, prepared_by=self.user.name, today=today)

    def new_request(self, kind: Union[ReportKind, str], today: Optional[date] = None) -> ReportRequest:
        return make_request(kind, self.new_record(kind, today=today).to_dict())

    def enhance(
        self,
        text: str,
        enhancement_type: Union[EnhancementType, str],
        context: str = "",
        *,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client_factory: Optional[Callable[[str], Any]] = None,
    ) -> str:
        if not self.user.allow_ai:
            raise PermissionError(f"AI enhancement is disabled for user {self.user.username}")
        setting = self.ai_config[EnhancementType(enhancement_type)]
        return enhance_text(
            text,
            setting,
            context,
            self.api_key,
            model=model,
            temperature=temperature,
            client_factory=client_factory,
        )

    def enhance_field(self, request: ReportRequest, field_name: str, **kwargs: Any) -> str:
        """Enhance one narrative field of a record, using the record's child context."""
        slots = ENHANCEABLE_FIELDS[request.kind]
        if field_name not in slots:
            raise KeyError(f"Field {field_name} of {request.kind.value} cannot be enhanced")
        return self.enhance(
            getattr(request.record, field_name),
            slots[field_name],
            enhancement_context(request),
            **kwargs,
        )


def login(store: SettingsStore, username: str, password: str, api_key: str = "") -> Session:
    user = store.authenticate(username, password)
    if user is None:
        logger.warning(f"Failed login for {username!r}")
        raise AuthenticationError("Invalid credentials")
    return Session(
        user=user,
        defaults=store.get_defaults(),
        ai_config=store.get_ai_config(),
        api_key=api_key or os.getenv("GEMINI_API_KEY", ""),
    )
