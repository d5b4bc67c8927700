from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..enhance.prompts import DEFAULT_AI_CONFIG, EnhancementType, PromptSetting
from ..logging_utils import get_logger
from ..reports.records import AprRecord
from ..utils import ensure_dir, sha256_text

logger = get_logger(__name__)


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


@dataclass
class User:
    username: str
    name: str
    role: Role = Role.USER
    allow_ai: bool = False
    password_sha256: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "User":
        return User(
            username=str(data["username"]),
            name=str(data.get("name", "")),
            role=Role(data.get("role", Role.USER.value)),
            allow_ai=bool(data.get("allow_ai", False)),
            password_sha256=str(data.get("password_sha256", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "name": self.name,
            "role": self.role.value,
            "allow_ai": self.allow_ai,
            "password_sha256": self.password_sha256,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        data = self.to_dict()
        data.pop("password_sha256")
        return data


DEFAULT_USERS = [
    {"username": "admin", "password": "123", "role": "ADMIN", "name": "System Administrator", "allow_ai": True},
    {"username": "user", "password": "123", "role": "USER", "name": "General User", "allow_ai": False},
]


@dataclass
class SettingsStore:
    """JSON-file store for app defaults, prompt settings and user accounts.

    Layout::

        {"defaults": {...}, "ai_configs": {TYPE: {...}}, "users": [{...}]}
    """

    path: Path
    seed_users: bool = True
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self) -> None:
        ensure_dir(self.path.parent)
        if not self.path.exists():
            users = [self._seed_user(u).to_dict() for u in DEFAULT_USERS] if self.seed_users else []
            self._write({"defaults": {}, "ai_configs": {}, "users": users})
            logger.info(f"Initialized settings store at {self.path}")

    @staticmethod
    def _seed_user(data: Mapping[str, Any]) -> User:
        user = User.from_dict(data)
        user.password_sha256 = sha256_text(str(data["password"]))
        return user

    def _read(self) -> Dict[str, Any]:
        data = json.loads(self.path.read_text(encoding="utf-8")) or {}
        data.setdefault("defaults", {})
        data.setdefault("ai_configs", {})
        data.setdefault("users", [])
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # -------- defaults --------

    def get_defaults(self) -> Dict[str, str]:
        return dict(self._read()["defaults"])

    def save_defaults(self, defaults: Mapping[str, Any]) -> Dict[str, str]:
        clean = AprRecord.normalize(defaults)
        with self._lock:
            data = self._read()
            data["defaults"] = clean
            self._write(data)
        return clean

    # -------- prompt settings --------

    def get_ai_config(self) -> Dict[EnhancementType, PromptSetting]:
        config = dict(DEFAULT_AI_CONFIG)
        for key, row in self._read()["ai_configs"].items():
            try:
                config[EnhancementType(key)] = PromptSetting.from_dict(row)
            except ValueError:
                logger.warning(f"Ignoring prompt setting for unknown enhancement type: {key}")
        return config

    def save_prompt(self, enhancement_type: Union[EnhancementType, str], setting: PromptSetting) -> None:
        key = EnhancementType(enhancement_type).value
        with self._lock:
            data = self._read()
            data["ai_configs"][key] = setting.to_dict()
            self._write(data)

    # -------- users --------

    def list_users(self) -> List[User]:
        return [User.from_dict(u) for u in self._read()["users"]]

    def get_user(self, username: str) -> Optional[User]:
        for user in self.list_users():
            if user.username == username:
                return user
        return None

    def upsert_user(self, user: User, password: Optional[str] = None) -> User:
        """Insert or update by username. A new user needs a password; an update may keep the old one."""
        with self._lock:
            data = self._read()
            users = [User.from_dict(u) for u in data["users"]]
            existing = next((u for u in users if u.username == user.username), None)

            if password:
                user.password_sha256 = sha256_text(password)
            elif existing is not None:
                user.password_sha256 = existing.password_sha256
            elif not user.password_sha256:
                raise ValueError(f"Password required for new user: {user.username}")

            if existing is None:
                users.append(user)
            else:
                users = [user if u.username == user.username else u for u in users]
            data["users"] = [u.to_dict() for u in users]
            self._write(data)
        return user

    def delete_user(self, username: str) -> bool:
        with self._lock:
            data = self._read()
            kept = [u for u in data["users"] if u.get("username") != username]
            if len(kept) == len(data["users"]):
                return False
            data["users"] = kept
            self._write(data)
        return True

    def authenticate(self, username: str, password: str) -> Optional[User]:
        user = self.get_user(username)
        if user is None or not password or user.password_sha256 != sha256_text(password):
            return None
        return user
