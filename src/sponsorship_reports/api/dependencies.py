from __future__ import annotations

import threading
import time
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Set

from fastapi import Depends, Header, HTTPException

from ..config import default_config_path, load_app_config
from ..docgen.builder import ReportExporter
from ..factory import build_exporter, build_store
from ..logging_utils import configure_logging, get_logger
from ..reports.session import Session
from ..store.settings_store import SettingsStore

logger = get_logger(__name__)

DEFAULT_IDLE_TTL_S = 8 * 60 * 60


class SessionRegistry:
    """In-memory token -> Session map for logged-in API clients.

    A session idle for longer than ``idle_ttl_s`` is dropped on the next lookup
    or login. Sessions do not survive a restart.
    """

    def __init__(self, idle_ttl_s: float = DEFAULT_IDLE_TTL_S, clock: Callable[[], float] = time.monotonic) -> None:
        self.idle_ttl_s = idle_ttl_s
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._last_seen: Dict[str, float] = {}
        self._busy: Set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _drop(self, token: str) -> None:
        self._sessions.pop(token, None)
        self._last_seen.pop(token, None)
        self._busy.discard(token)

    def _prune(self, now: float) -> None:
        expired = [t for t, seen in self._last_seen.items() if now - seen > self.idle_ttl_s and t not in self._busy]
        for token in expired:
            self._drop(token)
        if expired:
            logger.info(f"Expired {len(expired)} idle session(s)")

    def add(self, session: Session) -> str:
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._sessions[session.token] = session
            self._last_seen[session.token] = now
        return session.token

    def get(self, token: str) -> Optional[Session]:
        with self._lock:
            now = self._clock()
            self._prune(now)
            session = self._sessions.get(token)
            if session is not None:
                self._last_seen[token] = now
            return session

    def remove(self, token: str) -> None:
        with self._lock:
            self._drop(token)

    def begin_export(self, token: str) -> bool:
        """Mark an export in flight for this session; False if one already is."""
        with self._lock:
            if token in self._busy:
                return False
            self._busy.add(token)
            return True

    def end_export(self, token: str) -> None:
        with self._lock:
            self._busy.discard(token)


@lru_cache(maxsize=1)
def get_app_config() -> Dict[str, Any]:
    cfg = load_app_config()
    configure_logging(cfg)
    logger.info(f"Loaded app config: {default_config_path()}")
    return cfg


@lru_cache(maxsize=1)
def get_store() -> SettingsStore:
    return build_store(get_app_config())


@lru_cache(maxsize=1)
def get_exporter() -> ReportExporter:
    return build_exporter(get_app_config())


@lru_cache(maxsize=1)
def get_session_registry() -> SessionRegistry:
    ttl = get_app_config().get("api", {}).get("session_idle_ttl_s", DEFAULT_IDLE_TTL_S)
    return SessionRegistry(idle_ttl_s=float(ttl))


def get_enhance_settings() -> Dict[str, Any]:
    return dict(get_app_config().get("enhance", {}))


def get_session(
    x_session_token: str = Header(default=""),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Session:
    session = registry.get(x_session_token) if x_session_token else None
    if session is None:
        raise HTTPException(status_code=401, detail="Not logged in")
    return session


def require_admin(session: Session = Depends(get_session)) -> Session:
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Admin role required")
    return session
