from __future__ import annotations

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from .utils import get_repo_root

CONFIG_ENV_VAR = "SPONSORSHIP_APP_CONFIG"

# Values used for any key the YAML file leaves out.
DEFAULT_CONFIG: Dict[str, Any] = {
    "paths": {"data_dir": "", "output_dir": ""},
    "assets": {
        "logo_url": "",
        "logo_base64_path": "",
        "fetch_attempts": 2,
        "retry_delay_s": 0.5,
        "timeout_s": 10,
    },
    "enhance": {"model": "", "temperature": 0.3},
    "store": {"settings_file_name": "settings.json"},
    "api": {"session_idle_ttl_s": 28800},
    "logging": {"level": "INFO", "json": True, "exports_log_name": "exports.jsonl"},
}

_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def load_env(env_path: Optional[str] = None) -> None:
    """Load .env if present."""
    if env_path:
        load_dotenv(env_path)
        return
    default = get_repo_root() / ".env"
    if default.exists():
        load_dotenv(str(default))


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def env_interpolate(value: Any) -> Any:
    """Replace ${VAR} in strings; unset variables become ""."""
    if isinstance(value, str):
        return _VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: env_interpolate(v) for k, v in value.items()}
    if isinstance(value, list):
        return [env_interpolate(v) for v in value]
    return value


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = merge_config(out[key], value)
        else:
            out[key] = value
    return out


def load_config(path_str: str) -> Dict[str, Any]:
    path = Path(path_str)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    cfg = env_interpolate(load_yaml(path))
    return merge_config(DEFAULT_CONFIG, cfg)


def default_config_path() -> str:
    return os.getenv(CONFIG_ENV_VAR) or str(get_repo_root() / "configs" / "app.yaml")


def load_app_config(path_str: Optional[str] = None) -> Dict[str, Any]:
    """.env first, so ${VAR} placeholders and the config path can come from it."""
    load_env()
    return load_config(path_str or default_config_path())
