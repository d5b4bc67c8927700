from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def today_stamp(today: Optional[date] = None) -> str:
    """Today's date as DD.MM.YYYY, the format used on printed reports."""
    d = today or date.today()
    return d.strftime("%d.%m.%Y")


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_repo_root() -> Path:
    # Assumes this file is src/sponsorship_reports/utils.py
    return Path(__file__).resolve().parents[2]


def env_path(key: str, default: Optional[str] = None) -> Optional[Path]:
    val = os.getenv(key, default)
    if val is None or val == "":
        return None
    return Path(val)


@dataclass(frozen=True)
class ResolvedPaths:
    repo_root: Path
    data_dir: Path
    output_dir: Path


def resolve_paths(data_dir_cfg: str = "", output_dir_cfg: str = "") -> ResolvedPaths:
    """Resolve directories with a priority:

    1) explicit config value (if non-empty)
    2) environment variables
    3) repo defaults
    """
    repo_root = get_repo_root()

    data_dir = Path(data_dir_cfg) if data_dir_cfg else (env_path("SPONSORSHIP_DATA_DIR") or (repo_root / "data"))
    output_dir = (
        Path(output_dir_cfg)
        if output_dir_cfg
        else (env_path("SPONSORSHIP_OUTPUT_DIR") or (repo_root / "exports"))
    )

    ensure_dir(data_dir)
    ensure_dir(output_dir)

    return ResolvedPaths(repo_root=repo_root, data_dir=data_dir, output_dir=output_dir)
