from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `src/` is on sys.path so tests work without installing the package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep settings, export logs and documents out of the repository."""
    monkeypatch.setenv("SPONSORSHIP_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SPONSORSHIP_OUTPUT_DIR", str(tmp_path / "exports"))
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    return tmp_path
