from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator

from ..utils import ensure_dir, sha256_text


@dataclass
class ExportLogger:
    path: Path

    def __post_init__(self) -> None:
        ensure_dir(self.path.parent)

    def log(self, *, report_kind: str, filename: str, size_bytes: int, aid_no: str) -> None:
        # Aid numbers identify children; only a hash is kept.
        record: Dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "report_kind": report_kind,
            "filename": filename,
            "size_bytes": int(size_bytes),
            "aid_sha256": sha256_text(aid_no or ""),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")


def read_export_log(path: Path) -> Iterator[Dict[str, Any]]:
    if not path.exists():
        return
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                continue
