from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

from docx.document import Document as DocxDocument

from ..logging_utils import get_logger
from ..utils import ensure_dir

logger = get_logger(__name__)

DOCX_EXTENSION = "docx"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_ILLEGAL_CHARS = re.compile(r'[\\/:*?"<>|]')
_WHITESPACE = re.compile(r"\s+")


class DocumentExportError(RuntimeError):
    def __init__(self, message: str = "Failed to generate document.") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class PackagedDocument:
    filename: str
    content: bytes


def _sanitize(value: Optional[str]) -> str:
    if not value:
        return ""
    return _WHITESPACE.sub(" ", _ILLEGAL_CHARS.sub("", value)).strip()


def sanitize_filename(aid_no: Optional[str], child_name: Optional[str], ext: str = DOCX_EXTENSION) -> str:
    return f"{_sanitize(aid_no) or 'AID'} - {_sanitize(child_name) or 'Child'}.{ext}"


def serialize_document(document: DocxDocument) -> bytes:
    buf = BytesIO()
    try:
        document.save(buf)
    except Exception as e:
        logger.error(f"Document serialization failed: {e}", exc_info=True)
        raise DocumentExportError() from e
    return buf.getvalue()


def package_document(document: DocxDocument, record) -> PackagedDocument:
    """Serialize in memory and name the file from the record's aid number and child name."""
    return PackagedDocument(
        filename=sanitize_filename(record.aid_no, record.child_name),
        content=serialize_document(document),
    )


def save_document(document: DocxDocument, record, out_dir: Path) -> Path:
    """Write the document into ``out_dir``; nothing is left behind on failure."""
    packaged = package_document(document, record)
    ensure_dir(out_dir)
    target = out_dir / packaged.filename

    fd, tmp_name = tempfile.mkstemp(dir=str(out_dir), prefix=".export-", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(packaged.content)
        os.replace(tmp_name, target)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        logger.error(f"Could not write {target}: {e}")
        raise DocumentExportError() from e

    logger.info(f"Saved document to {target}")
    return target
