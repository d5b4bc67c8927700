from __future__ import annotations

import base64
import binascii
import re
import time
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import requests
from docx.image.image import Image as DocxImage

from ..logging_utils import get_logger

logger = get_logger(__name__)

LOGO_URL = "https://adra.org.nz/wp-content/uploads/2021/08/ADRA-Horizontal-Logo.png"

# Build-time logo. When non-empty the network fetch is skipped.
LOGO_BASE64 = ""

# 1x1 transparent PNG
FALLBACK_IMAGE_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)

_DATA_URL_PREFIX = re.compile(r"^data:image/(png|jpg|jpeg);base64,")
_WHITESPACE = re.compile(r"\s+")


@lru_cache(maxsize=8)
def decode_base64_image(encoded: str) -> bytes:
    """Decode base64 text (optionally a data URL) into image bytes.

    Raises ValueError when the text is not base64 or not a recognizable image.
    """
    # Line-wrapped base64 (e.g. `base64 logo.png`) is accepted.
    clean = _WHITESPACE.sub("", _DATA_URL_PREFIX.sub("", encoded.strip()))
    try:
        blob = base64.b64decode(clean, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image: {e}") from e
    _check_image(blob)
    return blob


def fallback_image_bytes() -> bytes:
    return decode_base64_image(FALLBACK_IMAGE_BASE64)


def _check_image(blob: bytes) -> None:
    try:
        DocxImage.from_blob(blob)
    except Exception as e:
        raise ValueError(f"Unrecognized image data: {e}") from e


def read_embedded_logo(path: Optional[str]) -> str:
    """Read base64 logo text from a file; empty when unset or missing."""
    if not path:
        return ""
    p = Path(path)
    if not p.exists():
        logger.warning(f"Embedded logo file not found: {p}")
        return ""
    return p.read_text(encoding="utf-8").strip()


def get_image_bytes(
    primary_url: str = LOGO_URL,
    *,
    embedded: Optional[str] = None,
    attempts: int = 2,
    delay_s: float = 0.5,
    timeout_s: float = 10.0,
    http: Optional[Any] = None,
) -> bytes:
    """Return logo image bytes; never raises.

    Priority:
    1) embedded base64 constant (``embedded`` or LOGO_BASE64)
    2) HTTP GET of ``primary_url``, ``attempts`` tries with ``delay_s`` between them
    3) embedded 1x1 transparent placeholder
    """
    encoded = LOGO_BASE64 if embedded is None else embedded
    if encoded:
        try:
            return decode_base64_image(encoded)
        except ValueError as e:
            logger.error(f"Invalid embedded logo, falling back to network: {e}")

    client = http or requests
    for i in range(attempts):
        try:
            resp = client.get(primary_url, timeout=timeout_s)
            if not 200 <= resp.status_code < 300:
                raise requests.HTTPError(f"Status: {resp.status_code}")
            blob = resp.content
            _check_image(blob)
            return blob
        except Exception as e:
            logger.warning(f"Attempt {i + 1} to load logo failed: {e}")
            if i < attempts - 1:
                time.sleep(delay_s)

    logger.warning("Using fallback image due to network errors.")
    return fallback_image_bytes()
