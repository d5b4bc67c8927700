from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from docx.document import Document as DocxDocument

from ..logging_utils import get_logger
from ..monitoring.export_log import ExportLogger
from ..reports.records import AprRequest, CaseHistoryRequest, ReportRequest
from .assets import LOGO_URL, get_image_bytes
from .composers import build_apr, build_chp
from .packager import PackagedDocument, package_document, save_document

logger = get_logger(__name__)


def build_document(request: ReportRequest, image_bytes: bytes) -> DocxDocument:
    if isinstance(request, AprRequest):
        return build_apr(request.record, image_bytes)
    if isinstance(request, CaseHistoryRequest):
        return build_chp(request.record, image_bytes)
    raise TypeError(f"Unsupported report request: {type(request).__name__}")


@dataclass
class ReportExporter:
    """Single-pass export pipeline: logo -> composer -> packager.

    Holds no per-export state. Callers that must prevent overlapping exports
    for one user serialize calls themselves.
    """

    output_dir: Path
    logo_url: str = LOGO_URL
    embedded_logo: Optional[str] = None
    fetch_attempts: int = 2
    retry_delay_s: float = 0.5
    timeout_s: float = 10.0
    export_log: Optional[ExportLogger] = None
    image_loader: Optional[Callable[[], bytes]] = None

    def load_logo(self) -> bytes:
        if self.image_loader is not None:
            return self.image_loader()
        return get_image_bytes(
            self.logo_url,
            embedded=self.embedded_logo,
            attempts=self.fetch_attempts,
            delay_s=self.retry_delay_s,
            timeout_s=self.timeout_s,
        )

    def compose(self, request: ReportRequest) -> DocxDocument:
        return build_document(request, self.load_logo())

    def render(self, request: ReportRequest) -> PackagedDocument:
        """Build and serialize in memory, for streaming to a client."""
        packaged = package_document(self.compose(request), request.record)
        self._record(request, packaged.filename, len(packaged.content))
        return packaged

    def export(self, request: ReportRequest) -> Path:
        """Build and write the document into ``output_dir``."""
        path = save_document(self.compose(request), request.record, self.output_dir)
        self._record(request, path.name, path.stat().st_size)
        return path

    def _record(self, request: ReportRequest, filename: str, size: int) -> None:
        logger.info(
            f"Generated {request.kind.value} document {filename} ({size} bytes)",
            extra={"report_kind": request.kind.value, "size_bytes": size},
        )
        if self.export_log is not None:
            self.export_log.log(
                report_kind=request.kind.value,
                filename=filename,
                size_bytes=size,
                aid_no=request.record.aid_no,
            )
