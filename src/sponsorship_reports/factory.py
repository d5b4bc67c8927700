from __future__ import annotations

from typing import Any, Dict

from .docgen.assets import LOGO_URL, read_embedded_logo
from .docgen.builder import ReportExporter
from .monitoring.export_log import ExportLogger
from .store.settings_store import SettingsStore
from .utils import ResolvedPaths, resolve_paths


def paths_from_config(cfg: Dict[str, Any]) -> ResolvedPaths:
    return resolve_paths(
        data_dir_cfg=str(cfg.get("paths", {}).get("data_dir", "") or ""),
        output_dir_cfg=str(cfg.get("paths", {}).get("output_dir", "") or ""),
    )


def build_exporter(cfg: Dict[str, Any]) -> ReportExporter:
    """Build a ReportExporter from the app config.

    Used by both the CLI and the API.
    """
    paths = paths_from_config(cfg)
    assets_cfg = cfg.get("assets", {})
    log_name = str(cfg.get("logging", {}).get("exports_log_name", "exports.jsonl"))

    return ReportExporter(
        output_dir=paths.output_dir,
        logo_url=str(assets_cfg.get("logo_url") or LOGO_URL),
        embedded_logo=read_embedded_logo(assets_cfg.get("logo_base64_path")) or None,
        fetch_attempts=int(assets_cfg.get("fetch_attempts", 2)),
        retry_delay_s=float(assets_cfg.get("retry_delay_s", 0.5)),
        timeout_s=float(assets_cfg.get("timeout_s", 10)),
        export_log=ExportLogger(paths.data_dir / log_name),
    )


def build_store(cfg: Dict[str, Any]) -> SettingsStore:
    paths = paths_from_config(cfg)
    name = str(cfg.get("store", {}).get("settings_file_name", "settings.json"))
    return SettingsStore(paths.data_dir / name)
