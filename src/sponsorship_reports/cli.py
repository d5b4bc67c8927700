"""CLI entry point for sponsorship-reports.

Heavy imports (uvicorn, python-docx, google-genai) happen inside command
handlers so that --help loads instantly.
"""
from __future__ import annotations

import argparse
import json
import os
from collections import Counter
from pathlib import Path
from typing import Any, Dict


def _load(config_path: str) -> Dict[str, Any]:
    from .config import load_app_config
    from .logging_utils import configure_logging

    cfg = load_app_config(config_path)
    configure_logging(cfg)
    return cfg


# ---------------------------------------------------------------------------
# Command handlers (lazy imports inside each function)
# ---------------------------------------------------------------------------

def _serve(config_path: str, host: str, port: int) -> None:
    import uvicorn

    os.environ["SPONSORSHIP_APP_CONFIG"] = config_path
    uvicorn.run("sponsorship_reports.api.main:app", host=host, port=port, reload=False)


def _export(config_path: str, kind: str, input_path: str, out_dir: str | None) -> None:
    from .factory import build_exporter
    from .reports.records import make_request

    cfg = _load(config_path)
    exporter = build_exporter(cfg)
    if out_dir:
        exporter.output_dir = Path(out_dir)
    data = json.loads(Path(input_path).read_text(encoding="utf-8"))
    path = exporter.export(make_request(kind, data))
    print(json.dumps({"saved_to": str(path)}, indent=2, ensure_ascii=False))


def _seed_record(config_path: str, kind: str, username: str | None) -> None:
    from .factory import build_store
    from .reports.records import apply_defaults

    store = build_store(_load(config_path))
    prepared_by = ""
    if username:
        user = store.get_user(username)
        if user is None:
            raise SystemExit(f"Unknown user: {username}")
        prepared_by = user.name
    record = apply_defaults(kind, store.get_defaults(), prepared_by=prepared_by)
    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))


def _enhance(config_path: str, etype: str, text: str, context: str, api_key: str | None) -> None:
    from .enhance.enhancer import DEFAULT_MODEL, DEFAULT_TEMPERATURE, enhance_text
    from .enhance.prompts import EnhancementType
    from .factory import build_store

    cfg = _load(config_path)
    store = build_store(cfg)
    setting = store.get_ai_config()[EnhancementType(etype)]
    enhance_cfg = cfg.get("enhance", {})
    result = enhance_text(
        text,
        setting,
        context,
        api_key or os.getenv("GEMINI_API_KEY", ""),
        model=str(enhance_cfg.get("model") or DEFAULT_MODEL),
        temperature=float(enhance_cfg.get("temperature", DEFAULT_TEMPERATURE)),
    )
    print(result)


def _add_user(config_path: str, username: str, name: str, password: str, role: str, allow_ai: bool) -> None:
    from .factory import build_store
    from .store.settings_store import Role, User

    store = build_store(_load(config_path))
    user = store.upsert_user(User(username=username, name=name, role=Role(role), allow_ai=allow_ai), password=password)
    print(json.dumps(user.to_public_dict(), indent=2, ensure_ascii=False))


def _history(config_path: str) -> None:
    from .factory import paths_from_config
    from .monitoring.export_log import read_export_log

    cfg = _load(config_path)
    paths = paths_from_config(cfg)
    log_name = str(cfg.get("logging", {}).get("exports_log_name", "exports.jsonl"))
    counts = Counter()
    last = None
    for rec in read_export_log(paths.data_dir / log_name):
        counts.update([rec.get("report_kind", "UNKNOWN")])
        last = rec
    print(json.dumps({"n": sum(counts.values()), "by_kind": dict(counts), "last": last}, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Main CLI definition
# ---------------------------------------------------------------------------

def main() -> None:
    from .logging_utils import setup_logging

    setup_logging()

    parser = argparse.ArgumentParser(prog="sponsorship-reports")
    sub = parser.add_subparsers(dest="cmd", required=True)

    kinds = ["apr", "chp"]
    types = ["CHILD_NARRATIVE", "TEACHER_EVALUATION", "CASE_HISTORY_NARRATIVE"]

    # --- serve ---
    p_serve = sub.add_parser("serve", help="Run FastAPI server")
    p_serve.add_argument("--config", default="configs/app.yaml")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=8000)

    # --- export ---
    p_export = sub.add_parser("export", help="Build a .docx report from a JSON record")
    p_export.add_argument("--config", default="configs/app.yaml")
    p_export.add_argument("--kind", required=True, choices=kinds)
    p_export.add_argument("--input", required=True, help="JSON file with the record fields")
    p_export.add_argument("--out-dir", default=None, help="Output directory (default: paths.output_dir)")

    # --- seed-record ---
    p_seed = sub.add_parser("seed-record", help="Print a new record with defaults applied")
    p_seed.add_argument("--config", default="configs/app.yaml")
    p_seed.add_argument("--kind", required=True, choices=kinds)
    p_seed.add_argument("--username", default=None, help="Fill 'Prepared By' from this user")

    # --- enhance ---
    p_enh = sub.add_parser("enhance", help="Polish a narrative with the configured prompt")
    p_enh.add_argument("--config", default="configs/app.yaml")
    p_enh.add_argument("--type", required=True, choices=types)
    p_enh.add_argument("--text", required=True)
    p_enh.add_argument("--context", default="")
    p_enh.add_argument("--api-key", default=None, help="Gemini API key (default: $GEMINI_API_KEY)")

    # --- add-user ---
    p_user = sub.add_parser("add-user", help="Create or update a user account")
    p_user.add_argument("--config", default="configs/app.yaml")
    p_user.add_argument("--username", required=True)
    p_user.add_argument("--name", required=True)
    p_user.add_argument("--password", required=True)
    p_user.add_argument("--role", default="USER", choices=["ADMIN", "USER"])
    p_user.add_argument("--allow-ai", action="store_true")

    # --- history ---
    p_hist = sub.add_parser("history", help="Summarize the export log")
    p_hist.add_argument("--config", default="configs/app.yaml")

    args = parser.parse_args()

    # ---- Dispatch ----
    if args.cmd == "serve":
        _serve(args.config, host=args.host, port=args.port)

    elif args.cmd == "export":
        _export(args.config, kind=args.kind, input_path=args.input, out_dir=args.out_dir)

    elif args.cmd == "seed-record":
        _seed_record(args.config, kind=args.kind, username=args.username)

    elif args.cmd == "enhance":
        _enhance(args.config, etype=args.type, text=args.text, context=args.context, api_key=args.api_key)

    elif args.cmd == "add-user":
        _add_user(
            args.config,
            username=args.username,
            name=args.name,
            password=args.password,
            role=args.role,
            allow_ai=bool(args.allow_ai),
        )

    elif args.cmd == "history":
        _history(args.config)

    else:
        raise SystemExit(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    main()
