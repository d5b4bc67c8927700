from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from fastapi import Body, Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from ..docgen.builder import ReportExporter
from ..docgen.packager import DOCX_MEDIA_TYPE, DocumentExportError
from ..enhance.enhancer import DEFAULT_MODEL, DEFAULT_TEMPERATURE, EnhancementError, MissingApiKeyError
from ..enhance.prompts import EnhancementType, PromptSetting
from ..logging_utils import get_logger, setup_logging
from ..reports.records import make_request, parse_kind
from ..reports.session import AuthenticationError, Session, login
from ..store.settings_store import Role, SettingsStore, User
from .dependencies import (
    SessionRegistry,
    get_enhance_settings,
    get_exporter,
    get_session,
    get_session_registry,
    get_store,
    require_admin,
)
from .schemas import (
    EnhanceRequest,
    EnhanceResponse,
    ExportRequest,
    LoginRequest,
    LoginResponse,
    PromptSettingIn,
    UserIn,
    UserOut,
)

setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Sponsorship Report Builder",
    version="0.1.0",
    description="Builds APR and case history Word documents for child sponsorship programs",
)

# CORS (adjust for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _kind_or_404(kind: str):
    try:
        return parse_kind(kind)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown report type: {kind}")


def _attachment_header(filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii") or "report.docx"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@app.get("/health")
def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Sessions and records
# ---------------------------------------------------------------------------

@app.post("/v1/sessions", response_model=LoginResponse)
def create_session(
    req: LoginRequest,
    store: SettingsStore = Depends(get_store),
    registry: SessionRegistry = Depends(get_session_registry),
):
    try:
        session = login(store, req.username, req.password, api_key=req.api_key)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    registry.add(session)
    return LoginResponse(token=session.token, user=UserOut(**session.user.to_public_dict()))


@app.delete("/v1/sessions")
def end_session(
    session: Session = Depends(get_session),
    registry: SessionRegistry = Depends(get_session_registry),
):
    registry.remove(session.token)
    return {"status": "ok"}


@app.get("/v1/records/{kind}")
def new_record(kind: str, session: Session = Depends(get_session)) -> Dict[str, str]:
    return session.new_record(_kind_or_404(kind)).to_dict()


@app.post("/v1/reports/{kind}")
def export_report(
    kind: str,
    req: ExportRequest,
    session: Session = Depends(get_session),
    exporter: ReportExporter = Depends(get_exporter),
    registry: SessionRegistry = Depends(get_session_registry),
):
    request = make_request(_kind_or_404(kind), req.record)
    if not registry.begin_export(session.token):
        raise HTTPException(status_code=409, detail="An export is already running for this session")
    try:
        packaged = exporter.render(request)
    except DocumentExportError as e:
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        registry.end_export(session.token)

    return Response(
        content=packaged.content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": _attachment_header(packaged.filename)},
    )


@app.post("/v1/enhance", response_model=EnhanceResponse)
def enhance(
    req: EnhanceRequest,
    session: Session = Depends(get_session),
    settings: Dict[str, Any] = Depends(get_enhance_settings),
):
    try:
        text = session.enhance(
            req.text,
            req.enhancement_type,
            req.context,
            model=str(settings.get("model") or DEFAULT_MODEL),
            temperature=float(settings.get("temperature", DEFAULT_TEMPERATURE)),
        )
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except MissingApiKeyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EnhancementError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return EnhanceResponse(text=text)


# ---------------------------------------------------------------------------
# Admin settings
# ---------------------------------------------------------------------------

@app.get("/v1/admin/defaults")
def get_defaults(_: Session = Depends(require_admin), store: SettingsStore = Depends(get_store)):
    return store.get_defaults()


@app.put("/v1/admin/defaults")
def put_defaults(
    defaults: Dict[str, Optional[str]] = Body(...),
    _: Session = Depends(require_admin),
    store: SettingsStore = Depends(get_store),
):
    return store.save_defaults(defaults)


@app.get("/v1/admin/prompts")
def get_prompts(_: Session = Depends(require_admin), store: SettingsStore = Depends(get_store)):
    return {k.value: v.to_dict() for k, v in store.get_ai_config().items()}


@app.put("/v1/admin/prompts/{enhancement_type}")
def put_prompt(
    enhancement_type: EnhancementType,
    req: PromptSettingIn,
    _: Session = Depends(require_admin),
    store: SettingsStore = Depends(get_store),
):
    setting = PromptSetting(system_instruction=req.system_instruction, prompt_template=req.prompt_template)
    store.save_prompt(enhancement_type, setting)
    return setting.to_dict()


@app.get("/v1/admin/users", response_model=List[UserOut])
def list_users(_: Session = Depends(require_admin), store: SettingsStore = Depends(get_store)):
    return [UserOut(**u.to_public_dict()) for u in store.list_users()]


@app.put("/v1/admin/users", response_model=UserOut)
def put_user(req: UserIn, _: Session = Depends(require_admin), store: SettingsStore = Depends(get_store)):
    try:
        user = User(username=req.username, name=req.name, role=Role(req.role), allow_ai=req.allow_ai)
        saved = store.upsert_user(user, password=req.password)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return UserOut(**saved.to_public_dict())


@app.delete("/v1/admin/users/{username}")
def delete_user(username: str, _: Session = Depends(require_admin), store: SettingsStore = Depends(get_store)):
    if not store.delete_user(username):
        raise HTTPException(status_code=404, detail=f"No such user: {username}")
    return {"status": "ok"}
