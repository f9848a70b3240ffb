from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional, Union
import logging
from pathlib import Path
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime, timezone

try:
    from .arithmetic import ArithmeticParseError, evaluate, format_result
    from .dispatcher import Dispatcher
    from .gallery import Gallery
    from .log_config import setup_logging
    from .prompt_builder import build_prompt_request, normalize_tool
    from .providers.registry import ProviderRegistry
    from .settings import get_settings, load_env_file
except ImportError:  # fallback for test runs importing as top-level modules
    from arithmetic import ArithmeticParseError, evaluate, format_result
    from dispatcher import Dispatcher
    from gallery import Gallery
    from log_config import setup_logging
    from prompt_builder import build_prompt_request, normalize_tool
    from providers.registry import ProviderRegistry
    from settings import get_settings, load_env_file

APP_VERSION = "0.2.0"

log = logging.getLogger(__name__)

load_env_file()
setup_logging()


class Health(BaseModel):
    status: str

class VersionInfo(BaseModel):
    version: str
    providers: dict[str, bool]
    priority: list[str]
    timeout_s: float


class PromptBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    prompt: Optional[str] = None
    api_preference: Optional[str] = Field(default=None, alias="apiPreference")
    creativity: Optional[Union[float, str]] = None
    template: Optional[str] = None
    tone: Optional[str] = None
    length: Optional[str] = None
    business_type: Optional[str] = Field(default=None, alias="businessType")
    tool: Optional[str] = None
    action: Optional[str] = None  # older clients send the tool name here
    language: Optional[str] = None  # target language for the translate tool


class ImageBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    prompt: Optional[str] = None
    business_type: Optional[str] = Field(default=None, alias="businessType")


app = FastAPI(title="AI Business Promoter Backend", version=APP_VERSION)

# Browser frontends on other origins call this API directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


def configure_providers(registry: ProviderRegistry) -> None:
    """Swap the provider registry (and the dispatcher bound to it)."""
    app.state.registry = registry
    app.state.dispatcher = Dispatcher(registry)


configure_providers(ProviderRegistry())
_gallery_path = get_settings()["GALLERY_PATH"]
app.state.gallery = Gallery(Path(_gallery_path) if _gallery_path else None)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()

def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Body problems answer with the same ``{error}`` shape as the handlers, never FastAPI's 422."""
    errors = exc.errors()
    for err in errors:
        loc = tuple(err.get("loc") or ())
        if err.get("type") == "missing" and loc in (("body",), ("body", "prompt")):
            return _error(400, "Prompt missing")
    first = errors[0] if errors else {}
    if first.get("type") == "json_invalid":
        return _error(400, "Invalid JSON body")
    field = ".".join(str(p) for p in (first.get("loc") or ())[1:])
    message = first.get("msg") or "Invalid request body"
    return _error(400, f"{field}: {message}" if field else message)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "AI Business Promoter Backend is running fine!"

@app.get("/health", response_model=Health)
async def health():
    return Health(status="ok")

@app.get("/version", response_model=VersionInfo)
async def version():
    reg: ProviderRegistry = app.state.registry
    return VersionInfo(
        version=APP_VERSION,
        providers={s["name"]: s["configured"] for s in reg.status()},
        priority=list(reg.priority),
        timeout_s=reg.timeout_s,
    )


@app.post("/api/prompt")
async def prompt_api(body: PromptBody):
    if body.prompt is None or not body.prompt.strip():
        return _error(400, "Prompt missing")
    try:
        tool = normalize_tool(body.tool or body.action)
    except ValueError as e:
        return _error(400, str(e))

    if tool == "calculate":
        try:
            answer = format_result(evaluate(body.prompt))
        except ArithmeticParseError as e:
            return _error(400, str(e))
        return {"reply": answer, "output": answer, "apiUsed": "calculator", "timestamp": _utcnow(), "elapsedMs": 0}

    req = build_prompt_request(
        body.prompt,
        tool=tool,
        language=body.language,
        template=body.template,
        tone=body.tone,
        length=body.length,
        business_type=body.business_type,
        creativity=body.creativity,
        api_preference=body.api_preference,
    )
    result = await app.state.dispatcher.dispatch(req)
    if not result.ok:
        err = result.error
        return _error(
            502,
            getattr(err, "message", None) or str(err) or "All providers failed",
            kind=getattr(err, "kind", None),
            apiUsed=None,
            attempts=result.attempts,
            timestamp=result.created_at,
        )
    out: Dict[str, Any] = {
        "reply": result.reply,
        "apiUsed": result.provider,
        "timestamp": result.created_at,
        "elapsedMs": result.elapsed_ms,
    }
    if tool:
        out["output"] = result.reply
    return out


@app.post("/api/image")
async def image_api(body: ImageBody):
    prompt = (body.prompt or "").strip()
    if not prompt and not (body.business_type or "").strip():
        return _error(400, "Prompt missing")
    picked = app.state.gallery.pick(prompt, body.business_type)
    return {"imageUrl": picked["url"], "alt": picked["alt"], "source": picked["source"], "timestamp": _utcnow()}


@app.get("/api/status")
async def status_api():
    reg: ProviderRegistry = app.state.registry
    return {
        "ok": True,
        "version": APP_VERSION,
        "priority": list(reg.priority),
        "enabled": reg.enabled_providers(),
        "providers": reg.status(),
        "timestamp": _utcnow(),
    }


@app.get("/api/check-keys")
async def check_keys_api():
    """Send a canned prompt to every configured provider, one at a time."""
    reg: ProviderRegistry = app.state.registry
    dispatcher: Dispatcher = app.state.dispatcher
    out = []
    for s in reg.status():
        entry: Dict[str, Any] = {"name": s["name"], "configured": s["configured"], "model": s["model"]}
        if not s["configured"]:
            entry.update({"reachable": False, "latencyMs": None, "error": "missing API key"})
        else:
            result = await dispatcher.probe(s["name"])
            entry.update({
                "reachable": result.ok,
                "latencyMs": result.elapsed_ms,
                "error": None if result.ok else getattr(result.error, "message", str(result.error)),
            })
        out.append(entry)
    return {"providers": out, "timestamp": _utcnow()}
