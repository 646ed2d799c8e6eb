import logging
import os
import time
import uuid
from typing import Any, Dict

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from webneva import providers, router
from webneva.errors import WebnevaError
from webneva.models import AssistBody, GenerateBody, ValidateBody
from webneva.validators import check_document, check_files

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

log = logging.getLogger(__name__)

app = FastAPI(title="Webneva Studio")

allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins or ["*"],
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

_STATUS_CODES = {
    400: "InvalidOperation",
    404: "NotFound",
    405: "MethodNotAllowed",
}


@app.middleware("http")
async def answer_preflight(request: Request, call_next):
    # Any OPTIONS gets permissive CORS headers and no body
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=PREFLIGHT_HEADERS)
    return await call_next(request)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = str(uuid.uuid4())
    start = time.time()
    request.state.request_id = rid
    response = None
    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        dur_ms = int((time.time() - start) * 1000)
        log.info(
            "rid=%s method=%s path=%s status=%s dur_ms=%d",
            rid,
            request.method,
            request.url.path,
            getattr(response, "status_code", "?"),
            dur_ms,
        )


@app.exception_handler(WebnevaError)
async def webneva_error_handler(request: Request, exc: WebnevaError):
    log.info("request rejected code=%s status=%d: %s", exc.code, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def body_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "(body)"
        problems.append(f"{loc}: {err.get('msg', 'invalid')}")
    return JSONResponse(
        status_code=400,
        content={"error": "InvalidOperation", "details": "; ".join(problems) or "malformed request body"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = _STATUS_CODES.get(exc.status_code, "HTTPError")
    headers = dict(exc.headers or {})
    headers.setdefault("Access-Control-Allow-Origin", "*")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": code, "details": str(exc.detail)},
        headers=headers,
    )


def _internal_error(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "InternalError", "details": str(exc) or exc.__class__.__name__},
    )


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/llm/status")
def llm_status_endpoint() -> Dict[str, Any]:
    return providers.status()


@app.post("/api/generate")
def generate_endpoint(body: GenerateBody):
    """
    generate / improve / transform. Always answers 200 with renderable HTML
    unless the input or the provider configuration is wrong.
    """
    try:
        result = router.handle_generate(body)
    except WebnevaError:
        raise
    except Exception as exc:
        log.exception("generate: unexpected failure")
        return _internal_error(exc)
    return JSONResponse(result.to_payload())


@app.post("/api/assist")
def assist_endpoint(body: AssistBody):
    """explain / refine. Provider failures are returned as errors."""
    try:
        reply = router.handle_assist(body)
    except WebnevaError:
        raise
    except Exception as exc:
        log.exception("assist: unexpected failure")
        return _internal_error(exc)
    return {"reply": reply}


@app.post("/api/validate")
def validate_endpoint(body: ValidateBody):
    """
    Run the document check without calling any provider.
    `files` takes precedence over `document` when both are sent.
    """
    if body.files is not None:
        verdict = check_files(body.files)
    else:
        verdict = check_document(body.document)
    return {"valid": verdict.ok, "reason": verdict.reason}
