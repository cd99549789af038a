from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import logging, time, uuid

log = logging.getLogger("faqbot.errors")


class FaqBotError(Exception):
    """Base class for errors raised by the matching core."""


class ValidationError(FaqBotError):
    """Question missing or blank; rejected before it reaches the matcher."""


class CollaboratorError(FaqBotError):
    """The scoring model or the language classifier failed."""


class BootstrapError(FaqBotError):
    """Corpus load or index build failed; the service must not start."""


def json_error(code: str, message: str, context: dict | None = None, status: int = 400):
    return JSONResponse(
        status_code=status,
        content={
            "code": code,
            "message": message,
            "context": context or {}
        }
    )

async def validation_error_handler(request: Request, exc: ValidationError):
    return json_error("missing_question", str(exc) or "Missing question", status=400)

async def request_validation_handler(request: Request, exc: RequestValidationError):
    # never echo the offending input back
    errs = [{"loc": list(e.get("loc", ())), "type": e.get("type")} for e in exc.errors()]
    types = {e["type"] for e in errs}
    if "missing" in types:
        return json_error("missing_question", "Missing question", context={"errors": errs}, status=400)
    if "string_too_long" in types:
        return json_error("question_too_long", "Question is too long", context={"errors": errs}, status=422)
    return json_error("invalid_request", "Malformed request body", context={"errors": errs}, status=400)

async def collaborator_error_handler(request: Request, exc: CollaboratorError):
    rid = getattr(request.state, "request_id", "na")
    log.error("collaborator_failed", exc_info=exc, extra={"request_id": rid})
    return json_error(
        "internal_error",
        "Internal server error",
        context={"request_id": rid},
        status=500,
    )

class EnforceJSONMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, dev_errors: bool = False):
        super().__init__(app)
        self.dev_errors = dev_errors

    async def dispatch(self, request: Request, call_next):
        request.state.request_id = str(uuid.uuid4())
        t0 = time.time()
        try:
            resp = await call_next(request)
            return resp
        except Exception as exc:
            log.exception("unhandled", extra={"request_id": request.state.request_id})
            context = {"request_id": request.state.request_id}
            if self.dev_errors:
                context.update({"etype": type(exc).__name__, "msg": str(exc)[:500]})
            return json_error("internal_error", "Internal server error", context=context, status=500)
        finally:
            request.state.duration_ms = int((time.time() - t0) * 1000)
