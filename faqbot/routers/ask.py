from fastapi import APIRouter, Request
from typing import Annotated, Optional
from pydantic import BaseModel, StringConstraints
from faqbot.core.config import settings
from faqbot.core.errors import CollaboratorError, ValidationError
from faqbot.faq.service import answer
from faqbot.routers.metrics import ERRORS, LATENCY
import time, logging

log = logging.getLogger("faqbot.ask")

router = APIRouter()

class Ask(BaseModel):
    question: Optional[Annotated[str, StringConstraints(max_length=settings.max_question_chars)]] = None


@router.post("")
async def ask(payload: Ask, request: Request):
    rid = getattr(request.state, "request_id", "na")
    t0 = time.time()
    try:
        result = await answer(request.app.state.faq, payload.question or "")
    except ValidationError:
        ERRORS.labels(code="missing_question").inc()
        raise
    except CollaboratorError:
        ERRORS.labels(code="internal_error").inc()
        raise

    LATENCY.observe((time.time() - t0) * 1000)
    log.debug("ask done id=%s route=%s", rid, result.kind, extra={"request_id": rid})

    body = {"reply": result.reply, "thinking_time": result.thinking_time}
    if result.entry is not None and result.entry.image:
        body["image"] = result.entry.image
    return body
