import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from faqbot.core.config import Settings
from faqbot.core.errors import BootstrapError, ValidationError
from faqbot.core.lang import LangdetectClassifier, LanguageIdentifier
from faqbot.faq.convlog import ConversationLogEntry, ConversationLogger
from faqbot.faq.corpus import load_corpus
from faqbot.faq.embed import make_embedder
from faqbot.faq.index import FaqIndex, build_index
from faqbot.faq.matcher import Matcher, MatchResult
from faqbot.routers.metrics import REQUESTS

log = logging.getLogger("faqbot.service")


@dataclass(frozen=True)
class FaqContext:
    """
    Everything a query needs. Built once at startup by bootstrap() and
    shared read-only by every request; never rebuilt per request.
    """

    index: FaqIndex
    identifier: LanguageIdentifier
    matcher: Matcher
    conversations: ConversationLogger


async def bootstrap(settings: Settings) -> FaqContext:
    try:
        corpus = load_corpus(settings.faq_path)
        embedder = make_embedder(settings.embedder, model_name=settings.embedding_model, dim=settings.embed_dim)
    except Exception as e:
        raise BootstrapError(f"{type(e).__name__}: {e}") from e
    index = await build_index(corpus, embedder)
    log.info("faq_loaded path=%r size=%d langs=%s", settings.faq_path, len(index), index.sizes())
    return FaqContext(
        index=index,
        identifier=LanguageIdentifier(LangdetectClassifier()),
        matcher=Matcher(index, embedder),
        conversations=ConversationLogger(settings.conversation_log_dir),
    )


async def answer(ctx: FaqContext, question: str, now: Optional[datetime] = None) -> MatchResult:
    q = (question or "").strip()
    if not q:
        raise ValidationError("Missing question")

    lang = ctx.identifier.identify(q)
    log.info("detected language=%s query=%r", lang, q, extra={"lang": lang})

    result = await ctx.matcher.match(q, lang)
    # one clock read so the timestamp and the day file always agree
    now = now or datetime.now().astimezone()
    ctx.conversations.record(ConversationLogEntry.from_result(q, lang, result, now=now), day=now)
    REQUESTS.labels(route=result.kind, lang=lang).inc()
    log.info(
        "answered route=%s faq_id=%s score=%.4f", result.kind,
        getattr(result.entry, "id", None), result.score,
        extra={"route": result.kind, "lang": lang, "score": result.score},
    )
    return result
