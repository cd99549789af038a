import logging, random, time
from dataclasses import dataclass, field
from typing import Optional, Union
import numpy as np
from faqbot.core.errors import CollaboratorError
from faqbot.faq.corpus import FaqEntry
from faqbot.faq.embed import Embedder
from faqbot.faq.index import FaqIndex
from faqbot.routers.metrics import EMB_LAT

log = logging.getLogger("faqbot.matcher")

SIMILARITY_THRESHOLD = 0.6
THINKING_MS = (300.0, 800.0)

NO_MATCH_MESSAGES = {
    "en": "I'm sorry, I couldn't find an answer.",
    "my": "စိတ်မရှိပါနဲ့ နီးစပ်သောအဖြေမတွေ့ပါ",
    "ja": "申し訳ありません、回答が見つかりません。",
    "th": "ขออภัย ไม่พบคำตอบ",
}


def no_match_message(lang: str) -> str:
    return NO_MATCH_MESSAGES.get(lang, NO_MATCH_MESSAGES["en"])


def thinking_time() -> float:
    # UI pacing only
    return random.uniform(*THINKING_MS)


@dataclass(frozen=True)
class ExactMatch:
    entry: FaqEntry
    score: float = 1.0
    thinking_time: float = field(default_factory=thinking_time, compare=False)
    kind = "exact"

    @property
    def reply(self) -> str:
        return self.entry.answer


@dataclass(frozen=True)
class SimilarityMatch:
    entry: FaqEntry
    score: float
    thinking_time: float = field(default_factory=thinking_time, compare=False)
    kind = "similarity"

    @property
    def reply(self) -> str:
        return self.entry.answer


@dataclass(frozen=True)
class NoMatch:
    score: float
    message: str
    thinking_time: float = field(default_factory=thinking_time, compare=False)
    kind = "no_match"
    entry = None

    @property
    def reply(self) -> str:
        return self.message


MatchResult = Union[ExactMatch, SimilarityMatch, NoMatch]


class Matcher:
    def __init__(self, index: FaqIndex, embedder: Embedder, threshold: float = SIMILARITY_THRESHOLD):
        self.index = index
        self.embedder = embedder
        self.threshold = threshold

    def find_exact(self, query: str, lang: str) -> Optional[FaqEntry]:
        needle = query.strip().lower()
        for entry in self.index.bucket(lang).entries:
            if entry.question.lower() == needle:
                return entry
        return None

    async def match(self, query: str, lang: str) -> MatchResult:
        query = query.strip()
        exact = self.find_exact(query, lang)
        if exact is not None:
            return ExactMatch(entry=exact)

        bucket = self.index.bucket(lang)
        if not bucket:
            return NoMatch(score=-1.0, message=no_match_message(lang))

        e0 = time.time()
        try:
            qvec = await self.embedder.embed(query)
        except Exception as e:
            raise CollaboratorError(f"query embedding failed: {type(e).__name__}: {e}") from e
        EMB_LAT.observe((time.time() - e0) * 1000)

        scores = bucket.similarities(qvec)
        # argmax keeps the first (lowest) index on ties
        best_idx = int(np.argmax(scores))
        best = float(scores[best_idx])
        log.debug("similarity lang=%s best=%.4f idx=%d", lang, best, best_idx)

        if best > self.threshold and best_idx < len(bucket.entries):
            return SimilarityMatch(entry=bucket.entries[best_idx], score=best)
        return NoMatch(score=best, message=no_match_message(lang))
