import asyncio
import numpy as np
import pytest
from faqbot.core.lang import LanguageIdentifier
from faqbot.faq.convlog import ConversationLogger
from faqbot.faq.corpus import FaqEntry
from faqbot.faq.index import build_index
from faqbot.faq.matcher import Matcher
from faqbot.faq.service import FaqContext


class FakeEmbedder:
    """Looks vectors up by exact text; records every text it was asked to embed."""

    def __init__(self, vectors, default=None, fail_on=()):
        self.vectors = dict(vectors)
        self.default = default
        self.fail_on = set(fail_on)
        self.calls = []

    def _vec(self, text):
        self.calls.append(text)
        if text in self.fail_on:
            raise RuntimeError("model unavailable")
        v = self.vectors.get(text, self.default)
        if v is None:
            raise KeyError(text)
        return np.asarray(v, dtype=np.float32)

    async def embed(self, text):
        return self._vec(text)

    async def embed_many(self, texts):
        return [self._vec(t) for t in texts]


class FakeClassifier:
    def __init__(self, code=None, error=None):
        self.code = code
        self.error = error
        self.calls = []

    def classify(self, text, min_length):
        self.calls.append((text, min_length))
        if self.error:
            raise self.error
        return self.code


CORPUS = [
    FaqEntry(id=1, lang="en", question="Hi", answer="Hello! How can I help you today?"),
    FaqEntry(id=2, lang="en", question="What are your opening hours?", answer="Monday to Saturday, 9:00 to 18:00."),
    FaqEntry(id=3, lang="en", question="How long does delivery take?", answer="3 to 5 business days.",
             image="/images/delivery.png"),
    FaqEntry(id=6, lang="my", question="မင်္ဂလာပါ", answer="မင်္ဂလာပါ။ ဘာကူညီပေးရမလဲ။"),
    FaqEntry(id=9, lang="ja", question="こんにちは", answer="こんにちは！"),
    FaqEntry(id=10, lang="ja", question="営業時間は何時から何時までですか？", answer="9時から18時までです。"),
]

VECTORS = {
    "Hi": [1.0, 0.0, 0.0],
    "What are your opening hours?": [0.0, 1.0, 0.0],
    "How long does delivery take?": [0.0, 0.0, 1.0],
    "မင်္ဂလာပါ": [1.0, 0.0, 0.0],
    "こんにちは": [1.0, 0.0, 0.0],
    "営業時間は何時から何時までですか？": [0.0, 1.0, 0.0],
    # queries
    "When do you open your doors?": [0.1, 0.95, 0.0],
    "Tell me something unrelated please": [0.5, 0.5, 0.5],
}


@pytest.fixture
def corpus():
    return list(CORPUS)


@pytest.fixture
def embedder():
    return FakeEmbedder(VECTORS, fail_on={"Explode the model please"})


@pytest.fixture
def index(corpus, embedder):
    idx = asyncio.run(build_index(corpus, embedder))
    embedder.calls.clear()
    return idx


@pytest.fixture
def matcher(index, embedder):
    return Matcher(index, embedder)


@pytest.fixture
def classifier():
    return FakeClassifier("en")


@pytest.fixture
def ctx(index, matcher, classifier, tmp_path):
    return FaqContext(
        index=index,
        identifier=LanguageIdentifier(classifier),
        matcher=matcher,
        conversations=ConversationLogger(str(tmp_path / "conversation_logs")),
    )
