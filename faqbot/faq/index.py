import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple
import numpy as np
from faqbot.core.errors import BootstrapError
from faqbot.faq.corpus import FaqEntry
from faqbot.faq.embed import Embedder

log = logging.getLogger("faqbot.index")


@dataclass(frozen=True)
class LanguageBucket:
    """Entries of one language and their embeddings; row i of vectors belongs to entries[i]."""

    entries: Tuple[FaqEntry, ...]
    vectors: np.ndarray

    def __len__(self) -> int:
        return len(self.entries)

    def similarities(self, qvec: np.ndarray) -> np.ndarray:
        """Cosine similarity of qvec against every row; zero-norm rows score 0."""
        if not self.entries:
            return np.zeros(0, dtype=np.float64)
        q = np.asarray(qvec, dtype=np.float64)
        qn = float(np.linalg.norm(q))
        norms = np.linalg.norm(self.vectors, axis=1) * qn
        dots = self.vectors @ q
        return np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)


EMPTY_BUCKET = LanguageBucket(entries=(), vectors=np.zeros((0, 0), dtype=np.float64))


class FaqIndex:
    def __init__(self, buckets: Mapping[str, LanguageBucket]):
        self._buckets = MappingProxyType(dict(buckets))

    def bucket(self, lang: str) -> LanguageBucket:
        return self._buckets.get(lang, EMPTY_BUCKET)

    @property
    def languages(self) -> List[str]:
        return list(self._buckets)

    def sizes(self) -> Dict[str, int]:
        return {lang: len(b) for lang, b in self._buckets.items()}

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets.values())


async def build_index(corpus: Sequence[FaqEntry], embedder: Embedder) -> FaqIndex:
    """
    Embeds every question once and groups (entry, vector) pairs by language,
    preserving corpus order. Any failure aborts the whole build.
    """
    grouped: Dict[str, List[FaqEntry]] = {}
    for entry in corpus:
        grouped.setdefault(entry.lang, []).append(entry)

    buckets: Dict[str, LanguageBucket] = {}
    for lang, entries in grouped.items():
        try:
            vecs = await embedder.embed_many([e.question for e in entries])
            if len(vecs) != len(entries):
                raise ValueError(f"embedder returned {len(vecs)} vectors for {len(entries)} questions")
            matrix = np.vstack([np.asarray(v, dtype=np.float64) for v in vecs])
        except Exception as e:
            raise BootstrapError(f"index build failed for lang={lang!r}: {type(e).__name__}: {e}") from e
        matrix.flags.writeable = False
        buckets[lang] = LanguageBucket(entries=tuple(entries), vectors=matrix)
        log.info("bucket built lang=%s entries=%d dim=%d", lang, len(entries), matrix.shape[1], extra={"lang": lang})

    dims = {b.vectors.shape[1] for b in buckets.values()}
    if len(dims) > 1:
        raise BootstrapError(f"inconsistent embedding dimensions across languages: {sorted(dims)}")
    return FaqIndex(buckets)
