import hashlib, logging
from typing import List, Protocol, Sequence, Union
import anyio, tiktoken
import numpy as np

log = logging.getLogger("faqbot.embed")

DEFAULT_MODEL = "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"


class Embedder(Protocol):
    async def embed(self, text: str) -> np.ndarray: ...
    async def embed_many(self, texts: Sequence[str]) -> List[np.ndarray]: ...


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    na = float(np.linalg.norm(a))
    nb = float(np.linalg.norm(b))
    if na == 0.0 or nb == 0.0:
        return 0.0
    return float(np.dot(a, b) / (na * nb))


def _clean(texts: Sequence[str]) -> List[str]:
    # no Nones or empty strings into the model
    return [t if isinstance(t, str) and t.strip() else " " for t in texts]


class SentenceTransformerEmbedder:
    """Mean-pooled, L2-normalized sentence embeddings. Inference runs off the event loop."""

    def __init__(self, model_name: str = DEFAULT_MODEL):
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ImportError(
                "EMBEDDER=sentence-transformers needs the 'model' extra "
                "(pip install 'multilingual-faq-bot[model]'); set EMBEDDER=hash to run without it"
            ) from e

        log.info("loading embedding model %s", model_name)
        self.model_name = model_name
        self.model = SentenceTransformer(model_name)

    def _encode(self, texts: List[str]) -> np.ndarray:
        return self.model.encode(
            texts,
            normalize_embeddings=True,
            convert_to_numpy=True,
            show_progress_bar=False,
        ).astype(np.float32)

    async def embed(self, text: str) -> np.ndarray:
        vecs = await anyio.to_thread.run_sync(self._encode, _clean([text]))
        return vecs[0]

    async def embed_many(self, texts: Sequence[str]) -> List[np.ndarray]:
        if not texts:
            return []
        vecs = await anyio.to_thread.run_sync(self._encode, _clean(texts))
        return list(vecs)


class HashingEmbedder:
    """
    Deterministic offline embedder: tiktoken token ids hashed into a
    fixed number of buckets, then L2-normalized. No semantics beyond
    token overlap, but stable across runs and needs no model download.
    """

    def __init__(self, dim: int = 384, encoding: Union[str, tiktoken.Encoding] = "cl100k_base"):
        self.dim = dim
        self._enc = tiktoken.get_encoding(encoding) if isinstance(encoding, str) else encoding

    def _vector(self, text: str) -> np.ndarray:
        v = np.zeros(self.dim, dtype=np.float32)
        for tok in self._enc.encode(text or ""):
            h = int(hashlib.md5(str(tok).encode()).hexdigest(), 16)
            v[h % self.dim] += 1.0
        norm = float(np.linalg.norm(v)) or 1.0
        return v / norm

    async def embed(self, text: str) -> np.ndarray:
        return self._vector(_clean([text])[0])

    async def embed_many(self, texts: Sequence[str]) -> List[np.ndarray]:
        return [self._vector(t) for t in _clean(texts)]


def make_embedder(kind: str, *, model_name: str = DEFAULT_MODEL, dim: int = 384) -> Embedder:
    kind = (kind or "").strip().lower()
    if kind in ("sentence-transformers", "st"):
        return SentenceTransformerEmbedder(model_name)
    if kind == "hash":
        return HashingEmbedder(dim=dim)
    raise ValueError(f"unknown embedder {kind!r}")
