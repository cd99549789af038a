import json, os
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, field_validator


class FaqEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    lang: str
    question: str
    answer: str
    image: Optional[str] = None

    @field_validator("lang")
    @classmethod
    def _normalize_lang(cls, v: str) -> str:
        return (v or "").strip().lower()


def load_corpus(path: str) -> List[FaqEntry]:
    """
    Reads FAQ records from a JSON array (.json) or JSON Lines (.jsonl) file.
    Order in the file is the order of the index buckets.
    """
    if not path or not os.path.isfile(path):
        raise FileNotFoundError(f"faq corpus not found: {path!r}")
    with open(path, "r", encoding="utf-8") as f:
        if path.endswith(".jsonl"):
            rows = [json.loads(line) for line in f if line.strip()]
        else:
            rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError("faq corpus must be a list of records")
    return [FaqEntry.model_validate(r) for r in rows]
