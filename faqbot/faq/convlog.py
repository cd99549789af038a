import json, os, threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


@dataclass(frozen=True)
class ConversationLogEntry:
    timestamp: str
    user_query: str
    detected_language: str
    faq_id: Optional[Union[int, str]]
    similarity_score: float
    answer: str

    @classmethod
    def from_result(cls, query: str, lang: str, result, now: Optional[datetime] = None) -> "ConversationLogEntry":
        ts = (now or datetime.now().astimezone()).isoformat(timespec="seconds")
        entry = result.entry
        return cls(
            timestamp=ts,
            user_query=query,
            detected_language=lang,
            faq_id=entry.id if entry is not None else None,
            similarity_score=float(result.score),
            answer=result.reply,
        )

    def to_record(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "userQuery": self.user_query,
            "detectedLanguage": self.detected_language,
            "faqId": self.faq_id,
            "similarityScore": self.similarity_score,
            "answer": self.answer,
        }


class ConversationLogger:
    """Append-only audit trail, one JSONL file per local calendar day."""

    def __init__(self, log_dir: str):
        self.log_dir = log_dir
        self._lock = threading.Lock()

    def path_for(self, day: datetime) -> str:
        return os.path.join(self.log_dir, f"{day:%Y-%m-%d}.jsonl")

    def record(self, entry: ConversationLogEntry, day: Optional[datetime] = None) -> str:
        path = self.path_for(day or datetime.now())
        line = json.dumps(entry.to_record(), ensure_ascii=False) + "\n"
        # one writer at a time so lines never interleave
        with self._lock:
            os.makedirs(self.log_dir, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(line)
        return path
