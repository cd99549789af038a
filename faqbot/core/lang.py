import re
from typing import Optional, Protocol
from langdetect import DetectorFactory, LangDetectException, detect
from faqbot.core.errors import CollaboratorError

DEFAULT_LANG = "en"
SUPPORTED_LANGS = ("en", "my", "ja", "th")

_MYANMAR = re.compile(r"[\u1000-\u109F]")
SHORT_TEXT_MAX = 5
CLASSIFIER_MIN_LENGTH = 3

# classifier code -> internal code; anything else falls back to DEFAULT_LANG
LANG_MAP = {
    "en": "en",
    "my": "my",
    "ja": "ja",
    "th": "th",
}


class LanguageClassifier(Protocol):
    def classify(self, text: str, min_length: int) -> Optional[str]: ...


class LangdetectClassifier:
    """n-gram classifier backed by langdetect. Returns None when inconclusive."""

    def __init__(self, seed: int = 0):
        # langdetect is randomized unless seeded
        DetectorFactory.seed = seed

    def classify(self, text: str, min_length: int) -> Optional[str]:
        t = (text or "").strip()
        if len(t) < min_length:
            return None
        try:
            return detect(t)
        except LangDetectException:
            return None


class LanguageIdentifier:
    def __init__(self, classifier: LanguageClassifier):
        self.classifier = classifier

    def identify(self, text: str) -> str:
        """
        Rules in order, first hit wins:
        Myanmar script anywhere -> "my"; five characters or fewer -> "en";
        otherwise the classifier's code through LANG_MAP, defaulting to "en".
        """
        if _MYANMAR.search(text):
            return "my"
        # too little signal for the classifier; short non-English greetings land here too
        if len(text) <= SHORT_TEXT_MAX:
            return DEFAULT_LANG
        try:
            raw = self.classifier.classify(text, CLASSIFIER_MIN_LENGTH)
        except Exception as e:
            raise CollaboratorError(f"language classifier failed: {type(e).__name__}") from e
        return LANG_MAP.get(raw or "", DEFAULT_LANG)
