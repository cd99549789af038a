import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    faq_path: str = os.getenv("FAQ_PATH", "./data/customer_support.json")
    embedder: str = os.getenv("EMBEDDER", "sentence-transformers")   # needs the [model] extra; "hash" does not
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2")
    embed_dim: int = int(os.getenv("EMBED_DIM", "384"))              # hash embedder only
    conversation_log_dir: str = os.getenv("CONVERSATION_LOG_DIR", "./conversation_logs")
    images_dir: str = os.getenv("IMAGES_DIR", "./images")
    max_question_chars: int = int(os.getenv("MAX_QUESTION_CHARS", "1024"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "json")
    dev_errors: bool = os.getenv("DEV_ERRORS", "0") == "1"

settings = Settings()
