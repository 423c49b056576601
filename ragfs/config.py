"""Application configuration with sensible defaults."""
import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent
PROMPTS_DIR = BASE_DIR / "prompts"
PROMPT_TEMPLATE_PATH = Path(
    os.getenv("PROMPT_TEMPLATE_PATH", str(PROMPTS_DIR / "prompt.template"))
)

# Embedding service (OpenAI-compatible /embeddings endpoint)
EMBEDDING_BASE_URL = os.getenv("EMBEDDING_BASE_URL", "http://localhost:7997")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "michaelfeil/bge-small-en-v1.5")

# Infinity vector/fulltext store
INFINITY_BASE_URL = os.getenv("INFINITY_BASE_URL", "http://localhost:23820")
INFINITY_DATABASE = os.getenv("INFINITY_DATABASE", "rfs")
INFINITY_TABLE = os.getenv("INFINITY_TABLE", "data")

# Outbound HTTP (seconds)
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "60.0"))

# Chunking
SENTENCE_LANGUAGE = os.getenv("SENTENCE_LANGUAGE", "english")
SUPPORTED_EXTENSIONS = (".txt",)

# Retrieval
SEARCH_TOP_N = int(os.getenv("SEARCH_TOP_N", "2"))
SEARCH_METHOD = os.getenv("SEARCH_METHOD", "text")  # text | dense | hybrid

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
