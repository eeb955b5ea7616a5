import os
from dotenv import load_dotenv

load_dotenv()

# Language model
LLM_MODEL = os.getenv("LLM_MODEL", "anthropic/claude-3-5-sonnet-20241022")
LLM_API_KEY = os.getenv("LLM_API_KEY") or os.getenv("ANTHROPIC_API_KEY")
LLM_API_BASE = os.getenv("LLM_API_BASE") or None

# Token ceilings per call
GENERATION_MAX_TOKENS = 4096
VERIFICATION_MAX_TOKENS = 1024
REGENERATION_MAX_TOKENS = 256
REGENERATION_VERIFY_MAX_TOKENS = 512

# Web search
SEARCH_PROVIDER = os.getenv("SEARCH_PROVIDER", "google").lower()
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GOOGLE_SEARCH_ENGINE_ID = os.getenv("GOOGLE_SEARCH_ENGINE_ID")
GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
SEARCH_TIMEOUT = float(os.getenv("SEARCH_TIMEOUT", "10"))
SEARCH_RESULT_LIMIT = 3
TRUSTED_DOMAINS = [
    "nih.gov",
    "cdc.gov",
    "who.int",
    "mayoclinic.org",
    "ncbi.nlm.nih.gov",
]

# Documents
MAX_DOCUMENT_CHARS = int(os.getenv("MAX_DOCUMENT_CHARS", "10000"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").strip().lower() in ("1", "true", "yes")
LOGS_DIR = os.getenv("LOGS_DIR", "logs")
