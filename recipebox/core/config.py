import os
from pathlib import Path

# Project root = the checkout containing recipebox/
PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
RECIPES_DB = Path(os.getenv("RECIPES_DB", str(DATA_DIR / "recipes.sqlite3")))

# --- Version / build metadata (override via systemd env) ---
APP_VERSION = os.getenv("APP_VERSION", "0.3.0")
GIT_SHA = os.getenv("GIT_SHA", "unknown")
BUILD_DATE = os.getenv("BUILD_DATE", "unknown")

# --- AI backend: "gemini" or "ollama" ---
AI_BACKEND = os.getenv("AI_BACKEND", "gemini").strip().lower()

OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://127.0.0.1:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "qwen2.5:14b")
OLLAMA_VISION_MODEL = os.getenv("OLLAMA_VISION_MODEL", "llama3.2-vision:11b")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_TEXT_MODEL = os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
GEMINI_VISION_MODEL = os.getenv("GEMINI_VISION_MODEL", "gemini-2.5-pro")
GEMINI_SEARCH_MODEL = os.getenv("GEMINI_SEARCH_MODEL", "gemini-2.5-pro")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
GEMINI_TTS_MODEL = os.getenv("GEMINI_TTS_MODEL", "gemini-2.5-flash-preview-tts")
GEMINI_TTS_VOICE = os.getenv("GEMINI_TTS_VOICE", "Kore")

USER_AGENT = os.getenv("USER_AGENT", "Mozilla/5.0 (compatible; RecipeBot/1.0; +recipebox)")

# --- Retry budgets, one per call class ---
RETRY_ATTEMPTS_AI = int(os.getenv("RETRY_ATTEMPTS_AI", "2"))
RETRY_ATTEMPTS_NETWORK = int(os.getenv("RETRY_ATTEMPTS_NETWORK", "3"))
RETRY_INITIAL_DELAY_S = float(os.getenv("RETRY_INITIAL_DELAY_S", "1.0"))

# --- Deadlines (seconds) ---
TIMEOUT_FETCH_S = float(os.getenv("TIMEOUT_FETCH_S", "15"))
TIMEOUT_HEAD_S = float(os.getenv("TIMEOUT_HEAD_S", "5"))
TIMEOUT_AI_S = float(os.getenv("TIMEOUT_AI_S", "30"))
TIMEOUT_STRUCTURE_S = float(os.getenv("TIMEOUT_STRUCTURE_S", "20"))

# Page text handed to the model is capped at this many characters
MAX_PAGE_TEXT_CHARS = 10_000
# Shorter transcripts are not real captions
MIN_TRANSCRIPT_CHARS = 100
DEFAULT_SERVINGS = 4
