import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT_DIR = Path(__file__).parent.parent

# --- Catalog ---
UNIVERSITIES_FILE = Path(os.getenv("UNIVERSITIES_FILE", str(ROOT_DIR / "data" / "universities.json")))

# --- OpenAI (the key itself is read per request by the advisor) ---
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "500"))
CHAT_TIMEOUT_SECONDS = float(os.getenv("CHAT_TIMEOUT_SECONDS", "60"))

# --- Server ---
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

# --- Frontend ---
API_URL = os.getenv("API_URL", f"http://localhost:{PORT}")
COMPARISON_FILE = Path(os.getenv("COMPARISON_FILE", str(ROOT_DIR / ".local_storage.json")))
