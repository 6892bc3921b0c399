import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")

# --- JWT Configuration (tokens are issued by Supabase Auth) ---
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")

# --- Health chat edge function ---
HEALTH_CHAT_URL = os.getenv("HEALTH_CHAT_URL", f"{SUPABASE_URL}/functions/v1/health-chat")

# --- Health score / badges ---
SCORE_WINDOW_DAYS = int(os.getenv("SCORE_WINDOW_DAYS", "30"))
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "20"))
# "always" appends a snapshot on every calculation, "on_new_data" only when a newer log exists
SNAPSHOT_MODES = ("always", "on_new_data")


def parse_snapshot_mode(value: str) -> str:
    mode = (value or "").strip().lower()
    if mode not in SNAPSHOT_MODES:
        logger.warning(f"Unknown SCORE_SNAPSHOT_MODE {value!r}, using 'always'")
        return "always"
    return mode


SCORE_SNAPSHOT_MODE = parse_snapshot_mode(os.getenv("SCORE_SNAPSHOT_MODE", "always"))
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")

# --- HTTP ---
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- Assistant ---
ASSISTANT_NAME = os.getenv("ASSISTANT_NAME", "HealthMate")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
