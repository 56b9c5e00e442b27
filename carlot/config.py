# carlot/config.py
"""Runtime configuration read from the environment (and a local .env file)."""
import os
from dotenv import load_dotenv

load_dotenv()


def _int(name, default):
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _float(name, default):
    raw = (os.getenv(name) or "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# database
DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL")
DB_POOL_SIZE = _int("DB_POOL_SIZE", 5)
DB_MAX_OVERFLOW = _int("DB_MAX_OVERFLOW", 10)

# listings
MAX_IMAGES = _int("MAX_IMAGES", 5)
MAX_IMAGE_BYTES = _int("MAX_IMAGE_BYTES", 5 * 1024 * 1024)
# folder inside the bucket; resolved paths keep it, e.g. "car-images/<ms>-<name>"
UPLOAD_PREFIX = os.getenv("UPLOAD_PREFIX", "car-images")

# object storage
STORAGE_PROVIDER = os.getenv("STORAGE_PROVIDER", "supabase").strip().lower()
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "dealership")
SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").rstrip("/")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
STORAGE_PUBLIC_URL = (os.getenv("STORAGE_PUBLIC_URL") or "").rstrip("/")
LOCAL_STORAGE_DIR = os.getenv("LOCAL_STORAGE_DIR", "./uploads")
STORAGE_TIMEOUT_SECONDS = _float("STORAGE_TIMEOUT_SECONDS", 15.0)

# text generation
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or ""
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
TEXTGEN_TIMEOUT_SECONDS = _float("TEXTGEN_TIMEOUT_SECONDS", 15.0)

# facebook page publishing
FACEBOOK_PAGE_ID = os.getenv("FACEBOOK_PAGE_ID", "")
FACEBOOK_PAGE_ACCESS_TOKEN = os.getenv("FACEBOOK_PAGE_ACCESS_TOKEN", "")
FACEBOOK_GRAPH_URL = os.getenv("FACEBOOK_GRAPH_URL", "https://graph.facebook.com")
FACEBOOK_TIMEOUT_SECONDS = _float("FACEBOOK_TIMEOUT_SECONDS", 15.0)

# identity provider
AUTH_JWKS_URL = os.getenv("AUTH_JWKS_URL", "")
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET", "")
AUTH_AUDIENCE = os.getenv("AUTH_AUDIENCE") or None
AUTH_ISSUER = os.getenv("AUTH_ISSUER") or None

# orphan sweep
ORPHAN_SWEEP_MINUTES = _int("ORPHAN_SWEEP_MINUTES", 0)
ORPHAN_SWEEP_DELETE = os.getenv("ORPHAN_SWEEP_DELETE", "0") == "1"

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
