"""
Configuration settings for Tubely video ingestion
"""

import hashlib
import hmac
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


# ============================================================================
# PROJECT PATHS
# ============================================================================
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
ASSETS_DIR = Path(os.getenv("ASSETS_DIR", DATA_DIR / "assets"))
DATABASE_DIR = Path(os.getenv("DATABASE_DIR", DATA_DIR / "database"))
LOGS_DIR = Path(os.getenv("LOGS_DIR", BASE_DIR / "logs"))

# Scratch space for staged and remuxed uploads (None = system temp dir)
SCRATCH_DIR = Path(os.getenv("SCRATCH_DIR")) if os.getenv("SCRATCH_DIR") else None

# Create directories
DATA_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# ============================================================================
# SERVER
# ============================================================================
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8091"))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", f"http://localhost:{PORT}").rstrip("/")

# ============================================================================
# AUTHENTICATION
# ============================================================================
JWT_SECRET = os.getenv("JWT_SECRET", "dev-insecure-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ============================================================================
# OBJECT STORAGE
# ============================================================================
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")  # "local" or "s3"

S3_BUCKET = os.getenv("S3_BUCKET")
S3_REGION = os.getenv("S3_REGION", "us-east-1")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL") or None  # MinIO / LocalStack

# Signing key for the local backend's asset tokens. When unset it is derived
# from JWT_SECRET, so an asset token is never accepted as a bearer token.
ASSET_SIGNING_SECRET = os.getenv("ASSET_SIGNING_SECRET") or hmac.new(
    JWT_SECRET.encode(), b"tubely-assets", hashlib.sha256
).hexdigest()

SIGNED_URL_TTL_SECONDS = int(os.getenv("SIGNED_URL_TTL_SECONDS", "300"))  # 5 minutes

# ============================================================================
# UPLOAD LIMITS
# ============================================================================
MAX_VIDEO_UPLOAD_BYTES = int(os.getenv("MAX_VIDEO_UPLOAD_BYTES", 1 << 30))       # 1 GiB
MAX_THUMBNAIL_UPLOAD_BYTES = int(os.getenv("MAX_THUMBNAIL_UPLOAD_BYTES", 10 << 20))  # 10 MiB
UPLOAD_CHUNK_SIZE = 1024 * 1024

ALLOWED_VIDEO_TYPES = ("video/mp4",)
ALLOWED_THUMBNAIL_TYPES = ("image/jpeg", "image/png")

# ============================================================================
# MEDIA TOOLS
# ============================================================================
FFPROBE_BINARY = os.getenv("FFPROBE_BINARY", "ffprobe")
FFMPEG_BINARY = os.getenv("FFMPEG_BINARY", "ffmpeg")
PROBE_TIMEOUT_SECONDS = int(os.getenv("PROBE_TIMEOUT_SECONDS", "30"))
REMUX_TIMEOUT_SECONDS = int(os.getenv("REMUX_TIMEOUT_SECONDS", "600"))

# Absolute tolerance when matching width/height against 16/9 and 9/16
ASPECT_RATIO_TOLERANCE = float(os.getenv("ASPECT_RATIO_TOLERANCE", "0.02"))

# ============================================================================
# DATABASE SETTINGS
# ============================================================================
DATABASE_PATH = Path(os.getenv("DATABASE_PATH", DATABASE_DIR / "tubely.db"))

# ============================================================================
# LOGGING
# ============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()  # DEBUG, INFO, WARNING, ERROR
LOG_FILE = Path(os.getenv("LOG_FILE", LOGS_DIR / "tubely.log"))

# ============================================================================
# DEVELOPMENT MODE
# ============================================================================
DEBUG_MODE = _env_bool("DEBUG")

if DEBUG_MODE:
    print("⚠️  DEBUG MODE ENABLED")
    LOG_LEVEL = "DEBUG"
