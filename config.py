"""
FBFood back-office - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR   = Path(__file__).resolve().parent
PUBLIC_DIR = Path(os.environ.get("FBFOOD_PUBLIC_DIR", BASE_DIR / "public")).resolve()

# Stored images land in PUBLIC_DIR/uploads/<kind>/ and are referenced
# as /uploads/<kind>/<file> in entity rows.
UPLOADS_URL_PREFIX = "/uploads"

# Searched in order when a CSV picture cell holds a bare filename
IMAGE_SEARCH_DIRS = [
    PUBLIC_DIR / "images",
    PUBLIC_DIR / "source-images",
    PUBLIC_DIR,
]

# Picture used for auto-created categories / brands
PLACEHOLDER_PICTURE = "/file.svg"

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("FBFOOD_DB", f"sqlite:///{BASE_DIR / 'fbfood.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("FBFOOD_HOST", "0.0.0.0")
PORT   = int(os.environ.get("FBFOOD_PORT", "5000"))
DEBUG  = os.environ.get("FBFOOD_DEBUG", "0") == "1"
SECRET = os.environ.get("FBFOOD_SECRET", "fbfood-dev-key-change-in-prod")
LOG_LEVEL = os.environ.get("FBFOOD_LOG_LEVEL", "INFO").upper()

SESSION_COOKIE   = "fbfood_session"
MAX_UPLOAD_BYTES = int(os.environ.get("FBFOOD_MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

# ── Image fetching ─────────────────────────────────────────────────────
FETCH_TIMEOUT = float(os.environ.get("FBFOOD_FETCH_TIMEOUT", "15"))
# Some image hosts reject non-browser user agents
FETCH_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124 Safari/537.36"
)

# Keep a "/path" picture that does not exist under PUBLIC_DIR as the stored
# reference instead of failing the row.
KEEP_UNRESOLVED_PUBLIC_PATHS = os.environ.get("FBFOOD_KEEP_UNRESOLVED_PATHS", "0") == "1"

# ── Pagination / reporting ─────────────────────────────────────────────
API_MAX_LIMIT       = 1000
API_DEFAULT_LIMIT   = 100
ERROR_PREVIEW_LIMIT = 50
