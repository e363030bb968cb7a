"""
SheetSync - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("SHEETSYNC_DB", f"sqlite:///{BASE_DIR / 'sheetsync.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("SHEETSYNC_HOST", "0.0.0.0")
PORT   = int(os.environ.get("SHEETSYNC_PORT", "5000"))
DEBUG  = os.environ.get("SHEETSYNC_DEBUG", "0") == "1"
SECRET = os.environ.get("SHEETSYNC_SECRET", "sheetsync-dev-key-change-in-prod")

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL  = os.environ.get("SHEETSYNC_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# ── Templates ──────────────────────────────────────────────────────────
MAX_TEMPLATE_COLUMNS = 5
DATA_TYPES = ("string", "number", "date", "boolean")

# ── Import ─────────────────────────────────────────────────────────────
RECORD_ID_HEADER   = "__record_id"
DATE_FORMAT        = os.environ.get("SHEETSYNC_DATE_FORMAT", "%Y-%m-%d")
MAX_UPLOAD_BYTES   = int(os.environ.get("SHEETSYNC_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
ALLOWED_EXTENSIONS = frozenset({".xlsx", ".csv"})

# ── Display ────────────────────────────────────────────────────────────
DISPLAY_DATE_FORMAT = "%m/%d/%Y"
