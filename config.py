"""
config.py
---------
Central configuration for the GeekNews batch translator.
Edit this file (or a .env file) to adjust behaviour without touching the source code.
"""
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# ── Files ─────────────────────────────────────────────────────────────────────
BASE_DIR          = Path(__file__).parent
INPUT_PATH        = Path(os.getenv("INPUT_PATH",        BASE_DIR / "geeknews-original-articles.json"))
OUTPUT_PATH       = Path(os.getenv("OUTPUT_PATH",       BASE_DIR / "geeknews-articles.json"))
PROGRESS_PATH     = Path(os.getenv("PROGRESS_PATH",     BASE_DIR / "geeknews-articles-progress.json"))
FIX_PROGRESS_PATH = Path(os.getenv("FIX_PROGRESS_PATH", BASE_DIR / "geeknews-fix-progress.json"))    # separate from translate's snapshot

# ── Translation ───────────────────────────────────────────────────────────────
TRANSLATION_BACKEND = os.getenv("TRANSLATION_BACKEND", "mymemory")
SOURCE_LANG         = os.getenv("SOURCE_LANG", "en")
TARGET_LANG         = os.getenv("TARGET_LANG", "ko")

MYMEMORY_EMAIL = os.getenv("MYMEMORY_EMAIL", "").strip()   # optional, lifts the free quota
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "").strip()   # required for google-cloud only

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# ── Pacing / Timeouts ─────────────────────────────────────────────────────────
REQUEST_TIMEOUT     = float(os.getenv("REQUEST_TIMEOUT", "30"))       # seconds per request
RATE_LIMIT_COOLDOWN = float(os.getenv("RATE_LIMIT_COOLDOWN", "60"))   # seconds before the single retry

# ── Checkpointing ─────────────────────────────────────────────────────────────
CHECKPOINT_EVERY = int(os.getenv("CHECKPOINT_EVERY", "5"))            # articles between snapshots

# ── Per-backend profiles ──────────────────────────────────────────────────────
# Request-size ceilings and pacing were tuned per service, not derived from a
# published contract, so each backend keeps its own values.
BACKEND_PROFILES = {
    "mymemory": {           # 500 chars per request on the anonymous tier
        "max_chunk_chars": 450,
        "chunk_mode":      "sentence",
        "request_delay":   1.2,
    },
    "google-web": {         # unofficial translate_a endpoint
        "max_chunk_chars": 4500,
        "chunk_mode":      "paragraph",
        "request_delay":   0.3,
    },
    "google-cloud": {       # Cloud Translation v2, needs GOOGLE_API_KEY
        "max_chunk_chars": 4500,
        "chunk_mode":      "paragraph",
        "request_delay":   0.2,
    },
}

# ── Leftover-English detection (fix command) ──────────────────────────────────
# Flag an article when MORE THAN this share of its words are Latin words of 4+ letters
UNTRANSLATED_THRESHOLD = 0.3

# ── Estimates ─────────────────────────────────────────────────────────────────
SECONDS_PER_CHUNK = 1.5     # observed average incl. pacing, used by `estimate`
