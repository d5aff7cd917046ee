# --- File: config.py ---
import os
from dotenv import load_dotenv
import logging

load_dotenv()

LOG_LEVEL_FROM_ENV = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, LOG_LEVEL_FROM_ENV, logging.INFO)

logging.basicConfig(
    level=numeric_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# --- Handshake ---
WX_TOKEN = os.getenv("WX_TOKEN", "")

# --- Voice Storage ---
VOICE_STORE_DIR = os.getenv("VOICE_STORE_DIR", "./voice_store")
VOICE_BASE_URL = os.getenv("VOICE_BASE_URL", "http://localhost:8000/voice/")
if not VOICE_BASE_URL.endswith("/"):
    VOICE_BASE_URL += "/"
VOICE_FILE_EXTENSION = os.getenv("VOICE_FILE_EXTENSION", ".mp3")
SERVE_VOICE_FILES = os.getenv("SERVE_VOICE_FILES", "true").lower() == "true"
# Upper bound on reserved/failed asset names remembered for status checks
MAX_TRACKED_ASSETS = int(os.getenv("MAX_TRACKED_ASSETS", "10000"))

# --- Outbound Fetching ---
# The percent-encoded media id is appended to this template
VOICE_SOURCE_URL = os.getenv("VOICE_SOURCE_URL", "http://res.wx.qq.com/voice/getvoice?mediaid=")
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "30"))
DOWNLOAD_WORKERS = int(os.getenv("DOWNLOAD_WORKERS", "8"))


# --- Basic Validation ---
if not WX_TOKEN:
    logger.warning("WX_TOKEN environment variable not set. Handshake verification will never succeed.")
if DOWNLOAD_WORKERS <= 0:
    logger.warning(f"DOWNLOAD_WORKERS must be positive, got {DOWNLOAD_WORKERS}. Falling back to 1.")
    DOWNLOAD_WORKERS = 1
