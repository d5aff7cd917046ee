"""
pytest configuration for the voice relay tests.

Puts the project root on the Python path and points configuration at
throwaway locations before any application module is imported.
"""

import os
import sys
import tempfile
from pathlib import Path

# Set test environment variables BEFORE any imports
os.environ.setdefault("WX_TOKEN", "abc")
os.environ.setdefault("VOICE_STORE_DIR", tempfile.mkdtemp(prefix="voice_store_"))
os.environ.setdefault("VOICE_BASE_URL", "http://relay.test/voice/")
os.environ.setdefault("DOWNLOAD_WORKERS", "4")

# Add project root to Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))
