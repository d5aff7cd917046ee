# --- File: core/errors.py ---
from typing import Optional


class VoiceRelayError(Exception):
    """Base class for errors raised by the voice relay pipeline."""


class ContentFetchError(VoiceRelayError):
    """An outbound GET could not be completed or its body could not be read."""
    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class AssetWriteError(VoiceRelayError):
    """A downloaded asset could not be written to local storage."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write asset {path}: {reason}")
