# --- File: core/downloader.py ---
import logging
import os
import threading
import uuid
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence
from urllib.parse import quote

import config
from core.errors import AssetWriteError, VoiceRelayError
from core.fetcher import fetch_content
from core.guid import GuidGenerator

logger = logging.getLogger(__name__)


class AssetState(str, Enum):
    RESERVED = "reserved"          # URL handed out, file not written yet
    MATERIALIZED = "materialized"  # file fully written
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass
class VoiceAsset:
    """One voice clip scheduled for download. public_url is valid before the file exists."""
    voice_id: str
    filename: str
    source_url: str
    public_url: str
    future: Optional[Future] = None


class VoiceDownloader:
    """
    Downloads voice clips into local storage on a bounded thread pool.

    download_all() returns as soon as every clip has been queued; the caller gets the
    public URLs immediately and never observes the outcome of an individual download.
    Failures are logged and recorded as AssetState.FAILED, nothing is re-raised.
    """
    def __init__(
        self,
        store_dir: str = config.VOICE_STORE_DIR,
        base_url: str = config.VOICE_BASE_URL,
        source_url: str = config.VOICE_SOURCE_URL,
        extension: str = config.VOICE_FILE_EXTENSION,
        max_workers: int = config.DOWNLOAD_WORKERS,
        timeout: float = config.FETCH_TIMEOUT,
        max_tracked: int = config.MAX_TRACKED_ASSETS,
        guid_generator: Optional[GuidGenerator] = None
    ):
        self.store_dir = store_dir
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.source_url = source_url
        self.extension = extension
        self.timeout = timeout
        self.guid_generator = guid_generator or GuidGenerator()
        # Only reserved and failed names are tracked; materialized ones are found on disk
        self.max_tracked = max(1, max_tracked)
        self._states: "OrderedDict[str, AssetState]" = OrderedDict()
        self._lock = threading.Lock()
        os.makedirs(self.store_dir, exist_ok=True)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="voice-dl")
        logger.info(f"VoiceDownloader initialized (store_dir={self.store_dir}, workers={max_workers})")

    def public_url(self, filename: str) -> str:
        return self.base_url + filename

    def download_all(self, voice_ids: Sequence[str]) -> List[VoiceAsset]:
        """Queues one download per voice id and returns the assets in input order."""
        if not voice_ids:
            return []

        # One token per batch; the index keeps names distinct inside the batch
        guid = self.guid_generator.next()
        assets = []
        for i, voice_id in enumerate(voice_ids):
            filename = f"{guid}{i}{self.extension}"
            asset = VoiceAsset(
                voice_id=voice_id,
                filename=filename,
                source_url=self.source_url + quote(voice_id, safe=''),
                public_url=self.public_url(filename)
            )
            self._set_state(filename, AssetState.RESERVED)
            try:
                asset.future = self._executor.submit(self._download_one, asset.source_url, filename)
            except RuntimeError as e: # Pool already shut down
                logger.error(f"Could not schedule download of {asset.source_url} to {filename}: {e}")
                self._set_state(filename, AssetState.FAILED)
            assets.append(asset)

        logger.info(f"Queued {len(assets)} voice download(s) under token {guid}")
        return assets

    def status(self, filename: str) -> AssetState:
        with self._lock:
            state = self._states.get(filename)
        if state is not None:
            return state
        if os.path.exists(os.path.join(self.store_dir, filename)):
            return AssetState.MATERIALIZED
        return AssetState.UNKNOWN

    @property
    def tracked(self) -> int:
        """Number of reserved or failed names currently remembered."""
        with self._lock:
            return len(self._states)

    def shutdown(self, wait: bool = True):
        logger.info(f"Shutting down voice download pool (wait={wait})...")
        self._executor.shutdown(wait=wait)

    def _set_state(self, filename: str, state: AssetState):
        with self._lock:
            self._states[filename] = state
            self._states.move_to_end(filename)
            while len(self._states) > self.max_tracked:
                evicted, evicted_state = self._states.popitem(last=False)
                logger.debug(f"Dropped state '{evicted_state.value}' for {evicted} (over {self.max_tracked} tracked)")

    def _forget(self, filename: str):
        with self._lock:
            self._states.pop(filename, None)

    def _download_one(self, source_url: str, filename: str) -> Optional[str]:
        path = os.path.join(self.store_dir, filename)
        try:
            data = fetch_content(source_url, timeout=self.timeout)
            self._write_file(path, data)
        except VoiceRelayError as e:
            logger.error(f"Voice download failed ({source_url} -> {path}): {e}")
            self._set_state(filename, AssetState.FAILED)
            return None
        except Exception as e:
            logger.error(f"Unexpected error downloading {source_url} -> {path}: {e}", exc_info=True)
            self._set_state(filename, AssetState.FAILED)
            return None

        # The file on disk now answers status()
        self._forget(filename)
        logger.info(f"Stored voice clip {path} ({len(data)} bytes)")
        return path

    def _write_file(self, path: str, data: bytes):
        """
        Writes to a private temporary name, then links it to the final name.
        The final name only ever appears complete, and an existing file is never overwritten.
        """
        tmp_path = f"{path}.{uuid.uuid4().hex}.part"
        try:
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o777)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.link(tmp_path, path)
        except OSError as e:
            raise AssetWriteError(path, str(e)) from e
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
