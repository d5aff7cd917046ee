# --- File: core/fetcher.py ---
import logging
import requests
import config
from core.errors import ContentFetchError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {'User-Agent': 'WxVoiceRelay/1.0'}


def fetch_content(url: str, timeout: float = config.FETCH_TIMEOUT) -> bytes:
    """
    Issues a single blocking GET and returns the full response body.

    Any failure to connect or to read the body is raised as ContentFetchError.
    Non-2xx responses are not errors at this level; their body is returned as-is.
    There are no retries.
    """
    logger.debug(f"Fetching {url} (timeout={timeout}s)")
    try:
        with requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout, stream=True) as response:
            if not response.ok:
                logger.warning(f"GET {url} returned HTTP {response.status_code}; using body anyway.")
            body = response.content # Reads the whole stream; may raise mid-body
    except requests.exceptions.RequestException as e:
        logger.error(f"Error fetching URL {url}: {e}")
        raise ContentFetchError(url, str(e)) from e

    logger.debug(f"Fetched {len(body)} bytes from {url}")
    return body
