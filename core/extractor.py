# --- File: core/extractor.py ---
import re
import logging
from typing import List, Union

logger = logging.getLogger(__name__)

VOICE_ID_PATTERN = re.compile(r'voice_encode_fileid="(.+?)"')


def extract_voice_ids(content: Union[str, bytes]) -> List[str]:
    """
    Returns every voice_encode_fileid value in order of appearance.
    Duplicates are kept. No match gives an empty list.
    """
    if isinstance(content, bytes):
        content = content.decode('utf-8', errors='replace')
    voice_ids = VOICE_ID_PATTERN.findall(content)
    logger.debug(f"Extracted {len(voice_ids)} voice id(s) from {len(content)} chars of content.")
    return voice_ids
