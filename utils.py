# --- File: utils.py ---
from typing import Mapping, Optional, Sequence
import logging

# --- Utility Functions ---

HANDSHAKE_PARAMS = ("signature", "timestamp", "nonce", "echostr")


def check_params(query: Mapping[str, str], required: Sequence[str] = HANDSHAKE_PARAMS) -> Optional[str]:
    """Returns the first required key missing from the query, or None if all are present."""
    for key in required:
        if key not in query:
            logging.debug(f"Required parameter '{key}' missing from query keys {sorted(query.keys())}")
            return key
    return None
