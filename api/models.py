from pydantic import BaseModel, Field
from typing import Optional
import time

# --- API Request/Response Models (using Pydantic) ---

class HandshakeParams(BaseModel):
    """Query parameters of the platform's GET verification request."""
    signature: str = Field(..., description="Hex SHA-1 computed by the platform")
    timestamp: str
    nonce: str
    echostr: str = Field(..., description="Challenge to echo back when the signature matches")


class WxTextReply(BaseModel):
    """Passive text reply envelope. from_user/to_user are already swapped relative to the inbound message."""
    to_user: str
    from_user: str
    create_time: int = Field(default_factory=lambda: int(time.time()))
    msg_type: str = "text"
    content: str = ""


class ReplyResult(BaseModel):
    """Outcome of serializing a reply. On failure xml is empty and error says why."""
    xml: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AssetStatusResponse(BaseModel):
    """Response model for checking whether a handed-out voice URL is backed by a file yet."""
    filename: str
    state: str = Field(..., description="'reserved', 'materialized', 'failed' or 'unknown'")
