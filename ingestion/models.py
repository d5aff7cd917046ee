# --- File: ingestion/models.py ---
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

# --- Inbound Platform Message Models (using Pydantic) ---

class MessageKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VOICE = "voice"
    VIDEO = "video"
    SHORTVIDEO = "shortvideo"
    LOCATION = "location"
    LINK = "link"
    EVENT = "event"


class WxInboundMessage(BaseModel):
    """One callback envelope as posted by the platform. Field aliases match the XML element names."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    to_user: str = Field("", alias="ToUserName", description="Account that received the message (this endpoint)")
    from_user: str = Field("", alias="FromUserName", description="Sender's open id")
    create_time: int = Field(0, alias="CreateTime", description="Unix timestamp set by the platform")
    msg_type: str = Field(MessageKind.TEXT.value, alias="MsgType", description="Kind as sent; values outside MessageKind are kept")
    content: str = Field("", alias="Content", description="Text body; for this service, the article URL")
    msg_id: Optional[int] = Field(None, alias="MsgId")

    # Kind-specific fields, carried but unused
    pic_url: Optional[str] = Field(None, alias="PicUrl")
    media_id: Optional[str] = Field(None, alias="MediaId")
    format: Optional[str] = Field(None, alias="Format")
    recognition: Optional[str] = Field(None, alias="Recognition")
    thumb_media_id: Optional[str] = Field(None, alias="ThumbMediaId")
    location_x: Optional[float] = Field(None, alias="Location_X")
    location_y: Optional[float] = Field(None, alias="Location_Y")
    scale: Optional[int] = Field(None, alias="Scale")
    label: Optional[str] = Field(None, alias="Label")

    @property
    def kind(self) -> Optional[MessageKind]:
        """The known MessageKind, or None for kinds this service does not list."""
        try:
            return MessageKind(self.msg_type)
        except ValueError:
            return None

    @property
    def source_url(self) -> str:
        return self.content.strip()


class ParseResult(BaseModel):
    """Outcome of parsing a callback body. Exactly one of message/error is set."""
    message: Optional[WxInboundMessage] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.message is not None
