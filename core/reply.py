# --- File: core/reply.py ---
import logging
from typing import Sequence
from api.models import WxTextReply, ReplyResult

logger = logging.getLogger(__name__)


def cdata(value: str) -> str:
    # A literal "]]>" would close the section early; split it across two sections
    return "<![CDATA[" + value.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def serialize_text_reply(reply: WxTextReply) -> str:
    return (
        "<xml>"
        f"<ToUserName>{cdata(reply.to_user)}</ToUserName>"
        f"<FromUserName>{cdata(reply.from_user)}</FromUserName>"
        f"<CreateTime>{int(reply.create_time)}</CreateTime>"
        f"<MsgType>{cdata(reply.msg_type)}</MsgType>"
        f"<Content>{cdata(reply.content)}</Content>"
        "</xml>"
    )


def compose_text_reply(sender_id: str, recipient_id: str, content: str) -> ReplyResult:
    """
    Builds the reply to a message sent by sender_id to recipient_id: the roles are
    swapped, the kind is "text" and the timestamp is now. Serialization problems are
    logged and reported through the result rather than raised.
    """
    try:
        reply = WxTextReply(to_user=sender_id, from_user=recipient_id, content=content)
        xml = serialize_text_reply(reply)
    except Exception as e:
        logger.error(f"Failed to build text reply for {sender_id} (from {recipient_id}): {e}", exc_info=True)
        return ReplyResult(error=str(e))
    return ReplyResult(xml=xml)


def compose_url_reply(sender_id: str, recipient_id: str, urls: Sequence[str]) -> ReplyResult:
    """One URL per line."""
    return compose_text_reply(sender_id, recipient_id, "\n".join(urls))
