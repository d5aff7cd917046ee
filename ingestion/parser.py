# --- File: ingestion/parser.py ---
from typing import Dict, Union
from xml.etree import ElementTree
from pydantic import ValidationError
from ingestion.models import WxInboundMessage, ParseResult
import logging

logger = logging.getLogger(__name__)

# --- Callback Body Parsing ---

class WxMessageParser:
    """Parses the platform's XML callback body into a WxInboundMessage."""

    def parse(self, body: Union[bytes, str]) -> ParseResult:
        """
        Never raises. A body that is not XML, or whose fields do not validate,
        comes back as a failed ParseResult carrying the reason.
        """
        if not body or not body.strip():
            return ParseResult(error="empty body")

        try:
            root = ElementTree.fromstring(body)
        except ElementTree.ParseError as e:
            logger.warning(f"Callback body is not well-formed XML: {e}")
            return ParseResult(error=f"malformed XML: {e}")

        if root.tag != "xml":
            logger.debug(f"Unexpected root element <{root.tag}>, parsing children anyway.")

        fields = self._collect_fields(root)
        logger.debug(f"Parsed callback fields: {sorted(fields.keys())}")
        try:
            message = WxInboundMessage.model_validate(fields)
        except ValidationError as e:
            logger.warning(f"Callback envelope failed validation: {e.error_count()} error(s): {e}")
            return ParseResult(error=f"invalid envelope: {e}")

        return ParseResult(message=message)

    def _collect_fields(self, root: ElementTree.Element) -> Dict[str, str]:
        """Maps each direct child's tag to its stripped text; empty elements are skipped."""
        fields = {}
        for child in root:
            text = (child.text or "").strip()
            if text:
                fields[child.tag] = text
        return fields
