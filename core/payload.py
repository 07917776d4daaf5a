# =============================================================================
# core/payload.py  —  Print Payload Builder
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Collects an ordered list of text and image segments and turns them into
#   the single string the Memobird "printpaper" endpoint expects:
#
#       T:<base64 of utf-8 text>|P:<base64 of image bytes>|T:...
#
# RULES OF THE WIRE FORMAT:
#   - Segments keep the order they were added in.
#   - A text segment that is followed by another segment must end in "\n";
#     one is appended if missing (never a second one).
#   - Text is always encoded as UTF-8.  The printer firmware is believed to
#     prefer GBK for CJK text; that gap is known and not handled here.
#   - No segment → empty string.  The API client refuses to send that.
#
# SOFT FAILURES:
#   If one segment cannot be encoded (for example text holding a lone
#   surrogate), build() logs it and skips that segment instead of aborting.
#   Pass strict=True to turn that into a ContentError.
# =============================================================================

import base64
import binascii
import logging
from typing import Union

from core.errors import ContentError
from core.models import ImageSegment, Segment, TextSegment

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "|"


class PrintPayloadBuilder:
    """Chainable builder for Memobird print content.

    Usage:
        payload = (
            PrintPayloadBuilder()
            .add_text("Shopping list")
            .add_base64_image(logo_b64)
            .add_text("milk, eggs")
        )
        wire = payload.build()
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self._segments: list[Segment] = []

    def __len__(self) -> int:
        return len(self._segments)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    def add_text(self, text: str) -> "PrintPayloadBuilder":
        if not isinstance(text, str):
            raise TypeError("Text content must be a string.")
        logger.debug("Adding text segment (%d chars)", len(text))
        self._segments.append(TextSegment(text))
        return self

    def add_image_bytes(self, data: Union[bytes, bytearray]) -> "PrintPayloadBuilder":
        logger.debug("Adding image segment (%d bytes)", len(data))
        self._segments.append(ImageSegment(bytes(data)))
        return self

    def add_base64_image(self, data: str) -> "PrintPayloadBuilder":
        """Decode base64 image data and append it as an image segment.

        Raises:
            ContentError: ``data`` is not valid base64 or decodes to nothing.
                No segment is added in that case.
        """
        logger.debug("Adding base64 image segment")
        try:
            image_bytes = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError, TypeError) as exc:
            raise ContentError(f"Failed to decode base64 image data: {exc}") from exc
        if not image_bytes:
            raise ContentError("Base64 image data is empty.")
        return self.add_image_bytes(image_bytes)

    def build(self) -> str:
        tokens: list[str] = []
        last_index = len(self._segments) - 1

        for index, segment in enumerate(self._segments):
            try:
                tokens.append(_encode_segment(segment, is_last=index == last_index))
            except (UnicodeEncodeError, TypeError, ValueError) as exc:
                if self.strict:
                    raise ContentError(
                        f"Error encoding segment {index} (type {segment.tag}): {exc}"
                    ) from exc
                logger.error(
                    "Error encoding segment %d (type %s): %s. Skipping segment.",
                    index, segment.tag, exc,
                )

        payload = SEGMENT_SEPARATOR.join(tokens)
        logger.debug("Built payload string (length %d): %s...", len(payload), payload[:50])
        return payload


def _encode_segment(segment: Segment, is_last: bool) -> str:
    if isinstance(segment, TextSegment):
        text = segment.text
        if not is_last and not text.endswith("\n"):
            text += "\n"
        raw = text.encode("utf-8")
    else:
        raw = segment.data
    return f"{segment.tag}:{base64.b64encode(raw).decode('ascii')}"
