# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of every piece of information that flows
# between the payload builder, the API client and the tool layer.
#
#   TextSegment / ImageSegment → one piece of a print job, in order
#   Session                    → the bound (device, user, access key) triple
#   ApiEnvelope                → a decoded vendor response
#   ResultStatus               → SUCCESS or FAILURE, derived from the envelope
#
# The vendor's "result code 1 means success" rule lives in exactly one place:
# ApiEnvelope.status.  Nothing else in the code compares result codes.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


# -----------------------------------------------------------------------------
# Segments: the building blocks of a print payload
# -----------------------------------------------------------------------------
# A payload is an ordered list of segments.  The tag letter is what appears
# on the wire in front of the base64 data ("T:..." or "P:...").
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TextSegment:
    """A run of text, stored as the raw string (encoded at build time)."""

    text: str
    tag: str = field(default="T", init=False)


@dataclass(frozen=True)
class ImageSegment:
    """Raw image bytes, expected to already be printer-compatible (1-bit BMP)."""

    data: bytes
    tag: str = field(default="P", init=False)


Segment = Union[TextSegment, ImageSegment]


# -----------------------------------------------------------------------------
# Session: who we are printing as
# -----------------------------------------------------------------------------
# user_id comes from the bind call and never changes afterwards.  The
# dataclass is frozen so nothing can re-bind a live session.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Session:
    """A device bound to a vendor-issued user id."""

    device_id: str
    user_id: str
    access_key: str = field(repr=False)


# -----------------------------------------------------------------------------
# ResultStatus + ApiEnvelope: the vendor's JSON wrapper
# -----------------------------------------------------------------------------
class ResultStatus(Enum):
    """Closed set of outcomes a vendor envelope can signal."""

    SUCCESS = "success"
    FAILURE = "failure"


SUCCESS_CODE = 1
MISSING_CODE = -1


@dataclass(frozen=True)
class ApiEnvelope:
    """A decoded vendor response.

    ``fields`` holds the full JSON object, so endpoint-specific values such as
    ``showapi_userid`` or ``printcontentid`` are read from it directly.
    """

    result_code: int
    error_message: str
    fields: dict[str, Any]
    http_status: Optional[int] = None

    @classmethod
    def from_json(cls, data: Any, http_status: Optional[int] = None) -> "ApiEnvelope":
        """Wrap parsed JSON.  Non-object bodies become an envelope with no code."""
        if not isinstance(data, dict):
            data = {}
        code = data.get("showapi_res_code")
        if isinstance(code, bool) or not isinstance(code, int):
            code = MISSING_CODE
        message = data.get("showapi_res_error") or "Unknown API error"
        return cls(
            result_code=code,
            error_message=str(message),
            fields=data,
            http_status=http_status,
        )

    @property
    def status(self) -> ResultStatus:
        if self.result_code == SUCCESS_CODE:
            return ResultStatus.SUCCESS
        return ResultStatus.FAILURE

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)
