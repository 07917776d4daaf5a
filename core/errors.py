# =============================================================================
# core/errors.py  —  Error Taxonomy
# =============================================================================
#
# Every failure that leaves core/ is one of three kinds, all sharing the
# MemobirdError ancestor:
#
#   ApiError      → the vendor answered, but not with success
#                   (bad result code, missing field, unparseable JSON)
#   NetworkError  → we never got a usable HTTP answer
#                   (non-2xx status, timeout, connection failure)
#   ContentError  → the thing we were asked to print is unusable
#                   (bad base64, empty payload)
#
# The tool layer (tools/mcp_server.py) turns each kind into a different
# message for the agent.  Anything that is NOT a MemobirdError is reported
# there as "unexpected".
# =============================================================================

from typing import Optional


class MemobirdError(Exception):
    """Base class for every error raised by the Memobird client."""


class ApiError(MemobirdError):
    """The vendor API returned a protocol-level failure.

    Attributes:
        code: The vendor result code (``showapi_res_code``).  ``-1`` when the
            envelope carried no code, ``-2`` when the body was not JSON.
        message: The vendor error message, or our own description.
        status_code: HTTP status of the response, when one was received.
    """

    def __init__(self, code: int, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        status = status_code if status_code is not None else "N/A"
        super().__init__(f"API Error (HTTP Status: {status}, API Code: {code}): {message}")


class NetworkError(MemobirdError):
    """Transport-level failure: non-2xx status, timeout or connection error."""


class ContentError(MemobirdError):
    """The print content could not be built (bad base64, empty payload)."""
