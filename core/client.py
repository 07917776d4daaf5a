# =============================================================================
# core/client.py  —  Memobird Open API Client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Wraps the four Memobird cloud endpoints behind async methods:
#
#     bind_user           GET  /setuserbind        → user id (str)
#     print_content       POST /printpaper         → content id (int)
#     print_url           POST /printpaperFromUrl  → content id (int)
#     check_print_status  GET  /getprintstatus     → printed? (bool)
#
# EVERY CALL:
#   1. Adds the access key ("ak") and a fresh "YYYY-MM-DD HH:MM:SS" timestamp.
#      The timestamp is generated per call; stale ones are rejected upstream.
#   2. Runs under its own deadline (15 s default, 20 s for print, 30 s for
#      print-from-URL).  Past the deadline the request is cancelled and a
#      NetworkError is raised.
#   3. Reads the body as text, THEN parses JSON, so a parse failure can still
#      show what the server actually sent.
#   4. Maps the outcome onto the error taxonomy in core/errors.py:
#        non-2xx            → NetworkError
#        body is not JSON   → ApiError(code=-2)
#        result code != 1   → ApiError(vendor code)
#
# No retries are attempted.  Each call opens its own httpx.AsyncClient, so
# concurrent calls share nothing but the (read-only) access key.
# =============================================================================

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from core.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT_S,
    PRINT_REQUEST_TIMEOUT_S,
    PRINT_URL_REQUEST_TIMEOUT_S,
)
from core.errors import ApiError, ContentError, MemobirdError, NetworkError
from core.models import ApiEnvelope, ResultStatus
from core.payload import PrintPayloadBuilder

logger = logging.getLogger(__name__)

# Sentinel code for a response body that is not valid JSON.
JSON_DECODE_ERROR_CODE = -2

_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def current_timestamp() -> str:
    """Local time in the 'yyyy-MM-dd HH:mm:ss' form the API signs against."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class MemobirdApiClient:
    """Low-level client for the Memobird open API.

    Args:
        access_key: Vendor-issued access key ("ak").  Must not be empty.
        base_url: API root, without a trailing slash.
        transport: Optional httpx transport.  Tests pass an
            ``httpx.MockTransport`` here; production leaves it as None.
    """

    def __init__(
        self,
        access_key: str,
        base_url: str = DEFAULT_API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not access_key:
            raise ValueError("Memobird API Key (ak) cannot be empty.")
        self._access_key = access_key
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        logger.info("MemobirdApiClient initialized (base URL %s).", self.base_url)

    # =========================================================================
    # Request plumbing
    # =========================================================================
    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, str]] = None,
        json_data: Optional[dict[str, Any]] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_S,
    ) -> ApiEnvelope:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s (timeout %.1fs)", method, url, timeout)

        try:
            return await asyncio.wait_for(
                self._send(method, url, params, json_data, timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise NetworkError(f"Request to {path} timed out after {timeout:g}s") from exc
        except MemobirdError:
            raise
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {path} failed: {exc}") from exc

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, str]],
        json_data: Optional[dict[str, Any]],
        timeout: float,
    ) -> ApiEnvelope:
        async with httpx.AsyncClient(
            headers=_HEADERS, timeout=timeout, transport=self._transport
        ) as client:
            response = await client.request(method, url, params=params, json=json_data)
            return _check_response(response)

    # =========================================================================
    # Endpoints
    # =========================================================================
    async def bind_user(self, device_id: str, user_identifying: str = "") -> str:
        """Bind a device and return the vendor-issued user id."""
        params = {
            "ak": self._access_key,
            "timestamp": current_timestamp(),
            "memobirdID": device_id,
            "useridentifying": user_identifying,
        }
        logger.info("Getting user ID for device %s...", device_id)
        envelope = await self._request("GET", "/setuserbind", params=params)

        user_id = envelope.get("showapi_userid")
        if not user_id:
            raise ApiError(
                envelope.result_code,
                "User ID not found in successful API response.",
                envelope.http_status,
            )
        logger.info("Obtained user ID: %s", user_id)
        return str(user_id)

    async def print_content(
        self, device_id: str, user_id: str, payload: PrintPayloadBuilder
    ) -> int:
        """Send a built payload to the printer and return its content id."""
        content = payload.build()
        if not content:
            logger.warning("Content payload is empty, nothing to print.")
            raise ContentError("Cannot print empty content.")

        json_data = {
            "ak": self._access_key,
            "timestamp": current_timestamp(),
            "printcontent": content,
            "memobirdID": device_id,
            "userID": user_id,
        }
        logger.info("Sending content to device %s (user %s)...", device_id, user_id)
        envelope = await self._request(
            "POST", "/printpaper", json_data=json_data, timeout=PRINT_REQUEST_TIMEOUT_S
        )
        content_id = _content_id(envelope, "print")
        logger.info("Print request successful. Content ID: %s", content_id)
        return content_id

    async def print_url(self, device_id: str, user_id: str, url: str) -> int:
        """Ask the vendor to fetch, render and print a web page."""
        json_data = {
            "ak": self._access_key,
            "timestamp": current_timestamp(),
            "printUrl": url,
            "memobirdID": device_id,
            "userID": user_id,
        }
        logger.info("Sending URL %s to device %s (user %s)...", url, device_id, user_id)
        envelope = await self._request(
            "POST", "/printpaperFromUrl", json_data=json_data, timeout=PRINT_URL_REQUEST_TIMEOUT_S
        )
        content_id = _content_id(envelope, "print URL")
        logger.info("Print URL request successful. Content ID: %s", content_id)
        return content_id

    async def check_print_status(self, content_id: int) -> bool:
        """Return True once the job has been printed, False while pending."""
        params = {
            "ak": self._access_key,
            "timestamp": current_timestamp(),
            "printcontentid": str(content_id),
        }
        logger.info("Checking print status for Content ID: %s...", content_id)
        envelope = await self._request("GET", "/getprintstatus", params=params)

        flag = envelope.get("printflag")
        printed = flag == 1 and not isinstance(flag, bool)
        logger.info(
            "Print status for %s: %s", content_id, "Printed" if printed else "Not Printed/Pending"
        )
        return printed


# =============================================================================
# Response handling
# =============================================================================
def _check_response(response: httpx.Response) -> ApiEnvelope:
    text = response.text

    if not response.is_success:
        raise NetworkError(
            f"HTTP Error: {response.status_code} {response.reason_phrase}. "
            f"Response: {text[:200]}..."
        )

    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ApiError(
            JSON_DECODE_ERROR_CODE,
            f"Failed to decode JSON response: {exc}. Response text: {text[:100]}...",
            response.status_code,
        ) from exc

    envelope = ApiEnvelope.from_json(data, http_status=response.status_code)
    if envelope.status is ResultStatus.FAILURE:
        raise ApiError(envelope.result_code, envelope.error_message, response.status_code)
    return envelope


def _content_id(envelope: ApiEnvelope, action: str) -> int:
    raw = envelope.get("printcontentid")
    if raw is None:
        raise ApiError(
            envelope.result_code,
            f"Content ID not found in successful {action} API response.",
            envelope.http_status,
        )
    content_id = _as_int(raw)
    if content_id is None:
        raise ApiError(
            envelope.result_code,
            f"Content ID {raw!r} in {action} API response is not a number.",
            envelope.http_status,
        )
    return content_id


def _as_int(value) -> Optional[int]:
    """Whole numbers only: ints, integral floats and digit strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value)
    return None
