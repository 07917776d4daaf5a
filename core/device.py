# =============================================================================
# core/device.py  —  A Bound Memobird Printer
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   MemobirdDevice is what the tool layer talks to.  It pairs an API client
#   with a Session (device id + user id) and offers one-call print methods.
#
# TWO-PHASE SETUP, ONE ENTRY POINT:
#   Getting a user id needs a network call, and constructors can't await.
#   So there is exactly one way to get a device:
#
#       device = await MemobirdDevice.create(access_key, device_id)
#
#   create() binds the user first and only then builds the device.  If the
#   bind fails, the caller gets the error and never sees a half-made device.
# =============================================================================

import logging
from typing import Optional

import httpx

from core.client import MemobirdApiClient
from core.config import DEFAULT_API_BASE_URL
from core.errors import ContentError, MemobirdError
from core.models import Session
from core.payload import PrintPayloadBuilder

logger = logging.getLogger(__name__)


class MemobirdDevice:
    """A printer whose user binding has already succeeded."""

    def __init__(self, client: MemobirdApiClient, session: Session):
        self._client = client
        self.session = session

    @classmethod
    async def create(
        cls,
        access_key: str,
        device_id: str,
        user_identifying: str = "",
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "MemobirdDevice":
        """Bind ``device_id`` and return a ready-to-print device.

        Raises:
            ValueError: empty access key or device id.
            ApiError / NetworkError: the bind call failed.
        """
        if not device_id:
            raise ValueError("Memobird device id cannot be empty.")
        logger.info("Initializing MemobirdDevice for device: %s...", device_id)

        client = MemobirdApiClient(access_key, base_url=base_url, transport=transport)
        user_id = await client.bind_user(device_id, user_identifying)
        session = Session(device_id=device_id, user_id=user_id, access_key=access_key)

        logger.info("MemobirdDevice initialized for user ID: %s.", user_id)
        return cls(client, session)

    @property
    def device_id(self) -> str:
        return self.session.device_id

    @property
    def user_id(self) -> str:
        return self.session.user_id

    async def print_text(self, text: str) -> int:
        payload = PrintPayloadBuilder().add_text(text)
        return await self.print_payload(payload)

    async def print_image(self, image_base64: str) -> int:
        """Print pre-encoded image data.

        The bytes are sent as-is: no resizing, no conversion to the 1-bit
        bitmap the printer wants.  The caller must supply that.
        """
        try:
            payload = PrintPayloadBuilder().add_base64_image(image_base64)
            return await self.print_payload(payload)
        except MemobirdError as exc:
            logger.error("Failed to print image: %s", exc)
            raise
        except (TypeError, ValueError) as exc:
            logger.error("Failed to prepare image for printing: %s", exc)
            raise ContentError(f"Failed to prepare image for printing: {exc}") from exc

    async def print_payload(self, payload: PrintPayloadBuilder) -> int:
        return await self._client.print_content(self.device_id, self.user_id, payload)

    async def print_url(self, url: str) -> int:
        return await self._client.print_url(self.device_id, self.user_id, url)

    async def check_print_status(self, content_id: int) -> bool:
        return await self._client.check_print_status(content_id)
