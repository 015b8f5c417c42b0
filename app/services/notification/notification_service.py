# app/services/notification/notification_service.py
"""Best-effort outbound notification after a booking is created"""
import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from app.config.settings import get_settings
from app.schemas.booking import BookingConfirmation

logger = logging.getLogger(__name__)


class NotificationService:
    """Posts booking events to the configured webhook (e.g. an automation hub)"""

    EVENT_BOOKING_CREATED = "booking.created"

    def __init__(
            self,
            url: Optional[str] = None,
            secret: Optional[str] = None,
            http_client: Optional[httpx.AsyncClient] = None
    ):
        settings = get_settings()
        self.url = url if url is not None else settings.BOOKING_WEBHOOK_URL
        self.secret = secret if secret is not None else settings.BOOKING_WEBHOOK_SECRET
        self.http_client = http_client or httpx.AsyncClient(
            timeout=settings.WEBHOOK_TIMEOUT_SECONDS,
            follow_redirects=True
        )

    @staticmethod
    def _sign_payload(payload_json: str, secret: str) -> str:
        """HMAC-SHA256 signature the receiver can check"""
        signature = hmac.new(
            secret.encode(),
            payload_json.encode(),
            hashlib.sha256
        ).hexdigest()
        return f"sha256={signature}"

    @staticmethod
    def build_payload(event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "event": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }

    async def send(self, event_type: str, data: Dict[str, Any]) -> bool:
        """
        Deliver one event. Never raises: the booking already exists, so a
        failed notification is only logged.

        Returns:
            True if the receiver answered 2xx, False otherwise (or if disabled)
        """
        if not self.url:
            logger.debug(f"No webhook URL configured, skipping {event_type}")
            return False

        payload_json = json.dumps(self.build_payload(event_type, data))
        headers = {
            "Content-Type": "application/json",
            "X-Webhook-Event": event_type,
            "User-Agent": "Booking-Webhook/1.0",
        }
        if self.secret:
            headers["X-Webhook-Signature"] = self._sign_payload(payload_json, self.secret)

        try:
            response = await self.http_client.post(self.url, content=payload_json, headers=headers)
        except httpx.TimeoutException:
            logger.warning(f"Webhook {event_type} timed out")
            return False
        except httpx.RequestError as e:
            logger.warning(f"Webhook {event_type} request error: {str(e)[:200]}")
            return False

        if 200 <= response.status_code < 300:
            logger.info(f"Webhook {event_type} delivered")
            return True

        logger.warning(f"Webhook {event_type} rejected: HTTP {response.status_code}: {response.text[:200]}")
        return False

    async def booking_created(self, confirmation: BookingConfirmation) -> bool:
        return await self.send(
            self.EVENT_BOOKING_CREATED,
            confirmation.model_dump(mode="json", exclude={"manage_token"}),
        )

    async def close(self):
        """Close the HTTP client."""
        await self.http_client.aclose()


async def notify_booking_created(confirmation: BookingConfirmation) -> None:
    """Background-task entry point: one client per notification"""
    service = NotificationService()
    try:
        await service.booking_created(confirmation)
    finally:
        await service.close()
