"""
Expo Notification Gateway

Production implementation posting to the Expo push API:
    https://docs.expo.dev/push-notifications/sending-notifications/

One POST per message, no retry. Any transport error, non-2xx reply or
non-JSON body is raised as NotificationDeliveryError.
"""

import logging
from typing import Optional

import httpx

from orderdesk.core.config import Settings
from orderdesk.core.errors import NotificationDeliveryError
from orderdesk.services.notifications.base import (
    BaseNotificationGateway,
    DeliveryResult,
    PushMessage,
)

logger = logging.getLogger(__name__)


class ExpoNotificationGateway(BaseNotificationGateway):
    """
    Expo push gateway.

    Example:
        >>> gateway = ExpoNotificationGateway(settings)
        >>> await gateway.send(PushMessage(
        ...     target="ExponentPushToken[xxxxxxxx]",
        ...     title="📦 Nova porudžbina",
        ...     body="Porudžbina #abc123 • 1250 RSD",
        ... ))
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self._push_url = settings.expo_push_url

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if settings.expo_access_token:
            headers["Authorization"] = f"Bearer {settings.expo_access_token}"

        self._headers = headers
        self._client = client or httpx.AsyncClient(timeout=settings.push_timeout_seconds)

        logger.info(f"ExpoNotificationGateway initialized ({self._push_url})")

    @property
    def provider_name(self) -> str:
        return "expo"

    async def send(self, message: PushMessage) -> DeliveryResult:
        """POST the message and return Expo's response body."""
        try:
            response = await self._client.post(
                self._push_url,
                json=message.to_payload(),
                headers=self._headers,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Expo push rejected ({e.response.status_code}): {e.response.text[:200]}")
            raise NotificationDeliveryError(
                f"Push gateway returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Expo push transport error: {e!r}")
            raise NotificationDeliveryError(str(e) or e.__class__.__name__) from e
        except ValueError as e:
            logger.error(f"Expo push returned malformed JSON: {e}")
            raise NotificationDeliveryError(f"Malformed gateway response: {e}") from e

        logger.info(f"Expo push response for {message.target}: {data}")
        return DeliveryResult(success=True, data=data, provider="expo")

    async def health_check(self) -> bool:
        return not self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()
