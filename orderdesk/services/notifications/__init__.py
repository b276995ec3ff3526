"""
Notification Gateway Factory

Returns the Mock or Expo push gateway based on ENV_MODE. The result is not
cached: the application lifespan builds one gateway and injects it.
"""

import logging

from orderdesk.core.config import Settings
from orderdesk.services.notifications.base import (
    BaseNotificationGateway,
    DeliveryResult,
    PushMessage,
)
from orderdesk.services.notifications.expo import ExpoNotificationGateway
from orderdesk.services.notifications.mock import MockNotificationGateway

logger = logging.getLogger(__name__)


def build_notification_gateway(settings: Settings) -> BaseNotificationGateway:
    """Build the push gateway for the configured environment."""
    if settings.is_development:
        logger.info("Notification Gateway: Using MockNotificationGateway (development mode)")
        return MockNotificationGateway(failure_rate=0.05, min_latency=0.1, max_latency=0.3)

    logger.info(f"Notification Gateway: Using ExpoNotificationGateway ({settings.env_mode.value} mode)")
    return ExpoNotificationGateway(settings)


__all__ = [
    "build_notification_gateway",
    "BaseNotificationGateway",
    "DeliveryResult",
    "PushMessage",
    "ExpoNotificationGateway",
    "MockNotificationGateway",
]
