"""
Core module initialization.
Exports configuration, logging utilities and domain errors.
"""

from orderdesk.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from orderdesk.core.errors import (
    OrderDeskError,
    ValidationFailed,
    Unauthorized,
    NotFound,
    NotificationDeliveryError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "OrderDeskError",
    "ValidationFailed",
    "Unauthorized",
    "NotFound",
    "NotificationDeliveryError",
]
