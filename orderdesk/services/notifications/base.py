"""
Notification Gateway Abstract Base Class

Defines the interface for delivering a single push message.
Supports both Mock (development) and Expo (production) implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class PushMessage:
    """One push notification; built per dispatch and never stored."""
    target: str
    title: str
    body: str
    sound: Optional[str] = "default"
    data: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "to": self.target,
            "title": self.title,
            "body": self.body,
        }
        if self.sound:
            payload["sound"] = self.sound
        if self.data:
            payload["data"] = self.data
        return payload


@dataclass
class DeliveryResult:
    """Outcome of a push request; `data` is the gateway's response body."""
    success: bool
    data: Any = None
    provider: str = "unknown"


class BaseNotificationGateway(ABC):
    """
    Abstract base class for push gateways.

    `send` makes exactly one attempt. Implementations raise
    NotificationDeliveryError when the message was not accepted.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send(self, message: PushMessage) -> DeliveryResult:
        """Deliver one push message."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass

    async def aclose(self) -> None:
        """Release network resources (no-op by default)."""
        return None
