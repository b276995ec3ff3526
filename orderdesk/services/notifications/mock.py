"""
Mock Notification Gateway

Simulates Expo push delivery for development.
No actual messages are sent - just logged.
"""

import asyncio
import logging
import random
import uuid

from orderdesk.core.errors import NotificationDeliveryError
from orderdesk.services.notifications.base import (
    BaseNotificationGateway,
    DeliveryResult,
    PushMessage,
)

logger = logging.getLogger(__name__)


class MockNotificationGateway(BaseNotificationGateway):
    """Mock push gateway for development and tests."""

    def __init__(
        self,
        failure_rate: float = 0.05,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.sent: list[PushMessage] = []
        logger.info(f"MockNotificationGateway initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        """Simulate network latency."""
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def send(self, message: PushMessage) -> DeliveryResult:
        """Simulate an Expo push ticket."""
        await self._simulate_latency()

        if self._should_fail():
            logger.warning(f"Mock push failed (simulated) to {message.target}")
            raise NotificationDeliveryError("Simulated push failure")

        self.sent.append(message)
        ticket_id = f"push_mock_{uuid.uuid4().hex[:12]}"
        logger.info(f"Mock push sent to {message.target}: {message.body} (ID: {ticket_id})")

        return DeliveryResult(
            success=True,
            data={"data": {"status": "ok", "id": ticket_id}},
            provider="mock",
        )

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
