"""
Notification Dispatcher

Builds push messages for the two audiences and hands them to the gateway:

    admin - "new order" alert with the order total
    user  - "status changed" alert with the new status

`dispatch` is awaited by the dedicated notify endpoints and raises on
failure. `spawn_detached` is used on the order-creation path: the task is
never joined by the request and its failure is only logged.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Optional

from orderdesk.core.errors import NotificationDeliveryError, ValidationFailed
from orderdesk.services.notifications.base import (
    BaseNotificationGateway,
    DeliveryResult,
    PushMessage,
)

logger = logging.getLogger(__name__)

ADMIN_TITLE = "📦 Nova porudžbina"
USER_TITLE = "📣 Status porudžbine"
MISSING_TOTAL = "—"


class Audience(str, Enum):
    ADMIN = "admin"
    USER = "user"


def short_order_id(order_id: str) -> str:
    """Last six characters of the id; shorter ids are used whole."""
    return order_id[-6:]


def build_message(
    audience: Audience,
    target: str,
    order_id: str,
    extra: Optional[dict[str, Any]] = None,
) -> PushMessage:
    """
    Build the title/body pair for one audience.

    `extra` carries `total` for the admin audience and `status` for the user
    audience.
    """
    extra = extra or {}
    suffix = short_order_id(order_id)

    if audience == Audience.ADMIN:
        total = extra.get("total")
        # Zero counts as missing
        shown = _format_total(total) if total else MISSING_TOTAL
        return PushMessage(
            target=target,
            title=ADMIN_TITLE,
            body=f"Porudžbina #{suffix} • {shown} RSD",
            data={"orderId": order_id},
        )

    status = extra.get("status")
    return PushMessage(
        target=target,
        title=USER_TITLE,
        body=f"Porudžbina #{suffix} je sada: {status}",
        data={"orderId": order_id, "status": status},
    )


def _format_total(total: Any) -> str:
    # 1250.0 -> "1250", 99.5 -> "99.5"
    if isinstance(total, float) and total.is_integer():
        return str(int(total))
    return str(total)


class NotificationDispatcher:
    """Sends admin/user push messages through an injected gateway."""

    def __init__(self, gateway: BaseNotificationGateway):
        self._gateway = gateway
        self._pending: set[asyncio.Task] = set()

    @property
    def gateway(self) -> BaseNotificationGateway:
        return self._gateway

    async def dispatch(
        self,
        audience: Audience,
        target: str,
        order_id: str,
        extra: Optional[dict[str, Any]] = None,
    ) -> DeliveryResult:
        """
        Deliver one message, single attempt.

        Raises:
            ValidationFailed: missing target or order id
            NotificationDeliveryError: gateway failure of any kind
        """
        if not target or not order_id:
            raise ValidationFailed("Missing token or orderId")

        audience = Audience(audience)
        message = build_message(audience, target, order_id, extra)

        try:
            return await self._gateway.send(message)
        except NotificationDeliveryError as e:
            logger.error(f"Push error ({audience.value}) for order {order_id}: {e}")
            raise
        except Exception as e:
            logger.exception(f"Push error ({audience.value}) for order {order_id}: {e}")
            raise NotificationDeliveryError(str(e)) from e

    def spawn_detached(
        self,
        audience: Audience,
        target: str,
        order_id: str,
        extra: Optional[dict[str, Any]] = None,
    ) -> asyncio.Task:
        """Schedule `dispatch` without waiting; the outcome is only logged."""
        audience = Audience(audience)
        task = asyncio.create_task(
            self._run_detached(audience, target, order_id, extra),
            name=f"push-{audience.value}-{order_id}",
        )
        # The event loop keeps only weak references to tasks
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_detached(
        self,
        audience: Audience,
        target: str,
        order_id: str,
        extra: Optional[dict[str, Any]],
    ) -> None:
        try:
            result = await self.dispatch(audience, target, order_id, extra)
            logger.info(f"Background push ({audience.value}) for order {order_id}: {result.data}")
        except Exception as e:
            logger.warning(f"Background push ({audience.value}) for order {order_id} dropped: {e}")

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for all detached deliveries still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
