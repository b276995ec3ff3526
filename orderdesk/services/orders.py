"""
Order Lifecycle Manager

Owns order creation and status transitions.

    create        -> write order (pending) -> look up admin push token
                     -> detached admin push -> return id
    update_status -> overwrite status + status_updated_at (no push; the admin
                     client calls /notify-user itself)

Status labels are free strings; any label may follow any other.
"""

import logging
from numbers import Number
from typing import Any, Optional

from orderdesk.core.errors import NotFound, ValidationFailed
from orderdesk.models import Order
from orderdesk.services.dispatcher import Audience, NotificationDispatcher
from orderdesk.store import OrderStore, SettingsStore

logger = logging.getLogger(__name__)

INITIAL_STATUS = "pending"


class OrderLifecycleManager:
    """Order create/read/transition, with best-effort admin notification."""

    def __init__(
        self,
        orders: OrderStore,
        settings_store: SettingsStore,
        dispatcher: NotificationDispatcher,
    ):
        self._orders = orders
        self._settings_store = settings_store
        self._dispatcher = dispatcher

    @staticmethod
    def _validate_payload(payload: dict[str, Any]) -> tuple[list[Any], float]:
        items = payload.get("items")
        if not isinstance(items, (list, tuple)) or len(items) == 0:
            raise ValidationFailed("Invalid order data: items must be a non-empty list")

        total = payload.get("total")
        if total is None or isinstance(total, bool) or not isinstance(total, Number):
            raise ValidationFailed("Invalid order data: total is required")
        if total < 0:
            raise ValidationFailed("Invalid order data: total must be non-negative")

        return list(items), float(total)

    async def create(self, payload: dict[str, Any]) -> str:
        """
        Persist a new pending order and return its id.

        The admin push is spawned after the write and never awaited; neither
        its failure nor a failed token lookup changes the result.

        Raises:
            ValidationFailed: missing/empty items or missing total (nothing written)
        """
        items, total = self._validate_payload(payload)
        extra = {
            k: v for k, v in payload.items()
            if k not in ("id", "items", "total", "status", "createdAt", "statusUpdatedAt")
        }

        order_id = await self._orders.create(items=items, total=total, extra=extra)
        logger.info(f"Order {order_id} created (total={total})")

        try:
            admin_token = await self._settings_store.get_admin_push_token()
        except Exception as e:
            logger.warning(f"Could not read admin push token for order {order_id}: {e}")
            admin_token = None

        if admin_token:
            self._dispatcher.spawn_detached(
                Audience.ADMIN,
                admin_token,
                order_id,
                {"total": total},
            )
        else:
            logger.info(f"No admin push token; order {order_id} not announced")

        return order_id

    async def update_status(self, order_id: str, new_status: str) -> None:
        """
        Overwrite the order status.

        Raises:
            ValidationFailed: missing id or blank status
            NotFound: no order with that id
        """
        if not order_id or not isinstance(new_status, str) or not new_status.strip():
            raise ValidationFailed("Missing orderId or status")

        updated = await self._orders.set_status(order_id, new_status)
        if not updated:
            raise NotFound(f"Order {order_id} not found")

        logger.info(f"Order {order_id} status -> {new_status!r}")

    async def get(self, order_id: str) -> Optional[Order]:
        return await self._orders.get(order_id)

    async def list_orders(self) -> list[Order]:
        """Every order, newest first; no paging."""
        return await self._orders.list_all()
