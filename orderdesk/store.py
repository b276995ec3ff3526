"""
Store Adapters

Thin async adapters over the SQLAlchemy session factory. Every method opens
its own session and commits a single-row change, so each write is atomic on
its own and nothing is shared between requests.

    OrderStore     - orders collection
    SettingsStore  - admin profile and service availability singletons
"""

import logging
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderdesk.database import utcnow
from orderdesk.models import (
    ADMIN_PROFILE_KEY,
    AdminProfile,
    Order,
    ServiceStatus,
    generate_order_id,
)

logger = logging.getLogger(__name__)


class OrderStore:
    """Persisted order collection keyed by generated string ids."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def create(
        self,
        items: list[Any],
        total: float,
        extra: Optional[dict[str, Any]] = None,
    ) -> str:
        """Write a new pending order and return its id."""
        order = Order(
            id=generate_order_id(),
            items=items,
            total=total,
            status="pending",
            extra=extra or {},
            created_at=utcnow(),
        )
        async with self._session_maker() as session:
            session.add(order)
            await session.commit()
        logger.debug(f"Stored order {order.id}")
        return order.id

    async def get(self, order_id: str) -> Optional[Order]:
        async with self._session_maker() as session:
            return await session.get(Order, order_id)

    async def list_all(self) -> list[Order]:
        """Every order, newest first."""
        async with self._session_maker() as session:
            result = await session.execute(
                select(Order).order_by(Order.created_at.desc())
            )
            return list(result.scalars().all())

    async def set_status(self, order_id: str, status: str) -> bool:
        """
        Overwrite the status and refresh `status_updated_at`.

        Returns False when no row matched the id.
        """
        async with self._session_maker() as session:
            result = await session.execute(
                update(Order)
                .where(Order.id == order_id)
                .values(status=status, status_updated_at=utcnow())
            )
            await session.commit()
        return result.rowcount > 0


class SettingsStore:
    """Singleton documents: the admin profile and availability flags."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    # =========================================================================
    # ADMIN PROFILE
    # =========================================================================

    async def get_admin(self) -> Optional[AdminProfile]:
        async with self._session_maker() as session:
            return await session.get(AdminProfile, ADMIN_PROFILE_KEY)

    async def get_admin_push_token(self) -> Optional[str]:
        admin = await self.get_admin()
        return admin.push_token if admin else None

    async def record_admin_login(self, push_token: Optional[str] = None) -> None:
        """Stamp the login time; replace the push token when one is given."""
        values: dict[str, Any] = {"last_login_at": utcnow()}
        if push_token is not None:
            values["push_token"] = push_token

        async with self._session_maker() as session:
            await session.execute(
                update(AdminProfile)
                .where(AdminProfile.key == ADMIN_PROFILE_KEY)
                .values(**values)
            )
            await session.commit()

    async def set_admin_password(self, password: str) -> None:
        """Create the admin profile or replace its password."""
        async with self._session_maker() as session:
            admin = await session.get(AdminProfile, ADMIN_PROFILE_KEY)
            if admin is None:
                session.add(AdminProfile(key=ADMIN_PROFILE_KEY, password=password))
            else:
                admin.password = password
            await session.commit()

    # =========================================================================
    # SERVICE AVAILABILITY
    # =========================================================================

    async def get_status(self, kind: str) -> Optional[ServiceStatus]:
        async with self._session_maker() as session:
            return await session.get(ServiceStatus, kind)

    async def list_statuses(self) -> list[ServiceStatus]:
        async with self._session_maker() as session:
            result = await session.execute(select(ServiceStatus))
            return list(result.scalars().all())

    async def merge_status(self, kind: str, enabled: bool, message: str) -> None:
        """Upsert a flag document, leaving any other columns untouched."""
        async with self._session_maker() as session:
            doc = await session.get(ServiceStatus, kind)
            if doc is None:
                doc = ServiceStatus(kind=kind)
                session.add(doc)
            doc.enabled = enabled
            doc.message = message
            doc.updated_at = utcnow()
            await session.commit()
