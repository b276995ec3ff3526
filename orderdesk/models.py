"""
SQLAlchemy Database Models

Document-shaped tables backing the order desk:
- orders: one row per customer order
- admin_profiles: the single "Admin" profile (password + push token)
- service_status: the "app" and "delivery" availability flags
"""

import secrets
import string

from sqlalchemy import Boolean, Column, DateTime, Float, JSON, String, Text

from orderdesk.database import Base, utcnow

ADMIN_PROFILE_KEY = "Admin"

_ID_ALPHABET = string.ascii_letters + string.digits


def generate_order_id(length: int = 20) -> str:
    """Random alphanumeric key, the shape of an auto-generated document id."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class Order(Base):
    """
    Customer order.

    `status` is a free string: `pending` on creation, then whatever label the
    admin sets. Rows are never deleted.
    """
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=generate_order_id)

    items = Column(JSON, nullable=False)
    total = Column(Float, nullable=False)
    status = Column(String(100), nullable=False, default="pending", index=True)

    # Anything else the client sent with the order (customer, address, note...)
    extra = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    status_updated_at = Column(DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            **(self.extra or {}),
            "id": self.id,
            "items": self.items,
            "total": self.total,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "statusUpdatedAt": (
                self.status_updated_at.isoformat() if self.status_updated_at else None
            ),
        }

    def __repr__(self):
        return f"<Order #{self.id} - {self.status}>"


class AdminProfile(Base):
    """Singleton admin profile; only the latest logged-in device gets pushes."""
    __tablename__ = "admin_profiles"

    key = Column(String(32), primary_key=True, default=ADMIN_PROFILE_KEY)
    password = Column(String(255), nullable=False)
    push_token = Column(String(255), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<AdminProfile {self.key} token={'set' if self.push_token else 'none'}>"


class ServiceStatus(Base):
    """Availability flag shown to customers (`app` open/closed, `delivery` on/off)."""
    __tablename__ = "service_status"

    kind = Column(String(32), primary_key=True)
    enabled = Column(Boolean, nullable=False, default=True)
    message = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "message": self.message,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<ServiceStatus {self.kind}={self.enabled}>"
