"""
                        Services Module

Business logic, each component built once per process and injected:

    - notifications: push gateways (Mock for development, Expo for production)
    - dispatcher: admin/user push messages, detached delivery
    - orders: order lifecycle
    - admin: admin login and session tokens
    - availability: app/delivery availability flags
"""

from orderdesk.services.admin import AdminSessionGate
from orderdesk.services.availability import AvailabilityGate
from orderdesk.services.dispatcher import Audience, NotificationDispatcher
from orderdesk.services.orders import OrderLifecycleManager

__all__ = [
    "AdminSessionGate",
    "AvailabilityGate",
    "Audience",
    "NotificationDispatcher",
    "OrderLifecycleManager",
]
