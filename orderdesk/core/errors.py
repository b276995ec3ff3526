"""
Domain errors raised by the services and mapped to HTTP responses by the routes.
"""


class OrderDeskError(Exception):
    """Base class for all service-level failures."""

    status_code = 500


class ValidationFailed(OrderDeskError):
    """Missing or malformed input; nothing was written."""

    status_code = 400


class Unauthorized(OrderDeskError):
    """Wrong admin password or missing/invalid admin session."""

    status_code = 401


class NotFound(OrderDeskError):
    """Referenced record does not exist."""

    status_code = 404


class NotificationDeliveryError(OrderDeskError):
    """The push gateway rejected the message or could not be reached."""

    status_code = 500
