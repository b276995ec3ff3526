"""
Pydantic Schemas for Request/Response Validation

Wire format is camelCase (`orderId`, `pushToken`, `statusUpdatedAt`); the
Python side uses snake_case through an alias generator. Request fields are
mostly optional so that missing values reach the services and come back as
400 responses with a readable message.
"""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderCreateRequest(CamelModel):
    """New order. Unknown fields (customer, address, note...) are kept."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    items: Optional[List[Any]] = Field(None, examples=[[{"sku": "A", "qty": 2}]])
    # Strict: JSON `true` must not become 1.0
    total: Optional[Union[StrictInt, StrictFloat]] = Field(None, examples=[1250])


class UpdateOrderStatusRequest(CamelModel):
    order_id: Optional[str] = Field(None, examples=["Xy12abCD34efGH56ijKL"])
    status: Optional[str] = Field(None, examples=["u pripremi"])


class NotifyAdminRequest(CamelModel):
    token: Optional[str] = Field(None, examples=["ExponentPushToken[xxxxxxxxxxxx]"])
    order_id: Optional[str] = None
    total: Optional[Union[float, str]] = None


class NotifyUserRequest(CamelModel):
    token: Optional[str] = Field(None, examples=["ExponentPushToken[xxxxxxxxxxxx]"])
    order_id: Optional[str] = None
    status: Optional[str] = None


class AdminLoginRequest(CamelModel):
    password: Optional[str] = None
    # Anything; only strings longer than ten characters are stored
    push_token: Optional[Any] = None


class ServiceStatusUpdateRequest(CamelModel):
    enabled: Optional[bool] = None
    message: Optional[str] = Field(None, max_length=500)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class SuccessResponse(CamelModel):
    success: bool = True


class OrderCreateResponse(SuccessResponse):
    order_id: str


class OrderOut(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    items: List[Any]
    total: float
    status: str
    created_at: Optional[datetime] = None
    status_updated_at: Optional[datetime] = None


class OrderResponse(SuccessResponse):
    order: OrderOut


class OrderListResponse(SuccessResponse):
    orders: List[OrderOut]


class NotifyResponse(SuccessResponse):
    data: Any = None


class AdminLoginResponse(SuccessResponse):
    token: str
    token_type: str = "bearer"


class ServiceStatusOut(CamelModel):
    enabled: bool
    message: Optional[str] = None
    updated_at: Optional[datetime] = None


class ServiceStatusResponse(SuccessResponse, ServiceStatusOut):
    pass


class AllStatusResponse(SuccessResponse):
    app: Optional[ServiceStatusOut] = None
    delivery: Optional[ServiceStatusOut] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    notification_gateway: str
    timestamp: datetime
