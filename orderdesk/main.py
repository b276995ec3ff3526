"""
FastAPI Application Entry Point

OrderDesk push backend.

Endpoints:
    - GET  /: Liveness probe ("OK")
    - GET  /health: Database + push gateway health
    - POST /create-order: Customer order submission
    - GET  /order/{order_id}: Single order
    - POST /notify-admin, /notify-user: Direct push requests
    - POST /admin/login: Admin password check, returns a session token
    - GET  /admin/orders: All orders, newest first (admin)
    - POST /admin/update-order-status: Status change (admin)
    - GET  /status, /status/app, /status/delivery: Availability flags
    - POST /admin/app-status, /admin/delivery-status: Availability flags (admin)

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from orderdesk.core.config import Settings, get_settings, setup_logging
from orderdesk.core.errors import OrderDeskError
from orderdesk.database import build_engine, build_session_maker, init_db
from orderdesk.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    AllStatusResponse,
    ErrorResponse,
    HealthResponse,
    NotifyAdminRequest,
    NotifyResponse,
    NotifyUserRequest,
    OrderCreateRequest,
    OrderCreateResponse,
    OrderListResponse,
    OrderResponse,
    ServiceStatusResponse,
    ServiceStatusUpdateRequest,
    SuccessResponse,
    UpdateOrderStatusRequest,
)
from orderdesk.services import (
    AdminSessionGate,
    Audience,
    AvailabilityGate,
    NotificationDispatcher,
    OrderLifecycleManager,
)
from orderdesk.services.notifications import (
    BaseNotificationGateway,
    build_notification_gateway,
)
from orderdesk.store import OrderStore, SettingsStore

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
ADMIN_ERROR_RESPONSES = {**ERROR_RESPONSES, 401: {"model": ErrorResponse}}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.

    Store handles and the push gateway are created here, once, and injected
    into every component through `app.state`.
    """
    config: Settings = app.state.settings

    logger.info("=" * 60)
    logger.info(f"🚀 Starting {config.app_name}")
    logger.info(f"   Version: {config.app_version}")
    logger.info(f"   Environment: {config.env_mode.value}")
    logger.info(f"   Debug: {config.debug}")
    logger.info("=" * 60)

    if config.use_real_services:
        missing = config.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")
        if config.admin_auth_required and config.uses_default_token_secret:
            raise RuntimeError(
                f"ADMIN_TOKEN_SECRET must be set in {config.env_mode.value} mode"
            )

    engine = build_engine(config)
    await init_db(engine)
    session_maker = build_session_maker(engine)
    logger.info("✅ Database initialized")

    push_gateway = app.state.gateway_override or build_notification_gateway(config)
    order_store = OrderStore(session_maker)
    settings_store = SettingsStore(session_maker)
    dispatcher = NotificationDispatcher(push_gateway)

    app.state.engine = engine
    app.state.dispatcher = dispatcher
    app.state.orders = OrderLifecycleManager(order_store, settings_store, dispatcher)
    app.state.admin = AdminSessionGate(settings_store, config)
    app.state.availability = AvailabilityGate(settings_store, config)

    logger.info(f"✅ Notification Gateway: {push_gateway.provider_name}")
    if not config.admin_auth_required:
        logger.warning("⚠️ Admin routes are open (ADMIN_AUTH_REQUIRED=false)")

    logger.info("✅ Application ready!")

    yield

    logger.info("Shutting down...")
    await dispatcher.drain()
    await push_gateway.aclose()
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Order lifecycle and push notification backend for a food-delivery app.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def configure_app(
    config: Optional[Settings] = None,
    gateway: Optional[BaseNotificationGateway] = None,
) -> FastAPI:
    """
    Point the application at `config` (default: cached settings) and,
    optionally, a push gateway that replaces the configured one.

    Takes effect on the next startup.
    """
    app.state.settings = config or settings
    app.state.gateway_override = gateway
    return app


configure_app()


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_order_manager(request: Request) -> OrderLifecycleManager:
    return request.app.state.orders


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_admin_gate(request: Request) -> AdminSessionGate:
    return request.app.state.admin


def get_availability(request: Request) -> AvailabilityGate:
    return request.app.state.availability


def require_admin(
    authorization: Optional[str] = Header(None),
    admin: AdminSessionGate = Depends(get_admin_gate),
) -> None:
    """Reject admin routes without a valid `Bearer` session token."""
    if not admin.auth_required:
        return

    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()

    try:
        admin.verify(token)
    except OrderDeskError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def _http_error(e: Exception) -> HTTPException:
    """Map a service failure to its HTTP status, message passed through."""
    if isinstance(e, OrderDeskError):
        return HTTPException(status_code=e.status_code, detail=str(e))
    return HTTPException(status_code=500, detail=str(e) or e.__class__.__name__)


# =============================================================================
# ROOT & HEALTH
# =============================================================================

@app.get("/", response_class=PlainTextResponse, tags=["Root"])
async def root() -> str:
    """Liveness probe for the hosting platform / uptime monitor."""
    return "OK"


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request) -> HealthResponse:
    """Verify database and push gateway."""
    db_status = "healthy"
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    gateway = request.app.state.dispatcher.gateway
    gateway_status = "healthy" if await gateway.health_check() else "unhealthy"

    overall = "operational" if db_status == gateway_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        notification_gateway=f"{gateway.provider_name}: {gateway_status}",
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# ORDERS
# =============================================================================

@app.post(
    "/create-order",
    response_model=OrderCreateResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def create_order(
    order_data: OrderCreateRequest,
    orders: OrderLifecycleManager = Depends(get_order_manager),
) -> OrderCreateResponse:
    """
    Store a new order and return its id.

    The admin push runs in the background; its outcome never reaches
    this response.
    """
    try:
        order_id = await orders.create(order_data.model_dump(exclude_none=True))
    except Exception as e:
        if not isinstance(e, OrderDeskError):
            logger.exception(f"Error creating order: {e}")
        raise _http_error(e)

    return OrderCreateResponse(order_id=order_id)


@app.get(
    "/order/{order_id}",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def get_order(
    order_id: str,
    orders: OrderLifecycleManager = Depends(get_order_manager),
) -> OrderResponse:
    try:
        order = await orders.get(order_id)
    except Exception as e:
        logger.exception(f"Error loading order {order_id}: {e}")
        raise _http_error(e)

    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    return OrderResponse(order=order.to_dict())


@app.get(
    "/admin/orders",
    response_model=OrderListResponse,
    responses=ADMIN_ERROR_RESPONSES,
    dependencies=[Depends(require_admin)],
    tags=["Admin"],
)
async def list_orders(
    orders: OrderLifecycleManager = Depends(get_order_manager),
) -> OrderListResponse:
    """Every order, newest first."""
    try:
        all_orders = await orders.list_orders()
    except Exception as e:
        logger.exception(f"Error listing orders: {e}")
        raise _http_error(e)

    return OrderListResponse(orders=[o.to_dict() for o in all_orders])


@app.post(
    "/admin/update-order-status",
    response_model=SuccessResponse,
    responses=ADMIN_ERROR_RESPONSES,
    dependencies=[Depends(require_admin)],
    tags=["Admin"],
)
async def update_order_status(
    body: UpdateOrderStatusRequest,
    orders: OrderLifecycleManager = Depends(get_order_manager),
) -> SuccessResponse:
    """
    Change an order's status. The customer push is not sent from here;
    the admin client calls /notify-user afterwards.
    """
    try:
        await orders.update_status(body.order_id, body.status)
    except Exception as e:
        if not isinstance(e, OrderDeskError):
            logger.exception(f"Error updating order {body.order_id}: {e}")
        raise _http_error(e)

    return SuccessResponse()


# =============================================================================
# PUSH NOTIFICATIONS
# =============================================================================

@app.post(
    "/notify-admin",
    response_model=NotifyResponse,
    responses=ERROR_RESPONSES,
    tags=["Notifications"],
)
async def notify_admin(
    body: NotifyAdminRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotifyResponse:
    if not body.token or not body.order_id:
        raise HTTPException(status_code=400, detail="Missing token or orderId")

    try:
        result = await dispatcher.dispatch(
            Audience.ADMIN, body.token, body.order_id, {"total": body.total}
        )
    except Exception as e:
        raise _http_error(e)

    return NotifyResponse(data=result.data)


@app.post(
    "/notify-user",
    response_model=NotifyResponse,
    responses=ERROR_RESPONSES,
    tags=["Notifications"],
)
async def notify_user(
    body: NotifyUserRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotifyResponse:
    if not body.token or not body.order_id or not body.status:
        raise HTTPException(status_code=400, detail="Missing token, orderId or status")

    try:
        result = await dispatcher.dispatch(
            Audience.USER, body.token, body.order_id, {"status": body.status}
        )
    except Exception as e:
        raise _http_error(e)

    return NotifyResponse(data=result.data)


# =============================================================================
# ADMIN SESSION
# =============================================================================

@app.post(
    "/admin/login",
    response_model=AdminLoginResponse,
    responses=ADMIN_ERROR_RESPONSES,
    tags=["Admin"],
)
async def admin_login(
    body: AdminLoginRequest,
    admin: AdminSessionGate = Depends(get_admin_gate),
) -> AdminLoginResponse:
    try:
        token = await admin.login(body.password, body.push_token)
    except Exception as e:
        if not isinstance(e, OrderDeskError):
            logger.exception(f"Admin login error: {e}")
        raise _http_error(e)

    return AdminLoginResponse(token=token)


# =============================================================================
# SERVICE AVAILABILITY
# =============================================================================

@app.get(
    "/status",
    response_model=AllStatusResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    tags=["Status"],
)
async def read_all_status(
    availability: AvailabilityGate = Depends(get_availability),
) -> AllStatusResponse:
    try:
        docs = await availability.read_all()
    except Exception as e:
        logger.exception(f"Error reading status: {e}")
        raise _http_error(e)

    return AllStatusResponse(**docs)


async def _read_status(kind: str, availability: AvailabilityGate) -> ServiceStatusResponse:
    try:
        doc = await availability.read_status(kind)
    except Exception as e:
        if not isinstance(e, OrderDeskError):
            logger.exception(f"Error reading {kind} status: {e}")
        raise _http_error(e)
    return ServiceStatusResponse(**doc)


async def _write_status(
    kind: str,
    body: ServiceStatusUpdateRequest,
    availability: AvailabilityGate,
) -> SuccessResponse:
    if body.enabled is None:
        raise HTTPException(status_code=400, detail="enabled is required")
    try:
        await availability.write_status(kind, body.enabled, body.message)
    except Exception as e:
        if not isinstance(e, OrderDeskError):
            logger.exception(f"Error writing {kind} status: {e}")
        raise _http_error(e)
    return SuccessResponse()


@app.get("/status/app", response_model=ServiceStatusResponse, responses=ERROR_RESPONSES, tags=["Status"])
async def read_app_status(
    availability: AvailabilityGate = Depends(get_availability),
) -> ServiceStatusResponse:
    return await _read_status("app", availability)


@app.get("/status/delivery", response_model=ServiceStatusResponse, responses=ERROR_RESPONSES, tags=["Status"])
async def read_delivery_status(
    availability: AvailabilityGate = Depends(get_availability),
) -> ServiceStatusResponse:
    return await _read_status("delivery", availability)


@app.post(
    "/admin/app-status",
    response_model=SuccessResponse,
    responses=ADMIN_ERROR_RESPONSES,
    dependencies=[Depends(require_admin)],
    tags=["Admin"],
)
async def write_app_status(
    body: ServiceStatusUpdateRequest,
    availability: AvailabilityGate = Depends(get_availability),
) -> SuccessResponse:
    return await _write_status("app", body, availability)


@app.post(
    "/admin/delivery-status",
    response_model=SuccessResponse,
    responses=ADMIN_ERROR_RESPONSES,
    dependencies=[Depends(require_admin)],
    tags=["Admin"],
)
async def write_delivery_status(
    body: ServiceStatusUpdateRequest,
    availability: AvailabilityGate = Depends(get_availability),
) -> SuccessResponse:
    return await _write_status("delivery", body, availability)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: list[dict[str, Any]] = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid data: {location} {first.get('msg', '')}".strip()
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) if request.app.state.settings.debug else "Internal Server Error",
        },
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "orderdesk.main:app",
        host=settings.api_host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
