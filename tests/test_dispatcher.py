import asyncio

import pytest

from orderdesk.core.errors import NotificationDeliveryError, ValidationFailed
from orderdesk.services.dispatcher import (
    ADMIN_TITLE,
    USER_TITLE,
    Audience,
    NotificationDispatcher,
    build_message,
    short_order_id,
)

from tests.conftest import RecordingGateway


@pytest.mark.parametrize("order_id,expected", [
    ("Xy12abCD34efGH56ijKL", "56ijKL"),
    ("abcdef", "abcdef"),
    ("abc", "abc"),
])
def test_short_order_id(order_id, expected):
    assert short_order_id(order_id) == expected


def test_admin_message():
    message = build_message(Audience.ADMIN, "ExponentPushToken[a]", "orderXYZ123456", {"total": 1250})

    assert message.title == ADMIN_TITLE
    assert message.body == "Porudžbina #123456 • 1250 RSD"
    assert message.to_payload() == {
        "to": "ExponentPushToken[a]",
        "title": ADMIN_TITLE,
        "body": "Porudžbina #123456 • 1250 RSD",
        "sound": "default",
        "data": {"orderId": "orderXYZ123456"},
    }


@pytest.mark.parametrize("total,shown", [
    (1250.0, "1250"),
    (99.5, "99.5"),
    ("850", "850"),
    (None, "—"),
    ("", "—"),
    (0, "—"),
    (0.0, "—"),
])
def test_admin_message_total_rendering(total, shown):
    message = build_message(Audience.ADMIN, "t", "abc", {"total": total})
    assert message.body == f"Porudžbina #abc • {shown} RSD"


def test_user_message():
    message = build_message(Audience.USER, "ExponentPushToken[u]", "order-000042", {"status": "u pripremi"})

    assert message.title == USER_TITLE
    assert message.body == "Porudžbina #000042 je sada: u pripremi"
    assert message.data == {"orderId": "order-000042", "status": "u pripremi"}


async def test_dispatch_returns_gateway_echo(dispatcher, gateway):
    result = await dispatcher.dispatch("user", "ExponentPushToken[u]", "abc123", {"status": "spremno"})

    assert result.success
    assert result.data == {"data": {"status": "ok"}}
    assert gateway.sent[0].body == "Porudžbina #abc123 je sada: spremno"


async def test_dispatch_requires_target_and_order(dispatcher, gateway):
    with pytest.raises(ValidationFailed):
        await dispatcher.dispatch(Audience.ADMIN, "", "abc123")
    with pytest.raises(ValidationFailed):
        await dispatcher.dispatch(Audience.ADMIN, "token", "")
    assert gateway.sent == []


async def test_dispatch_failure_is_raised():
    dispatcher = NotificationDispatcher(RecordingGateway(fail_with=NotificationDeliveryError("HTTP 503")))

    with pytest.raises(NotificationDeliveryError, match="HTTP 503"):
        await dispatcher.dispatch(Audience.ADMIN, "token", "abc123", {"total": 1})


async def test_dispatch_wraps_unexpected_errors():
    dispatcher = NotificationDispatcher(RecordingGateway(fail_with=RuntimeError("socket closed")))

    with pytest.raises(NotificationDeliveryError, match="socket closed"):
        await dispatcher.dispatch(Audience.USER, "token", "abc123", {"status": "x"})


async def test_detached_failure_is_swallowed():
    dispatcher = NotificationDispatcher(RecordingGateway(fail_with=NotificationDeliveryError("down")))

    task = dispatcher.spawn_detached(Audience.ADMIN, "token", "abc123", {"total": 1})
    await dispatcher.drain()

    assert task.done()
    assert task.exception() is None
    assert dispatcher.pending_count == 0


async def test_detached_dispatch_does_not_block_caller():
    release = asyncio.Event()

    class SlowGateway(RecordingGateway):
        async def send(self, message):
            await release.wait()
            return await super().send(message)

    gateway = SlowGateway()
    dispatcher = NotificationDispatcher(gateway)

    dispatcher.spawn_detached(Audience.ADMIN, "token", "abc123", {"total": 1})
    await asyncio.sleep(0)
    assert dispatcher.pending_count == 1
    assert gateway.sent == []

    release.set()
    await dispatcher.drain()
    assert len(gateway.sent) == 1
    assert dispatcher.pending_count == 0
