import pytest

from orderdesk.core.errors import NotFound, NotificationDeliveryError, ValidationFailed
from orderdesk.services.dispatcher import NotificationDispatcher
from orderdesk.services.orders import OrderLifecycleManager

from tests.conftest import ADMIN_DEVICE, RecordingGateway


async def test_create_then_get_is_pending(manager):
    order_id = await manager.create({"items": [{"sku": "A", "qty": 2}], "total": 1250})

    order = await manager.get(order_id)
    assert order is not None
    assert order.status == "pending"
    assert order.total == 1250
    assert order.items == [{"sku": "A", "qty": 2}]
    assert order.created_at is not None
    assert order.status_updated_at is None


async def test_create_returns_fresh_ids(manager):
    first = await manager.create({"items": [{"sku": "A"}], "total": 10})
    second = await manager.create({"items": [{"sku": "A"}], "total": 10})
    assert first != second
    assert len(first) == 20


async def test_create_keeps_client_fields(manager):
    order_id = await manager.create({
        "items": [{"sku": "B", "qty": 1}],
        "total": 400,
        "customer": "Ana",
        "pushToken": "ExponentPushToken[customer]",
        "status": "delivered",
    })

    data = (await manager.get(order_id)).to_dict()
    assert data["customer"] == "Ana"
    assert data["pushToken"] == "ExponentPushToken[customer]"
    # Clients cannot pick the initial status
    assert data["status"] == "pending"


@pytest.mark.parametrize("payload", [
    {"total": 100},
    {"items": [], "total": 100},
    {"items": [{"sku": "A"}]},
    {"items": [{"sku": "A"}], "total": None},
    {"items": [{"sku": "A"}], "total": -1},
    {"items": "A", "total": 100},
])
async def test_create_rejects_invalid_payload_without_writing(manager, order_store, payload):
    with pytest.raises(ValidationFailed):
        await manager.create(payload)

    assert await order_store.list_all() == []


async def test_create_announces_order_to_admin(manager, settings_store, dispatcher, gateway):
    await settings_store.set_admin_password("secret")
    await settings_store.record_admin_login(push_token=ADMIN_DEVICE)

    order_id = await manager.create({"items": [{"sku": "A"}], "total": 1250})
    await dispatcher.drain()

    assert len(gateway.sent) == 1
    message = gateway.sent[0]
    assert message.target == ADMIN_DEVICE
    assert message.body == f"Porudžbina #{order_id[-6:]} • 1250 RSD"


async def test_create_without_admin_token_sends_nothing(manager, dispatcher, gateway):
    await manager.create({"items": [{"sku": "A"}], "total": 1250})
    await dispatcher.drain()

    assert gateway.sent == []
    assert dispatcher.pending_count == 0


async def test_create_survives_push_failure(order_store, settings_store):
    await settings_store.set_admin_password("secret")
    await settings_store.record_admin_login(push_token=ADMIN_DEVICE)
    dispatcher = NotificationDispatcher(RecordingGateway(fail_with=NotificationDeliveryError("down")))
    manager = OrderLifecycleManager(order_store, settings_store, dispatcher)

    order_id = await manager.create({"items": [{"sku": "A"}], "total": 99})
    await dispatcher.drain()

    assert (await manager.get(order_id)).status == "pending"


async def test_update_status(manager):
    order_id = await manager.create({"items": [{"sku": "A", "qty": 2}], "total": 1250})
    before = await manager.get(order_id)

    await manager.update_status(order_id, "u pripremi")

    after = await manager.get(order_id)
    assert after.status == "u pripremi"
    assert after.status_updated_at >= before.created_at
    assert after.created_at == before.created_at


async def test_status_transitions_are_unconstrained(manager):
    order_id = await manager.create({"items": [{"sku": "A"}], "total": 5})

    for status in ("delivered", "pending", "pending", "bilo šta"):
        await manager.update_status(order_id, status)
        assert (await manager.get(order_id)).status == status


async def test_update_status_refreshes_timestamp(manager):
    order_id = await manager.create({"items": [{"sku": "A"}], "total": 5})
    await manager.update_status(order_id, "u pripremi")
    first = (await manager.get(order_id)).status_updated_at

    await manager.update_status(order_id, "isporučeno")
    second = (await manager.get(order_id)).status_updated_at
    assert second >= first


async def test_update_status_unknown_order(manager):
    with pytest.raises(NotFound):
        await manager.update_status("does-not-exist", "u pripremi")


@pytest.mark.parametrize("status", ["", "   ", None])
async def test_update_status_requires_status(manager, status):
    order_id = await manager.create({"items": [{"sku": "A"}], "total": 5})
    with pytest.raises(ValidationFailed):
        await manager.update_status(order_id, status)


async def test_update_status_sends_no_push(manager, settings_store, dispatcher, gateway):
    order_id = await manager.create({"items": [{"sku": "A"}], "total": 5})
    await settings_store.set_admin_password("secret")
    await settings_store.record_admin_login(push_token=ADMIN_DEVICE)

    await manager.update_status(order_id, "u pripremi")
    await dispatcher.drain()

    assert gateway.sent == []


async def test_get_missing_returns_none(manager):
    assert await manager.get("nope") is None


async def test_list_is_newest_first(manager):
    ids = [
        await manager.create({"items": [{"sku": str(n)}], "total": n})
        for n in range(4)
    ]

    listed = await manager.list_orders()
    assert [o.id for o in listed] == list(reversed(ids))
    stamps = [o.created_at for o in listed]
    assert stamps == sorted(stamps, reverse=True)
