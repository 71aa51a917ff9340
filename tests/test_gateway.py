import asyncio
import json

import httpx
import pytest

from storefront.errors import GatewayError, NetworkError, OrderCreationError, PaymentFinalizationError
from storefront.services.catalog import CatalogSnapshot
from storefront.services.gateway import CatalogGateway, OrderGateway

BASE = "http://shop.test/api"


def transport(handler):
    seen = []

    def wrapped(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return httpx.MockTransport(wrapped), seen


@pytest.mark.asyncio
async def test_create_order_posts_nested_payload():
    t, seen = transport(lambda r: httpx.Response(201, json={"id": 501, "status": "PENDING"}))
    gateway = OrderGateway(BASE, transport=t)

    order_id = await gateway.create_order(7, 1, 2)

    assert order_id == 501
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/orders"
    assert json.loads(seen[0].content) == {"user": {"id": 7}, "product": {"id": 1}, "quantity": 2}


@pytest.mark.asyncio
async def test_create_order_maps_rejection_to_typed_error():
    t, _ = transport(lambda r: httpx.Response(409, json={"message": "Insufficient stock"}))
    gateway = OrderGateway(BASE, transport=t)

    with pytest.raises(OrderCreationError) as exc:
        await gateway.create_order(7, 1, 2)

    assert exc.value.status_code == 409
    assert exc.value.detail == "Insufficient stock"
    assert exc.value.product_id == 1


@pytest.mark.asyncio
async def test_create_order_without_id_is_an_error():
    t, _ = transport(lambda r: httpx.Response(200, json={"ok": True}))
    with pytest.raises(OrderCreationError):
        await OrderGateway(BASE, transport=t).create_order(7, 1, 1)


@pytest.mark.asyncio
async def test_complete_order():
    t, seen = transport(lambda r: httpx.Response(200, text="done"))
    await OrderGateway(BASE, transport=t).complete_order(501)
    assert seen[0].url.path == "/api/orders/501/complete"


@pytest.mark.asyncio
async def test_complete_order_failure():
    t, _ = transport(lambda r: httpx.Response(500, text="Order not found"))
    with pytest.raises(PaymentFinalizationError) as exc:
        await OrderGateway(BASE, transport=t).complete_order(501)
    assert exc.value.detail == "Order not found"


@pytest.mark.asyncio
async def test_transport_failure_becomes_network_error():
    def boom(request):
        raise httpx.ConnectError("refused", request=request)

    t, _ = transport(boom)
    with pytest.raises(NetworkError):
        await OrderGateway(BASE, transport=t).create_order(7, 1, 1)


@pytest.mark.asyncio
async def test_get_order():
    t, _ = transport(lambda r: httpx.Response(200, json={"id": 501, "product": {"name": "Pen"}}))
    order = await OrderGateway(BASE, transport=t).get_order(501)
    assert order["product"]["name"] == "Pen"


@pytest.mark.asyncio
async def test_list_products_parses_api_shape():
    payload = [
        {"id": 1, "name": "Pen", "price": 10, "stock": 5, "imageUrl": "http://img/pen.png", "description": "Blue"},
        {"id": 2, "name": "Ink", "price": 5.5},
    ]
    t, _ = transport(lambda r: httpx.Response(200, json=payload))
    products = await CatalogGateway(BASE, transport=t).list_products()

    assert products[0].image_url == "http://img/pen.png"
    assert products[1].price == 5.5
    assert products[1].stock == 10


@pytest.mark.asyncio
async def test_snapshot_keeps_last_products_when_refresh_fails():
    responses = iter(
        [
            httpx.Response(200, json=[{"id": 1, "name": "Pen", "price": 10, "stock": 5}]),
            httpx.Response(503, text="maintenance"),
        ]
    )
    t, _ = transport(lambda r: next(responses))
    snapshot = CatalogSnapshot(CatalogGateway(BASE, transport=t))

    await snapshot.fetch()
    with pytest.raises(GatewayError):
        await snapshot.fetch()

    assert snapshot.find(1).name == "Pen"
    assert snapshot.find("1").name == "Pen"
    assert snapshot.error is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json={"products": []}),
        httpx.Response(200, json=[{"name": "No id", "price": 1}]),
        httpx.Response(200, json=["Pen"]),
    ],
)
async def test_malformed_product_list_is_a_gateway_error(response):
    t, _ = transport(lambda r: response)
    with pytest.raises(GatewayError) as exc:
        await CatalogGateway(BASE, transport=t).list_products()
    assert exc.value.status_code == 200


@pytest.mark.asyncio
async def test_refresh_keeps_polling_after_garbage_body():
    responses = iter([httpx.Response(200, text="<html>oops</html>")])

    def handler(request):
        return next(responses, httpx.Response(200, json=[{"id": 1, "name": "Pen", "price": 10, "stock": 5}]))

    t, seen = transport(handler)
    snapshot = CatalogSnapshot(CatalogGateway(BASE, transport=t))
    task = asyncio.create_task(snapshot.refresh(0.01))
    try:
        await asyncio.sleep(0.2)
        assert not task.done()
        assert len(seen) >= 2
        assert snapshot.find(1).name == "Pen"
    finally:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
