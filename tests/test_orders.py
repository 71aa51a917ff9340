import pytest

from storefront.errors import NetworkError, OrderCreationError
from storefront.services.orders import submit_orders

from fakes import FakeOrderGateway


@pytest.mark.asyncio
async def test_all_lines_submitted_in_cart_order(two_line_cart):
    gateway = FakeOrderGateway(order_ids=[501, 502])
    result = await submit_orders(two_line_cart.lines, 7, gateway)

    assert result.ok
    assert result.submitted_count == 2
    assert result.last_order_id == 502
    assert result.order_ids == [501, 502]
    assert gateway.calls == [(7, 1, 2), (7, 2, 1)]


@pytest.mark.asyncio
async def test_first_failure_stops_everything(two_line_cart):
    gateway = FakeOrderGateway(fail_at={0})
    result = await submit_orders(two_line_cart.lines, 7, gateway)

    assert result.submitted_count == 0
    assert result.last_order_id is None
    assert isinstance(result.error, OrderCreationError)
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_second_failure_keeps_first_order(two_line_cart):
    gateway = FakeOrderGateway(order_ids=[501], fail_at={1})
    result = await submit_orders(two_line_cart.lines, 7, gateway)

    assert result.submitted_count == 1
    assert result.last_order_id == 501
    assert isinstance(result.error, OrderCreationError)
    assert len(two_line_cart) == 2


@pytest.mark.asyncio
async def test_network_error_is_reported_not_raised(two_line_cart):
    class Offline(FakeOrderGateway):
        async def create_order(self, user_id, product_id, quantity):
            raise NetworkError(OSError("connection refused"))

    result = await submit_orders(two_line_cart.lines, 7, Offline())
    assert isinstance(result.error, NetworkError)
    assert result.submitted_count == 0


@pytest.mark.asyncio
async def test_empty_cart_submits_nothing():
    gateway = FakeOrderGateway()
    result = await submit_orders([], 7, gateway)
    assert result.ok
    assert result.submitted_count == 0
    assert gateway.calls == []
