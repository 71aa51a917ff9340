import pytest

from storefront.db.sqlite import init_db
from storefront.models import Product
from storefront.services.cart_store import CartStore


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "storefront.db")
    init_db(path)
    return path


@pytest.fixture
def cart(db_path):
    return CartStore(db_path)


@pytest.fixture
def pen():
    return Product(id=1, name="Pen", price=10.0, stock=5)


@pytest.fixture
def ink():
    return Product(id=2, name="Ink", price=5.0, stock=1)


@pytest.fixture
def two_line_cart(cart, pen, ink):
    cart.add_item(pen, 2)
    cart.add_item(ink)
    return cart
