import itertools

import pytest
from decimal import Decimal

from thriftmarket.extensions import change_feed, db
from thriftmarket.main import create_app
from thriftmarket.models.product import Product
from thriftmarket.models.profile import Profile
from thriftmarket.services import cart_service, order_service
from thriftmarket.services.auth_service import generate_tokens_for_user
from thriftmarket.utils.auth_utils import hash_password

_seq = itertools.count(1)

PASSWORD = "TestPassword123!"


@pytest.fixture
def app():
    """
    Fresh app on an in-memory database for every test.
    The app context stays pushed so services can be called directly.
    """
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        change_feed.close_all()
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(role="buyer", **kwargs):
        n = next(_seq)
        user = Profile(
            email=kwargs.pop("email", f"{role}{n}@example.com"),
            password_hash=hash_password(PASSWORD),
            full_name=kwargs.pop("full_name", f"{role.title()} {n}"),
            role=role,
            **kwargs,
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_product(app):
    def _make(seller, **kwargs):
        product = Product(
            seller_id=seller.id,
            title=kwargs.pop("title", f"Vintage jacket {next(_seq)}"),
            price=kwargs.pop("price", Decimal("450.00")),
            **kwargs,
        )
        db.session.add(product)
        db.session.commit()
        return product
    return _make


@pytest.fixture
def buyer(make_user):
    return make_user("buyer", full_name="Bea Buyer")


@pytest.fixture
def seller(make_user):
    return make_user("seller", full_name="Sam Seller", store_name="Sam's Closet")


@pytest.fixture
def product(make_product, seller):
    return make_product(seller, title="Denim Jacket", price=Decimal("450.00"))


@pytest.fixture
def place_order():
    """Put products in the buyer's cart and check out."""
    def _place(buyer, *products, delivery_method="pickup"):
        for p in products:
            cart_service.add_item(buyer, p.id)
        return order_service.create_orders(buyer, delivery_method, phone="09171234567")
    return _place


@pytest.fixture
def order(place_order, buyer, product):
    return place_order(buyer, product)[0]


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        access, _ = generate_tokens_for_user(user)
        return {"Authorization": f"Bearer {access}"}
    return _headers
