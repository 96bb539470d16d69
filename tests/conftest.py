"""Pytest fixtures for storefront tests."""

import pytest

from storefront.cart.events import CartEvent, CartEventReporter
from storefront.cart.notifier import InProcessNotifier
from storefront.cart.storage import MemoryStorage
from storefront.models.cart import LineItem

CART_KEY = "sfh-cart"


class CollectingReporter(CartEventReporter):
    """Keeps reported events for assertions."""

    def __init__(self):
        self.events: list[CartEvent] = []

    def report(self, event: CartEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self):
        return [event.kind for event in self.events]


def make_item(
    product_id=1,
    variant_id="tshirt-m",
    quantity=1,
    price=2500,
    name="Tee",
    image="/t.jpg",
    size="M",
    color=None,
):
    return LineItem(
        product_id=product_id,
        variant_id=variant_id,
        quantity=quantity,
        unit_price_minor_units=price,
        name=name,
        image_url=image,
        size=size,
        color=color,
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    return InProcessNotifier()


@pytest.fixture
def reporter():
    return CollectingReporter()


@pytest.fixture
def tee():
    return make_item()


@pytest.fixture
def mug():
    return make_item(product_id=2, variant_id="mug-white", price=1500, name="Mug", image="/m.jpg", size=None)
