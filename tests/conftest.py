"""Pytest configuration and fixtures"""
import os
import pytest

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from address_dedup.collection import InMemoryAddressItems
from address_dedup.dedup import ItemDeduplicator
from address_dedup.diagnostics import MemorySink
from address_dedup.models import AddressItem, Cart, LineItem


@pytest.fixture
def make_cart():
    """Cart whose shipping address is an in-memory collection."""
    def _make(items, existing=None, cart_id="cart-1"):
        cart = Cart(id=cart_id, items=list(items))
        cart.shipping_address = InMemoryAddressItems(cart.get_item_by_id, existing or [])
        return cart
    return _make


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def deduplicator(sink):
    return ItemDeduplicator(sink=sink, missing_product_policy="collide", duplicate_policy="first")


@pytest.fixture
def two_p1_items():
    return [
        LineItem(id=1, product_id="P1", sku="SKU-1", quantity=2, options={}),
        LineItem(id=2, product_id="P1", sku="SKU-1", quantity=5, options={}),
    ]


@pytest.fixture
def address_item_for():
    def _make(source_item_id, address_item_id=100, quantity=1):
        return AddressItem(id=address_item_id, source_item_id=source_item_id, quantity=quantity)
    return _make


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    from address_dedup import config, storage

    path = str(tmp_path / "state.sqlite3")
    monkeypatch.setattr(config, "DB_PATH", path)
    storage.ensure_db()
    return path
