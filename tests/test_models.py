"""
Tests for data models
"""

from address_dedup.collection import InMemoryAddressItems
from address_dedup.models import AddressItem, Cart, DuplicateSkip, LineItem


class TestLineItem:
    def test_get_data_includes_named_fields(self):
        item = LineItem(id=4, product_id="P1", sku="S", quantity=2, options={"a": 1}, data={"name": "Mug"})
        data = item.get_data()

        assert data["item_id"] == 4
        assert data["qty"] == 2
        assert data["product_options"] == {"a": 1}
        assert data["name"] == "Mug"

    def test_named_fields_override_extra_data(self):
        item = LineItem(id=4, product_id="P1", data={"product_id": "OTHER", "sku": "X"})
        data = item.get_data()
        assert data["product_id"] == "P1"
        assert data["sku"] == "X"

    def test_unset_named_fields_still_present(self):
        data = LineItem(id=4).get_data()
        assert data["sku"] == ""
        assert data["product_id"] is None

    def test_visibility(self):
        assert LineItem(id=1).visible
        assert not LineItem(id=2, parent_item_id=1).visible


class TestAddressItem:
    def test_set_qty_updates_quantity(self):
        item = AddressItem(id=1, source_item_id=1, quantity=1)
        item.set_data("qty", 4)
        assert item.quantity == 4
        assert item.data == {"qty": 4}


class TestCart:
    def test_item_lookup(self):
        cart = Cart(id="c", items=[LineItem(id=1), LineItem(id=2, parent_item_id=1)])
        assert cart.get_item_by_id(2).id == 2
        assert cart.get_item_by_id(3) is None
        assert [it.id for it in cart.get_all_visible_items()] == [1]


class TestInMemoryAddressItems:
    def test_ids_continue_after_existing(self):
        cart = Cart(id="c", items=[LineItem(id=1, product_id="P1")])
        address = InMemoryAddressItems(cart.get_item_by_id, [AddressItem(id=7, source_item_id=None)])

        added = address.add_item(cart.get_item_by_id(1), 3)

        assert added.id == 8
        assert address.get_item_by_source_id(1) is added
        assert address.get_source_item(None) is None
        address.save()
        assert address.saves == 1
        assert address.updated_at


class TestDuplicateSkip:
    def test_for_item(self):
        skip = DuplicateSkip.for_item(LineItem(id=1, product_id="P1", sku="S", quantity=3), "existing")
        assert (skip.product_id, skip.sku, skip.quantity, skip.reason) == ("P1", "S", 3, "existing")
