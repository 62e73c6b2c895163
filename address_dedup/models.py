# address_dedup/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LineItem:
    """
    One product entry in a cart. `options` is normally a mapping of
    option code -> value, but is kept as given so malformed data survives
    until it is hashed.
    """
    id: Any
    product_id: Any = None
    sku: str = ""
    quantity: float = 0
    options: Any = field(default_factory=dict)
    parent_item_id: Any = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def visible(self) -> bool:
        return not self.parent_item_id

    def get_data(self) -> Dict[str, Any]:
        """
        Flat field view of the item, as copied onto address items.
        Named attributes win over same-named `data` keys unless they are unset.
        """
        out: Dict[str, Any] = dict(self.data)
        named = {
            "item_id": self.id,
            "product_id": self.product_id,
            "sku": self.sku,
            "qty": self.quantity,
            "product_options": self.options,
            "parent_item_id": self.parent_item_id,
        }
        for k, v in named.items():
            if v is None or v == "":
                out.setdefault(k, v)
            else:
                out[k] = v
        return out


@dataclass
class AddressItem:
    """
    A line item attached to a shipping address. `source_item_id` points back
    at the LineItem it was created from and is only used for lookups.
    """
    id: Any
    source_item_id: Any
    quantity: float = 0
    data: Dict[str, Any] = field(default_factory=dict)

    def set_data(self, key: str, value: Any) -> None:
        self.data[key] = value
        if key == "qty":
            self.quantity = value


@dataclass
class DuplicateSkip:
    product_id: Any
    sku: str
    quantity: float
    reason: str  # existing|duplicate|superseded|missing_product

    @classmethod
    def for_item(cls, item: LineItem, reason: str) -> "DuplicateSkip":
        return cls(
            product_id=item.product_id,
            sku=item.sku,
            quantity=item.quantity,
            reason=reason,
        )


@dataclass
class Cart:
    id: Any
    items: List[LineItem] = field(default_factory=list)
    shipping_address: Any = None

    def get_all_items(self) -> List[LineItem]:
        return list(self.items)

    def get_all_visible_items(self) -> List[LineItem]:
        return [it for it in self.items if it.visible]

    def get_item_by_id(self, item_id: Any) -> Optional[LineItem]:
        for it in self.items:
            if it.id == item_id:
                return it
        return None

    def get_shipping_address(self):
        return self.shipping_address
