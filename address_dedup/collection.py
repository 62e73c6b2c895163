# address_dedup/collection.py
import datetime
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

import pytz

from .models import AddressItem, LineItem


class AddressItemCollection(ABC):
    """
    Items attached to one destination address. This is the only surface the
    deduplicator touches; implementations own storage and commit semantics.
    """

    @abstractmethod
    def get_all_items(self) -> List[AddressItem]:
        ...

    @abstractmethod
    def get_source_item(self, source_item_id: Any) -> Optional[LineItem]:
        """Resolve the cart line item an address item was created from."""

    @abstractmethod
    def add_item(self, item: LineItem, quantity: float) -> AddressItem:
        ...

    @abstractmethod
    def get_item_by_source_id(self, source_item_id: Any) -> Optional[AddressItem]:
        ...

    @abstractmethod
    def save(self) -> None:
        ...


class InMemoryAddressItems(AddressItemCollection):
    """
    List-backed collection. `source_lookup` resolves line item ids, usually
    `Cart.get_item_by_id`.
    """

    def __init__(
        self,
        source_lookup: Callable[[Any], Optional[LineItem]],
        items: Optional[List[AddressItem]] = None,
    ):
        self._source_lookup = source_lookup
        self._items: List[AddressItem] = list(items or [])
        self._next_id = max((int(it.id) for it in self._items), default=0) + 1
        self.saves = 0
        self.updated_at: Optional[str] = None

    def get_all_items(self) -> List[AddressItem]:
        return list(self._items)

    def get_source_item(self, source_item_id: Any) -> Optional[LineItem]:
        if source_item_id is None:
            return None
        return self._source_lookup(source_item_id)

    def add_item(self, item: LineItem, quantity: float) -> AddressItem:
        address_item = AddressItem(
            id=self._next_id, source_item_id=item.id, quantity=quantity
        )
        self._next_id += 1
        self._items.append(address_item)
        return address_item

    def get_item_by_source_id(self, source_item_id: Any) -> Optional[AddressItem]:
        for it in self._items:
            if it.source_item_id == source_item_id:
                return it
        return None

    def save(self) -> None:
        self.saves += 1
        self.updated_at = datetime.datetime.now(tz=pytz.UTC).isoformat()
