# address_dedup/observer.py
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple

from . import config
from .dedup import ItemDeduplicator
from .errors import CartNotFound, LookupFailure
from .logger import get_logger
from .models import AddressItem, DuplicateSkip

logger = get_logger(__name__)


def _get(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_cart_id(event: Any) -> Any:
    """
    Pull the cart id out of an "order placed from cart" payload.
    Accepts {"order": {"quote_id": ...}}, an order object with `quote_id`,
    or a top-level cart_id / quote_id.
    """
    order = _get(event, "order")
    for candidate in (
        _get(order, "quote_id"),
        _get(order, "cart_id"),
        _get(event, "cart_id"),
        _get(event, "quote_id"),
    ):
        if candidate is not None and candidate != "":
            return candidate
    return None


class OrderPlacedObserver:
    """
    Handles the order-placed event: loads the cart and copies its items onto
    the shipping address through the deduplicator.
    """

    def __init__(
        self,
        cart_repository,
        deduplicator: Optional[ItemDeduplicator] = None,
        source_items: Optional[str] = None,
    ):
        self.cart_repository = cart_repository
        self.deduplicator = deduplicator or ItemDeduplicator()
        self.source_items = config.validate_choice(
            "SOURCE_ITEMS",
            source_items or config.SOURCE_ITEMS,
            config.SOURCE_ITEM_MODES,
        )

    def execute(self, event: Any) -> Tuple[List[AddressItem], List[DuplicateSkip]]:
        cart_id = extract_cart_id(event)
        if cart_id is None:
            raise LookupFailure("Order placed event carries no cart id")

        try:
            cart = self.cart_repository.get(cart_id)
        except LookupError as e:
            raise CartNotFound(cart_id) from e
        if cart is None:
            raise CartNotFound(cart_id)

        if self.source_items == "visible":
            items = cart.get_all_visible_items()
        else:
            items = cart.get_all_items()

        logger.info(
            "Copying %d item(s) from cart %s onto its shipping address.",
            len(items), cart_id,
        )
        return self.deduplicator.reconcile(items, cart.get_shipping_address())
