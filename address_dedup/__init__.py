# address_dedup/__init__.py
from .collection import AddressItemCollection, InMemoryAddressItems
from .dedup import ItemDeduplicator
from .diagnostics import DiagnosticSink, LoggingSink, MemorySink
from .errors import CartNotFound, ConfigError, DedupError, LookupFailure
from .identity import identity_key, options_hash
from .models import AddressItem, Cart, DuplicateSkip, LineItem
from .observer import OrderPlacedObserver

__all__ = [
    "AddressItem",
    "AddressItemCollection",
    "Cart",
    "CartNotFound",
    "ConfigError",
    "DedupError",
    "DiagnosticSink",
    "DuplicateSkip",
    "InMemoryAddressItems",
    "ItemDeduplicator",
    "LineItem",
    "LoggingSink",
    "LookupFailure",
    "MemorySink",
    "OrderPlacedObserver",
    "identity_key",
    "options_hash",
]
