# address_dedup/errors.py


class DedupError(Exception):
    """Base class for errors raised by address_dedup."""


class LookupFailure(DedupError):
    """The cart behind an event could not be resolved."""


class CartNotFound(LookupFailure):
    def __init__(self, cart_id):
        self.cart_id = cart_id
        super().__init__(f"No cart found for id {cart_id!r}")


class ConfigError(DedupError):
    pass
