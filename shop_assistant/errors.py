from __future__ import annotations


class AssistantError(Exception):
    """Base class for recoverable conditions that map to a reply string."""


class ParseError(AssistantError):
    """Budget request without any digits."""


class NotFound(AssistantError):
    """No catalog product matches the request."""


class OutOfStock(AssistantError):
    """Product exists but has no stock left."""

    def __init__(self, product_id: object) -> None:
        super().__init__(f"product {product_id!r} is out of stock")
        self.product_id = product_id


class EmptyCart(AssistantError):
    """Checkout requested with no cart lines."""
