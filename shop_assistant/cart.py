from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List

from .catalog import Catalog
from .errors import EmptyCart, NotFound, OutOfStock

logger = logging.getLogger("shop_assistant.cart")

CART_EMPTY = "empty"
CART_ACTIVE = "active"
ORDER_CONFIRMED = "confirmed"


@dataclass(frozen=True)
class CartLine:
    """One add event; price is a snapshot taken when the item was added."""
    product_id: Any
    name: str
    price: int
    quantity: int = 1

    @property
    def subtotal(self) -> int:
        return self.price * self.quantity


@dataclass(frozen=True)
class Order:
    """Checkout result handed back to the caller and never stored."""
    lines: List[CartLine] = field(default_factory=list)
    total_price: int = 0
    status: str = ORDER_CONFIRMED


class ShoppingCart:
    """Process-wide cart with add and checkout transitions."""

    def __init__(self, catalog: Catalog) -> None:
        """Purpose: Bind the cart to the catalog whose stock it consumes.
        Inputs/Outputs: Input is a Catalog; no return value.
        Side Effects / State: Starts in the empty state; shares the catalog lock.
        Dependencies: Catalog.get and Catalog.decrement_stock.
        Failure Modes: None at init.
        If Removed: Add-to-cart and checkout intents have no state to act on.
        Testing Notes: A fresh cart reports state "empty" and total 0.
        """
        # One lock covers cart lines and catalog stock together.
        self._catalog = catalog
        self._lock = catalog.lock
        self._lines: List[CartLine] = []

    @property
    def lines(self) -> List[CartLine]:
        with self._lock:
            return list(self._lines)

    @property
    def total(self) -> int:
        with self._lock:
            return sum(line.subtotal for line in self._lines)

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._lines

    @property
    def state(self) -> str:
        return CART_EMPTY if self.is_empty else CART_ACTIVE

    def add(self, product_id: Any) -> CartLine:
        """Purpose: Put one unit of a product into the cart.
        Inputs/Outputs: Input is a product id; output is the new CartLine.
        Side Effects / State: Appends a line and decrements catalog stock by one.
        Dependencies: Catalog lookups under the shared lock.
        Failure Modes: NotFound for unknown ids; OutOfStock when stock is 0. Neither
            changes cart or stock.
        If Removed: Users cannot build an order.
        Testing Notes: Adding the same product twice yields two separate lines.
        """
        # Check and mutate inside one critical section so stock cannot go negative.
        with self._lock:
            product = self._catalog.get(product_id)
            if product is None:
                raise NotFound(f"product {product_id!r} not found")
            if product.stock <= 0:
                raise OutOfStock(product_id)
            line = CartLine(product_id=product.id, name=product.name, price=product.price)
            self._lines.append(line)
            remaining = self._catalog.decrement_stock(product.id)
        logger.info("cart add product=%s price=%s remaining_stock=%s", product.id, product.price, remaining)
        return line

    def checkout(self) -> Order:
        """Purpose: Turn the cart into a confirmed order and empty it.
        Inputs/Outputs: No inputs; output is the transient Order.
        Side Effects / State: Clears the cart in the same critical section that
            computes the total.
        Dependencies: CartLine.subtotal.
        Failure Modes: EmptyCart when there are no lines; state is unchanged.
        If Removed: Orders can never be confirmed.
        Testing Notes: Total equals the sum of pre-checkout lines; cart is empty after.
        """
        with self._lock:
            if not self._lines:
                raise EmptyCart("cart is empty")
            lines, self._lines = self._lines, []
        order = Order(lines=lines, total_price=sum(line.subtotal for line in lines))
        logger.info("checkout lines=%d total=%s status=%s", len(order.lines), order.total_price, order.status)
        return order
