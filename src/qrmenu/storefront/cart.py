from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from qrmenu.application.dto.responses import ProductResponse
from qrmenu.storefront.events import Announcer, CartNotifier

Confirm = Callable[[str], bool]


@dataclass
class CartEntry:
    product: ProductResponse
    quantity: int

    @property
    def line_total_cents(self) -> int:
        return self.product.priceCents * self.quantity


class CartLedger:
    """Client-side cart keyed by product id.

    The ledger never persists anything. Each add or remove notifies the host
    page once (or the event bus when the host lacks the hook) so the host can
    keep its own cart in step.
    """

    def __init__(
        self,
        notifier: CartNotifier | None = None,
        announcer: Announcer | None = None,
        confirm: Confirm | None = None,
    ) -> None:
        self._items: dict[str, CartEntry] = {}
        self.notifier = notifier or CartNotifier()
        self.announcer = announcer or Announcer()
        self._confirm = confirm

    def add(
        self,
        product: ProductResponse,
        quantity: int = 1,
        options: dict[str, Any] | None = None,
    ) -> None:
        if quantity <= 0:
            return

        current = self._items.get(product.id)
        if current is None:
            self._items[product.id] = CartEntry(product=product, quantity=quantity)
        else:
            current.product = product
            current.quantity += quantity

        self.notifier.item_added(product.id, dict(options or {}))
        if quantity == 1:
            self.announcer.announce(f"{product.name} added to cart")
        else:
            self.announcer.announce(f"{quantity} x {product.name} added to cart")

    def remove(self, product: ProductResponse, current_quantity: int | None = None) -> bool:
        """Take one unit out of the cart. Returns False when the user declines."""
        if current_quantity is None:
            entry = self._items.get(product.id)
            current_quantity = entry.quantity if entry else 0

        if current_quantity <= 1 and self._confirm is not None:
            if not self._confirm(f"{product.name} will be removed from the cart. Are you sure?"):
                return False

        self.notifier.item_removed(product.id)

        entry = self._items.get(product.id)
        if entry is None:
            return True
        if entry.quantity <= 1:
            del self._items[product.id]
        else:
            entry.quantity -= 1
        self.announcer.announce(f"{product.name} removed from cart")
        return True

    def quantity_of(self, product_id: str) -> int:
        entry = self._items.get(product_id)
        return entry.quantity if entry else 0

    @property
    def entries(self) -> list[CartEntry]:
        return list(self._items.values())

    @property
    def count(self) -> int:
        return sum(entry.quantity for entry in self._items.values())

    @property
    def total_cents(self) -> int:
        return sum(entry.line_total_cents for entry in self._items.values())

    def is_empty(self) -> bool:
        return not self._items

    def open_cart(self) -> bool:
        if self.count == 0:
            return False
        self.notifier.cart_opened()
        return True
