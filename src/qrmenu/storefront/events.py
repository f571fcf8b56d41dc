from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

MENU_ADD = "menu:add"
MENU_REMOVE = "menu:remove"
MENU_CART_OPEN = "menu:cart:open"

Listener = Callable[[str, dict[str, Any]], None]


class CartHost(Protocol):
    """Embedding page hooks. Any subset of these may be provided."""

    def add_to_cart(self, product_id: str, options: dict[str, Any]) -> None: ...

    def remove_from_cart(self, product_id: str) -> None: ...

    def open_cart(self) -> None: ...


class EventBus:
    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def publish(self, event: str, detail: dict[str, Any] | None = None) -> None:
        payload = detail or {}
        for listener in list(self._listeners[event]):
            listener(event, payload)


class Announcer:
    """Polite live region: only the latest message is kept."""

    def __init__(self) -> None:
        self.message: str = ""
        self.history: list[str] = []

    def announce(self, message: str) -> None:
        self.message = message
        self.history.append(message)


def _host_method(host: object | None, name: str) -> Callable[..., Any] | None:
    if host is None:
        return None
    method = getattr(host, name, None)
    return method if callable(method) else None


class CartNotifier:
    """Routes cart notifications to the host when it supports them, else to the bus."""

    def __init__(self, host: object | None = None, bus: EventBus | None = None) -> None:
        self._host = host
        self.bus = bus or EventBus()

    def item_added(self, product_id: str, options: dict[str, Any]) -> None:
        method = _host_method(self._host, "add_to_cart")
        if method is not None:
            method(product_id, options)
            return
        self.bus.publish(MENU_ADD, {"id": product_id, "options": options})

    def item_removed(self, product_id: str) -> None:
        method = _host_method(self._host, "remove_from_cart")
        if method is not None:
            method(product_id)
            return
        self.bus.publish(MENU_REMOVE, {"id": product_id})

    def cart_opened(self) -> None:
        method = _host_method(self._host, "open_cart")
        if method is not None:
            method()
            return
        self.bus.publish(MENU_CART_OPEN)
