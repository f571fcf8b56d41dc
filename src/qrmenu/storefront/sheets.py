from __future__ import annotations

import asyncio
import enum
import itertools
from typing import Any, Callable, Protocol

from qrmenu.application.dto.responses import ProductResponse
from qrmenu.storefront.cart import CartLedger

SHEET_TEARDOWN_MS = 220
FRAME_INTERVAL_MS = 16


class FrameScheduler(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> int: ...

    def cancel_frame(self, handle: int) -> None: ...

    def set_timeout(self, callback: Callable[[], None], delay_ms: int) -> int: ...

    def clear_timeout(self, handle: int) -> None: ...


class AsyncioFrameScheduler:
    """Runs frame and timeout callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handles: dict[int, asyncio.TimerHandle] = {}
        self._ids = itertools.count(1)

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _schedule(self, callback: Callable[[], None], delay_ms: int) -> int:
        handle_id = next(self._ids)

        def run() -> None:
            self._handles.pop(handle_id, None)
            callback()

        self._handles[handle_id] = self._event_loop().call_later(delay_ms / 1000, run)
        return handle_id

    def _cancel(self, handle_id: int) -> None:
        handle = self._handles.pop(handle_id, None)
        if handle is not None:
            handle.cancel()

    def request_frame(self, callback: Callable[[], None]) -> int:
        return self._schedule(callback, FRAME_INTERVAL_MS)

    def cancel_frame(self, handle: int) -> None:
        self._cancel(handle)

    def set_timeout(self, callback: Callable[[], None], delay_ms: int) -> int:
        return self._schedule(callback, delay_ms)

    def clear_timeout(self, handle: int) -> None:
        self._cancel(handle)

    @property
    def pending(self) -> int:
        return len(self._handles)


class ScrollLock:
    """Page scroll stays locked while at least one sheet holds the lock."""

    def __init__(self) -> None:
        self._holders = 0

    def acquire(self) -> None:
        self._holders += 1

    def release(self) -> None:
        if self._holders > 0:
            self._holders -= 1

    @property
    def locked(self) -> bool:
        return self._holders > 0


class SheetState(str, enum.Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"


class OverlaySheet:
    def __init__(
        self,
        scheduler: FrameScheduler,
        scroll_lock: ScrollLock,
        teardown_ms: int = SHEET_TEARDOWN_MS,
    ) -> None:
        self._scheduler = scheduler
        self._scroll_lock = scroll_lock
        self._teardown_ms = teardown_ms
        self._frame: int | None = None
        self._timer: int | None = None
        self.state = SheetState.CLOSED
        self.ready = False

    @property
    def mounted(self) -> bool:
        return self.state is not SheetState.CLOSED

    def _cancel_pending(self) -> None:
        if self._frame is not None:
            self._scheduler.cancel_frame(self._frame)
            self._frame = None
        if self._timer is not None:
            self._scheduler.clear_timeout(self._timer)
            self._timer = None

    def open(self) -> None:
        if self.state is SheetState.CLOSING:
            self._cancel_pending()
            self._teardown()
        elif self.state is not SheetState.CLOSED:
            return

        self._scroll_lock.acquire()
        self.state = SheetState.OPENING
        self.ready = False
        self._frame = self._scheduler.request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._frame = None
        if self.state is SheetState.OPENING:
            self.state = SheetState.OPEN
            self.ready = True

    def close(self) -> None:
        if self.state not in (SheetState.OPENING, SheetState.OPEN):
            return
        self._cancel_pending()
        self.ready = False
        self.state = SheetState.CLOSING
        self._timer = self._scheduler.set_timeout(self._on_teardown, self._teardown_ms)

    def _on_teardown(self) -> None:
        self._timer = None
        if self.state is SheetState.CLOSING:
            self._teardown()

    def _teardown(self) -> None:
        self.state = SheetState.CLOSED
        self.ready = False
        self._scroll_lock.release()
        self.on_unmounted()

    def on_unmounted(self) -> None:
        """Hook for subclasses holding content that lives only while mounted."""


class ProductSheet(OverlaySheet):
    def __init__(
        self,
        scheduler: FrameScheduler,
        scroll_lock: ScrollLock,
        ledger: CartLedger,
        teardown_ms: int = SHEET_TEARDOWN_MS,
    ) -> None:
        super().__init__(scheduler, scroll_lock, teardown_ms)
        self._ledger = ledger
        self.product: ProductResponse | None = None
        self.pending_quantity = 0

    def show(self, product: ProductResponse) -> None:
        self.open()
        self.product = product
        self.pending_quantity = 0

    def increment(self) -> None:
        self.pending_quantity += 1

    def decrement(self) -> None:
        self.pending_quantity = max(0, self.pending_quantity - 1)

    def commit(self, options: dict[str, Any] | None = None) -> bool:
        if self.product is None or self.pending_quantity <= 0:
            return False
        self._ledger.add(self.product, self.pending_quantity, options)
        self.close()
        return True

    def on_unmounted(self) -> None:
        self.product = None
        self.pending_quantity = 0


class CartSheet(OverlaySheet):
    def __init__(
        self,
        scheduler: FrameScheduler,
        scroll_lock: ScrollLock,
        ledger: CartLedger,
        teardown_ms: int = SHEET_TEARDOWN_MS,
    ) -> None:
        super().__init__(scheduler, scroll_lock, teardown_ms)
        self.ledger = ledger

    def show(self) -> bool:
        if not self.ledger.open_cart():
            return False
        self.open()
        return True


class SheetCoordinator:
    def __init__(self, product_sheet: ProductSheet, cart_sheet: CartSheet) -> None:
        self.product_sheet = product_sheet
        self.cart_sheet = cart_sheet

    def close_all(self) -> None:
        self.product_sheet.close()
        self.cart_sheet.close()

    def on_key(self, key: str) -> bool:
        if key != "Escape":
            return False
        self.close_all()
        return True

    def on_backdrop_click(self, sheet: OverlaySheet, inside_content: bool = False) -> bool:
        # Clicks inside sheet content never reach the backdrop.
        if inside_content:
            return False
        sheet.close()
        return True
