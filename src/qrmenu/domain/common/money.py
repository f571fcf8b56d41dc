from __future__ import annotations

CURRENCY_SYMBOL = "₺"


def ensure_price_cents(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("price_cents must be an integer")
    if value < 0:
        raise ValueError("price_cents must be >= 0")
    return value


def format_try(amount_cents: int) -> str:
    """Render minor units as whole lira, e.g. 120000 -> "₺1.200"."""
    whole = round(amount_cents / 100)
    sign = "-" if whole < 0 else ""
    grouped = f"{abs(whole):,}".replace(",", ".")
    return f"{sign}{CURRENCY_SYMBOL}{grouped}"
