from __future__ import annotations

from typing import NewType
from uuid import uuid4

VenueId = NewType("VenueId", str)
CategoryId = NewType("CategoryId", str)
SubCategoryId = NewType("SubCategoryId", str)
ProductId = NewType("ProductId", str)
PriceChangeId = NewType("PriceChangeId", str)
UserId = NewType("UserId", str)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"
