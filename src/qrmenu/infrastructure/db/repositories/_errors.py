from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from qrmenu.application.ports.repositories import DuplicateSlugError


def raise_for_integrity_error(exc: IntegrityError, entity: str) -> None:
    """Translate a unique slug violation into ``DuplicateSlugError``; re-raise anything else."""
    if "slug" in str(exc.orig).lower():
        raise DuplicateSlugError(f"{entity} slug already exists") from exc
    raise exc
