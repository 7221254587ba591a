"""Capability interfaces the assignment service reads its inputs through."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..models.domain import Driver, Order


class RepositoryError(Exception):
    """Raised when drivers or orders cannot be listed."""


class DriverRepository(Protocol):
    def list_drivers(self) -> Sequence[Driver]:
        ...


class OrderRepository(Protocol):
    def list_open_orders(self) -> Sequence[Order]:
        ...


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
