"""Ordering helper shared by block and exercise reordering."""

from typing import Dict, List, Protocol, TypeVar

_UNMAPPED = float("inf")


class _HasId(Protocol):
    id: str


T = TypeVar("T", bound=_HasId)


def reorder_by_id(items: List[T], order: Dict[str, int]) -> List[T]:
    """
    Stable sort of ``items`` by ``order[item.id]``.

    Items whose id is absent from ``order`` sort after every mapped item and keep
    their prior relative order. The number of items never changes.

    With ids a, b, c and order {"c": 0, "a": 1} the result is c, a, b.
    """
    return sorted(items, key=lambda item: order.get(item.id, _UNMAPPED))
