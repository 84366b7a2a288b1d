from __future__ import annotations

from typing import Dict, List

from ..domain.models import LineItem


class ItemSheet:
    """
    Items produced by one generation run, keyed by code.
    A later rule emitting the same code supersedes the earlier quantity
    but keeps the original position.
    """

    def __init__(self) -> None:
        self._items: Dict[str, LineItem] = {}

    def put(self, item: LineItem) -> None:
        self._items[item.code] = item

    def __contains__(self, code: str) -> bool:
        return code in self._items

    def get(self, code: str) -> LineItem | None:
        return self._items.get(code)

    def items(self) -> List[LineItem]:
        return list(self._items.values())
