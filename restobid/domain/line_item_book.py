from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .models import LineItem, new_id

ItemKey = Tuple[str, Optional[str]]


class LineItemBook:
    """
    A project's line items keyed by (code, room id), in insertion order.

    Upserting an item whose key already exists replaces it in place and keeps
    the existing id and added_at, so regenerating a room never duplicates.
    """

    def __init__(self, items: Iterable[LineItem] = ()):
        self._items: Dict[ItemKey, LineItem] = {}
        for item in items:
            self._items[item.key] = item

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: ItemKey) -> bool:
        return key in self._items

    def get(self, code: str, room_id: Optional[str] = None) -> Optional[LineItem]:
        return self._items.get((code, room_id))

    def upsert(self, item: LineItem, now: datetime) -> LineItem:
        existing = self._items.get(item.key)
        if existing is not None:
            merged = item.model_copy(update={"id": existing.id, "added_at": existing.added_at})
        else:
            merged = item.model_copy(update={"id": item.id or new_id(), "added_at": now})
        self._items[item.key] = merged
        return merged

    def upsert_all(self, items: Iterable[LineItem], now: datetime) -> List[LineItem]:
        return [self.upsert(i, now) for i in items]

    def replace_scope(
        self, room_id: Optional[str], items: Iterable[LineItem], now: datetime
    ) -> List[LineItem]:
        """
        Make `items` the complete set for one room key (None = rough estimate).
        Keys the new set does not contain are dropped; surviving keys keep their id.
        """
        items = list(items)
        keep = {i.code for i in items}
        for key in [k for k in self._items if k[1] == room_id and k[0] not in keep]:
            del self._items[key]
        return self.upsert_all(items, now)

    def remove_room(self, room_id: str) -> int:
        keys = [k for k in self._items if k[1] == room_id]
        for k in keys:
            del self._items[k]
        return len(keys)

    def items(self) -> List[LineItem]:
        return list(self._items.values())
