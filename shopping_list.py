from __future__ import annotations
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from commands import categorize


class ShoppingListError(Exception):
    """Base class for recoverable list errors."""


class EmptyNameError(ShoppingListError):
    def __init__(self) -> None:
        super().__init__("Please provide an item name.")


class ItemNotFoundError(ShoppingListError):
    def __init__(self, query) -> None:
        self.query = query
        super().__init__(f'Couldn\'t find "{query}"')


def clamp_quantity(quantity) -> int:
    """Coerce ``quantity`` to an int of at least 1; unparseable input becomes 1."""
    try:
        qty = int(quantity)
    except (TypeError, ValueError):
        return 1
    return max(1, qty)


@dataclass
class ListItem:
    id: int
    name: str
    quantity: int
    category: str
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "category": self.category,
            "added_at": self.added_at.isoformat(),
        }


class ShoppingList:
    """Ordered, in-memory shopping list.

    Items keep insertion order. Ids come from a counter owned by the list and
    are never handed out twice, even after ``clear()``.
    """

    def __init__(self) -> None:
        self._items: List[ListItem] = []
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ListItem]:
        return iter(list(self._items))

    def add(self, name: str, quantity=1) -> ListItem:
        if not name or not name.strip():
            raise EmptyNameError()
        item = ListItem(
            id=next(self._ids),
            name=name.strip(),
            quantity=clamp_quantity(quantity),
            category=categorize(name),
        )
        self._items.append(item)
        return item

    def get(self, item_id: int) -> ListItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError(item_id)

    def remove_by_id(self, item_id: int) -> ListItem:
        item = self.get(item_id)
        self._items.remove(item)
        return item

    def remove_by_name_query(self, query: str) -> ListItem:
        # Only the first match in list order is removed, even if several match.
        lower = query.lower()
        for item in self._items:
            if lower in item.name.lower():
                self._items.remove(item)
                return item
        raise ItemNotFoundError(query)

    def set_quantity(self, item_id: int, quantity) -> ListItem:
        item = self.get(item_id)
        item.quantity = clamp_quantity(quantity)
        return item

    def increment(self, item_id: int) -> ListItem:
        item = self.get(item_id)
        item.quantity += 1
        return item

    def decrement(self, item_id: int) -> ListItem:
        item = self.get(item_id)
        item.quantity = max(1, item.quantity - 1)
        return item

    def clear(self) -> int:
        count = len(self._items)
        self._items = []
        return count

    def query(self, search_term: Optional[str] = None) -> List[ListItem]:
        if not search_term:
            return list(self._items)
        term = search_term.lower()
        return [item for item in self._items if term in item.name.lower()]

    def grouped(self, search_term: Optional[str] = None) -> Dict[str, List[ListItem]]:
        out: Dict[str, List[ListItem]] = {}
        for item in self.query(search_term):
            out.setdefault(item.category, []).append(item)
        return out

    def names(self) -> List[str]:
        return [item.name.lower() for item in self._items]
