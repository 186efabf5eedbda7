"""
In-memory adapters.

Used for the ``memory`` storage backend (a throwaway session over the sample
set) and as lightweight doubles in tests.
"""

import dataclasses
import logging
from collections.abc import Iterable, Mapping

from nihongo_flow.domain.errors import EventAppendError, ItemNotFoundError
from nihongo_flow.domain.models import Category, ReviewEvent, StudyItem
from nihongo_flow.domain.ports import CollectionProvider, EventLogProvider

logger = logging.getLogger(__name__)


def next_item_id(items: Iterable[StudyItem]) -> str:
    """
    Next numeric id: one past the highest numeric id, or count + 1 when no
    id is numeric.
    """
    items = list(items)
    if not items:
        return "1"
    numeric = [int(item.id) for item in items if item.id.isdigit()]
    if not numeric:
        return str(len(items) + 1)
    return str(max(numeric) + 1)


def filter_events(
    events: Iterable[ReviewEvent],
    category: Category | None = None,
    item_id: str | None = None,
) -> list[ReviewEvent]:
    """Restrict to a category/item and sort by timestamp (stable)."""
    selected = [
        e
        for e in events
        if (category is None or e.category == category)
        and (item_id is None or e.item_id == item_id)
    ]
    return sorted(selected, key=lambda e: e.timestamp)


class MemoryCollectionRepository(CollectionProvider):
    """Collections held in process memory."""

    def __init__(self, initial: Mapping[Category, Iterable[StudyItem]] | None = None):
        self._items: dict[Category, list[StudyItem]] = {c: [] for c in Category}
        for category, items in (initial or {}).items():
            self._items[Category(category)] = list(items)

    async def list_items(self, category: Category) -> list[StudyItem]:
        return list(self._items[category])

    async def list_distinct_sources(self, category: Category) -> set[str]:
        return {item.source for item in self._items[category] if item.source}

    async def add_item(self, category: Category, item: StudyItem) -> StudyItem:
        stored = dataclasses.replace(item, id=next_item_id(self._items[category]))
        self._items[category].append(stored)
        return stored

    async def update_item(self, category: Category, item: StudyItem) -> None:
        items = self._items[category]
        for index, existing in enumerate(items):
            if existing.id == item.id:
                items[index] = item
                return
        raise ItemNotFoundError(category.value, item.id)

    async def delete_items(self, category: Category, ids: list[str]) -> int:
        wanted = set(ids)
        before = len(self._items[category])
        self._items[category] = [i for i in self._items[category] if i.id not in wanted]
        return before - len(self._items[category])


class MemoryEventLog(EventLogProvider):
    """
    Review log held in process memory.

    ``fail_appends`` makes every append raise EventAppendError, which lets
    callers exercise the failure path without touching the filesystem.
    """

    def __init__(self, events: Iterable[ReviewEvent] | None = None, fail_appends: bool = False):
        self._events: list[ReviewEvent] = list(events or [])
        self.fail_appends = fail_appends

    async def append_event(self, event: ReviewEvent) -> None:
        if self.fail_appends:
            raise EventAppendError("In-memory log is configured to reject appends")
        self._events.append(event)

    async def list_events(
        self,
        category: Category | None = None,
        item_id: str | None = None,
    ) -> list[ReviewEvent]:
        return filter_events(self._events, category, item_id)

    async def reset_item(self, category: Category, item_id: str) -> int:
        before = len(self._events)
        self._events = [
            e for e in self._events if not (e.category == category and e.item_id == item_id)
        ]
        return before - len(self._events)
