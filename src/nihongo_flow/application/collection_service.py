"""
Collection editing.

Adds, edits and deletes study items and clears the review history of a
single item. Item ids are checked against the CollectionProvider before the
event log is touched.
"""

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from nihongo_flow.domain.errors import ItemNotFoundError
from nihongo_flow.domain.models import ITEM_TYPES, Category, StudyItem
from nihongo_flow.domain.ports import CollectionProvider, EventLogProvider

logger = logging.getLogger(__name__)

# Set through dedicated CSV columns, not through field assignments
NON_EDITABLE_FIELDS = {"id", "conjugations"}


def editable_fields(category: Category) -> list[str]:
    return [
        f.name
        for f in dataclasses.fields(ITEM_TYPES[category])
        if f.name not in NON_EDITABLE_FIELDS
    ]


def required_fields(category: Category) -> list[str]:
    return [
        f.name
        for f in dataclasses.fields(ITEM_TYPES[category])
        if f.name not in NON_EDITABLE_FIELDS
        and f.default is dataclasses.MISSING
        and f.default_factory is dataclasses.MISSING
    ]


def coerce_fields(category: Category, values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate field assignments for a category.

    ``examples`` accepts a list or a ``|`` separated string. An empty
    ``source`` or ``usage_notes`` is stored as None.

    Raises:
        ValueError: on unknown field names.
    """
    allowed = editable_fields(category)
    unknown = sorted(set(values) - set(allowed))
    if unknown:
        raise ValueError(
            f"Unknown field(s) for {category.value}: {', '.join(unknown)}. "
            f"Choose from: {', '.join(allowed)}"
        )

    coerced = dict(values)
    if "examples" in coerced:
        examples = coerced["examples"]
        if isinstance(examples, str):
            examples = [e.strip() for e in examples.split("|")]
        coerced["examples"] = tuple(e for e in examples if e)
    for optional in ("source", "usage_notes"):
        if optional in coerced and not coerced[optional]:
            coerced[optional] = None
    return coerced


def build_item(category: Category, values: Mapping[str, Any]) -> StudyItem:
    """
    Create an unsaved item (empty id) from field assignments.

    Raises:
        ValueError: on unknown or missing required fields.
    """
    coerced = coerce_fields(category, values)
    missing = [name for name in required_fields(category) if not coerced.get(name)]
    if missing:
        raise ValueError(f"Missing required field(s) for {category.value}: {', '.join(missing)}")
    return ITEM_TYPES[category](id="", **coerced)


class CollectionService:
    """
    Application service for editing collections.

    Depends on the CollectionProvider and EventLogProvider abstractions.
    """

    def __init__(self, collections: CollectionProvider, event_log: EventLogProvider):
        self._collections = collections
        self._log = event_log

    async def get(self, category: Category, item_id: str) -> StudyItem:
        for item in await self._collections.list_items(category):
            if item.id == item_id:
                return item
        raise ItemNotFoundError(category.value, item_id)

    async def add(self, category: Category, values: Mapping[str, Any]) -> StudyItem:
        return await self._collections.add_item(category, build_item(category, values))

    async def edit(
        self, category: Category, item_id: str, values: Mapping[str, Any]
    ) -> StudyItem:
        existing = await self.get(category, item_id)
        updated = dataclasses.replace(existing, **coerce_fields(category, values))
        missing = [name for name in required_fields(category) if not getattr(updated, name)]
        if missing:
            raise ValueError(f"Required field(s) cannot be empty: {', '.join(missing)}")
        await self._collections.update_item(category, updated)
        logger.info(f"Updated {category.value} item {item_id}")
        return updated

    async def delete(self, category: Category, item_ids: Iterable[str]) -> int:
        """
        Remove items. Their review history stays in the log; reset it
        explicitly with ``reset_history``.
        """
        removed = await self._collections.delete_items(category, list(item_ids))
        logger.info(f"Deleted {removed} {category.value} item(s)")
        return removed

    async def reset_history(self, category: Category, item_id: str) -> int:
        """
        Drop every review of one item.

        Raises:
            ItemNotFoundError: if the item does not exist in its collection.
        """
        await self.get(category, item_id)
        return await self._log.reset_item(category, item_id)
