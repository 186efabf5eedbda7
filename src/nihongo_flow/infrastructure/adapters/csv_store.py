"""
CSV-backed adapters over a data directory.

Implements CollectionProvider and EventLogProvider on top of ``vocab.csv``,
``kanji.csv``, ``grammar.csv`` and ``stats.csv``. Last write wins.
"""

import dataclasses
import logging
import os
import tempfile
from pathlib import Path

from nihongo_flow.domain.constants import EVENT_LOG_HEADER, FILE_NAMES
from nihongo_flow.domain.errors import EventAppendError, ItemNotFoundError
from nihongo_flow.domain.models import Category, ReviewEvent, StudyItem
from nihongo_flow.domain.ports import CollectionProvider, EventLogProvider
from nihongo_flow.infrastructure.adapters.memory import filter_events, next_item_id
from nihongo_flow.infrastructure.csv_codec import (
    HEADERS,
    event_from_row,
    event_to_row,
    item_from_row,
    item_to_row,
    read_rows,
    write_rows,
)
from nihongo_flow.infrastructure.samples import SAMPLES

logger = logging.getLogger(__name__)


def _write_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class CsvCollectionRepository(CollectionProvider):
    """
    Collections stored as one CSV file each.

    A missing collection file is created from the sample set on first read
    when ``seed_samples`` is enabled, otherwise it reads as empty.
    """

    def __init__(self, data_dir: Path, seed_samples: bool = True):
        self.data_dir = Path(data_dir)
        self.seed_samples = seed_samples

    def path_for(self, category: Category) -> Path:
        return self.data_dir / FILE_NAMES[category.value]

    async def list_items(self, category: Category) -> list[StudyItem]:
        return self._load(category)

    async def list_distinct_sources(self, category: Category) -> set[str]:
        return {item.source for item in self._load(category) if item.source}

    async def add_item(self, category: Category, item: StudyItem) -> StudyItem:
        items = self._load(category)
        stored = dataclasses.replace(item, id=next_item_id(items))
        self._save(category, [*items, stored])
        logger.info(f"Added {category.value} item {stored.id}")
        return stored

    async def update_item(self, category: Category, item: StudyItem) -> None:
        items = self._load(category)
        for index, existing in enumerate(items):
            if existing.id == item.id:
                items[index] = item
                self._save(category, items)
                return
        raise ItemNotFoundError(category.value, item.id)

    async def delete_items(self, category: Category, ids: list[str]) -> int:
        wanted = set(ids)
        items = self._load(category)
        kept = [i for i in items if i.id not in wanted]
        removed = len(items) - len(kept)
        if removed:
            self._save(category, kept)
        return removed

    def _load(self, category: Category) -> list[StudyItem]:
        path = self.path_for(category)
        if not path.exists():
            if not self.seed_samples:
                return []
            logger.info(f"{path.name} not found, seeding with sample data")
            samples = list(SAMPLES[category])
            self._save(category, samples)
            return samples

        rows = read_rows(path.read_text(encoding="utf-8"))
        return [item_from_row(category, row) for row in rows if row.get("id", "").strip()]

    def _save(self, category: Category, items: list[StudyItem]) -> None:
        content = write_rows(HEADERS[category], [item_to_row(i) for i in items])
        _write_atomic(self.path_for(category), content)


class CsvEventLog(EventLogProvider):
    """
    Review log stored as ``stats.csv`` (date,category,itemId,result).

    Appends add one line; malformed rows are skipped on read but preserved on disk.
    """

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / FILE_NAMES["stats"]

    async def append_event(self, event: ReviewEvent) -> None:
        line = write_rows(EVENT_LOG_HEADER, [event_to_row(event)]).split("\n", 1)[1]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            prefix = ""
            if not self.path.exists() or self.path.stat().st_size == 0:
                prefix = ",".join(EVENT_LOG_HEADER) + "\n"
            elif not self._ends_with_newline():
                prefix = "\n"
            with self.path.open("a", encoding="utf-8", newline="") as fh:
                fh.write(prefix + line)
        except OSError as e:
            logger.error(f"Failed to append review event to {self.path}: {e}")
            raise EventAppendError(f"Could not write to {self.path}: {e}") from e

    async def list_events(
        self,
        category: Category | None = None,
        item_id: str | None = None,
    ) -> list[ReviewEvent]:
        events = [e for e in map(event_from_row, self._rows()) if e is not None]
        return filter_events(events, category, item_id)

    async def reset_item(self, category: Category, item_id: str) -> int:
        rows = self._rows()
        kept = [
            r
            for r in rows
            if not (
                r.get("category", "").strip().lower() == category.value
                and r.get("itemId", "").strip() == item_id
            )
        ]
        removed = len(rows) - len(kept)
        if removed:
            _write_atomic(self.path, write_rows(EVENT_LOG_HEADER, kept))
            logger.info(f"Cleared {removed} review events for {category.value}:{item_id}")
        return removed

    def _ends_with_newline(self) -> bool:
        with self.path.open("rb") as fh:
            fh.seek(-1, os.SEEK_END)
            return fh.read(1) == b"\n"

    def _rows(self) -> list[dict[str, str]]:
        if not self.path.exists():
            return []
        return read_rows(self.path.read_text(encoding="utf-8"))
