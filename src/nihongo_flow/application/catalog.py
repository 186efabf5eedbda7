"""Item listings annotated with SRS progress, with level/stage/search filters."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from nihongo_flow.application.scheduler import new_progress, progress_index
from nihongo_flow.application.utils.text import fuzzy_search
from nihongo_flow.domain.models import (
    Category,
    GrammarItem,
    ItemProgress,
    KanjiItem,
    LearningStage,
    ReviewEvent,
    StudyItem,
    VocabItem,
)


@dataclass(frozen=True)
class CatalogEntry:
    item: StudyItem
    progress: ItemProgress


def search_fields(item: StudyItem) -> tuple[str | None, ...]:
    """Text fields a search query is matched against."""
    if isinstance(item, VocabItem):
        return (item.word, item.reading, item.meaning)
    if isinstance(item, KanjiItem):
        return (item.character, item.onyomi, item.kunyomi, item.meaning)
    if isinstance(item, GrammarItem):
        return (item.rule, item.explanation, *item.examples)
    return (item.front, item.back)


def filter_by_stage(
    entries: Iterable[CatalogEntry], stage: LearningStage | None
) -> list[CatalogEntry]:
    if stage is None:
        return list(entries)
    return [e for e in entries if e.progress.stage is stage]


def list_with_progress(
    category: Category,
    items: Sequence[StudyItem],
    events: Iterable[ReviewEvent],
    level: str | None = None,
    stage: LearningStage | None = None,
    query: str | None = None,
) -> list[CatalogEntry]:
    """
    Pair every item with its derived progress and apply optional filters.

    Storage order is preserved.
    """
    index = progress_index(events, category)
    entries = [
        CatalogEntry(item=item, progress=index.get(item.id) or new_progress(category, item.id))
        for item in items
        if (not level or item.jlpt == level)
        and (not query or fuzzy_search(query, *search_fields(item)))
    ]
    return filter_by_stage(entries, stage)
