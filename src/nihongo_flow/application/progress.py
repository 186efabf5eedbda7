"""
Progress statistics for the dashboard.

Pure helpers compute learned counts, daily activity and streaks from a log
snapshot. ProgressService coordinates fetching from the ports.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from nihongo_flow.application.scheduler import progress_index
from nihongo_flow.domain.constants import ACTIVITY_WINDOW_DAYS
from nihongo_flow.domain.models import Category, LearningStage, ReviewEvent
from nihongo_flow.domain.ports import CollectionProvider, EventLogProvider

logger = logging.getLogger(__name__)


@dataclass
class CategoryProgress:
    category: Category
    total_items: int
    learned: int  # Distinct items with at least one correct review

    @property
    def learned_ratio(self) -> float:
        if self.total_items == 0:
            return 0.0
        return min(1.0, self.learned / self.total_items)


@dataclass
class DayActivity:
    day: date
    count: int
    by_category: dict[Category, int] = field(default_factory=dict)


def learned_item_ids(events: Iterable[ReviewEvent], category: Category) -> set[str]:
    """Distinct item ids with at least one easy or mastered review."""
    return {
        e.item_id for e in events if e.category == category and e.outcome.is_correct
    }


def daily_activity(
    events: Iterable[ReviewEvent],
    days: int = ACTIVITY_WINDOW_DAYS,
    today: date | None = None,
) -> list[DayActivity]:
    """
    Review counts per UTC calendar day for the last ``days`` days, oldest first.
    """
    today = today or datetime.now(timezone.utc).date()
    totals: Counter[date] = Counter()
    detail: dict[date, Counter[Category]] = {}

    for event in events:
        day = _utc_day(event.timestamp)
        totals[day] += 1
        detail.setdefault(day, Counter())[event.category] += 1

    window = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        window.append(
            DayActivity(day=day, count=totals.get(day, 0), by_category=dict(detail.get(day, {})))
        )
    return window


def current_streak(events: Iterable[ReviewEvent], today: date | None = None) -> int:
    """
    Number of consecutive days with reviews, ending today or yesterday.

    A streak that last saw activity before yesterday is broken (0).
    """
    today = today or datetime.now(timezone.utc).date()
    active_days = {_utc_day(e.timestamp) for e in events}
    if not active_days:
        return 0

    if today in active_days:
        cursor = today
    elif today - timedelta(days=1) in active_days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in active_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def stage_counts(
    item_ids: Iterable[str], events: Iterable[ReviewEvent], category: Category
) -> dict[LearningStage, int]:
    """How many of ``item_ids`` sit in each learning stage."""
    index = progress_index(events, category)
    counts = {stage: 0 for stage in LearningStage}
    for item_id in item_ids:
        progress = index.get(item_id)
        counts[progress.stage if progress else LearningStage.NEW] += 1
    return counts


def _utc_day(ts: datetime) -> date:
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(timezone.utc).date()


class ProgressService:
    """
    Application service for dashboard statistics.

    Depends on the CollectionProvider and EventLogProvider abstractions.
    """

    def __init__(self, collections: CollectionProvider, event_log: EventLogProvider):
        self._collections = collections
        self._log = event_log

    async def learned_counts(self) -> list[CategoryProgress]:
        events = await self._log.list_events()
        result = []
        for category in Category:
            items = await self._collections.list_items(category)
            known_ids = {item.id for item in items}
            # Only count ids that still exist in the collection
            learned = learned_item_ids(events, category) & known_ids
            result.append(
                CategoryProgress(category=category, total_items=len(items), learned=len(learned))
            )
        return result

    async def daily_activity(
        self, days: int = ACTIVITY_WINDOW_DAYS, today: date | None = None
    ) -> list[DayActivity]:
        return daily_activity(await self._log.list_events(), days=days, today=today)

    async def current_streak(self, today: date | None = None) -> int:
        return current_streak(await self._log.list_events(), today=today)

    async def stage_counts(self, category: Category) -> dict[LearningStage, int]:
        items = await self._collections.list_items(category)
        events = await self._log.list_events(category=category)
        return stage_counts((item.id for item in items), events, category)
