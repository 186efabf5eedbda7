"""
Spaced repetition scheduler.

Turns the review history of one item into an interval strength, a learning
stage and a mastery percentage. This is a pure computation module with no I/O.
"""

import logging
from collections.abc import Iterable

from nihongo_flow.domain.constants import (
    EASY_FIRST_INTERVAL,
    EASY_MULTIPLIER,
    HARD_FIRST_INTERVAL,
    HARD_MULTIPLIER,
    LEARNING_MAX_INTERVAL,
    MASTERED_INTERVAL,
    MASTERY_INTERVAL,
)
from nihongo_flow.domain.models import (
    Category,
    ItemProgress,
    LearningStage,
    Outcome,
    ReviewEvent,
    percent,
)

logger = logging.getLogger(__name__)


def compute_interval(history: Iterable[ReviewEvent | Outcome | str]) -> float:
    """
    Fold a review history into an interval value.

    ReviewEvents are sorted by timestamp before folding, so storage order does
    not matter. Bare outcomes are folded in the order given, and so is a
    history that mixes both kinds, since bare outcomes carry no timestamp.
    Unknown outcome codes are skipped.

    Rules, starting from 0:
        mastered -> 999
        easy     -> 1 if 0, else x2.5
        hard     -> 0.5 if 0, else x1.2
        forgot   -> 0
    """
    entries = list(history)
    if all(isinstance(e, ReviewEvent) for e in entries):
        entries = sorted(entries, key=lambda e: e.timestamp)

    interval = 0.0
    for entry in entries:
        outcome = _coerce_outcome(entry.outcome if isinstance(entry, ReviewEvent) else entry)
        if outcome is None:
            continue
        interval = _apply(interval, outcome)
    return interval


def _apply(interval: float, outcome: Outcome) -> float:
    if outcome is Outcome.MASTERED:
        return MASTERED_INTERVAL
    if outcome is Outcome.EASY:
        return EASY_FIRST_INTERVAL if interval == 0 else interval * EASY_MULTIPLIER
    if outcome is Outcome.HARD:
        return HARD_FIRST_INTERVAL if interval == 0 else interval * HARD_MULTIPLIER
    return 0.0


def _coerce_outcome(value: Outcome | str) -> Outcome | None:
    if isinstance(value, Outcome):
        return value
    try:
        return Outcome(str(value).strip().lower())
    except ValueError:
        logger.debug(f"Skipping unknown outcome code {value!r}")
        return None


def classify_stage(interval: float) -> LearningStage:
    """
    Bucket an interval into a learning stage.

    0 is new, above 21 is mastered, above 2 is review, anything else is learning.
    """
    if interval == 0:
        return LearningStage.NEW
    if interval > MASTERY_INTERVAL:
        return LearningStage.MASTERED
    if interval > LEARNING_MAX_INTERVAL:
        return LearningStage.REVIEW
    return LearningStage.LEARNING


def mastery_percent(interval: float) -> int:
    """Linear ramp from 0 to 100 at the mastery threshold, saturating above it."""
    return min(100, percent(interval, MASTERY_INTERVAL))


def item_history(
    events: Iterable[ReviewEvent], category: Category, item_id: str
) -> list[ReviewEvent]:
    """Events of one item, sorted by timestamp (stable for equal timestamps)."""
    own = [e for e in events if e.category == category and e.item_id == item_id]
    return sorted(own, key=lambda e: e.timestamp)


def item_progress(
    events: Iterable[ReviewEvent], category: Category, item_id: str
) -> ItemProgress:
    """
    Derive interval, stage and mastery for one item from a log snapshot.
    """
    history = item_history(events, category, item_id)
    interval = compute_interval(history)
    return ItemProgress(
        category=category,
        item_id=item_id,
        interval=interval,
        stage=classify_stage(interval),
        mastery=mastery_percent(interval),
        reviews=len(history),
        last_reviewed=history[-1].timestamp if history else None,
    )


def progress_index(
    events: Iterable[ReviewEvent], category: Category
) -> dict[str, ItemProgress]:
    """
    Derive progress for every item of a category that has at least one event.

    Items with no history are absent; callers treat them as new.
    """
    by_item: dict[str, list[ReviewEvent]] = {}
    for event in events:
        if event.category == category:
            by_item.setdefault(event.item_id, []).append(event)

    index: dict[str, ItemProgress] = {}
    for item_id, history in by_item.items():
        index[item_id] = item_progress(history, category, item_id)
    return index


def new_progress(category: Category, item_id: str) -> ItemProgress:
    return ItemProgress(
        category=category,
        item_id=item_id,
        interval=0.0,
        stage=LearningStage.NEW,
        mastery=0,
        reviews=0,
    )
