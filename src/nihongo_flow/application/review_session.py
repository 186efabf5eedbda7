"""
Review session state machine.

Presents one item at a time, records each outcome in the event log and keeps
per-category tallies until the queue is exhausted.

    NOT_STARTED --start--> IN_PROGRESS(cursor, flipped) --last submit--> COMPLETED
          ^                         |                                        |
          +---------exit------------+-------------------exit-----------------+
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from enum import Enum

from nihongo_flow.domain.errors import EmptySelectionError
from nihongo_flow.domain.models import (
    Category,
    CategoryTally,
    Outcome,
    ReviewEvent,
    SessionItem,
    SessionSummary,
)
from nihongo_flow.domain.ports import EventLogProvider

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReviewSession:
    """
    Drives a single review session against an event log.

    The engine accepts ``submit`` whether or not the card is flipped; the
    interface decides when to expose the outcome buttons. Only one submission
    may be in flight at a time.
    """

    def __init__(
        self,
        event_log: EventLogProvider,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            event_log: Port the outcomes are appended to.
            clock: Source of event timestamps; UTC now if not provided.
        """
        self._log = event_log
        self._clock = clock or utc_now
        self._state = SessionState.NOT_STARTED
        self._items: list[SessionItem] = []
        self._cursor = 0
        self._flipped = False
        self._busy = False
        self._generation = 0
        self._reset_tallies()

    def _reset_tallies(self) -> None:
        self._correct = 0
        self._total = 0
        self._breakdown: dict[Category, CategoryTally] = {c: CategoryTally() for c in Category}
        self._answers: list[tuple[SessionItem, Outcome]] = []
        self._summary: SessionSummary | None = None

    # ---------- Read-only view ----------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def flipped(self) -> bool:
        return self._flipped

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def items(self) -> list[SessionItem]:
        return list(self._items)

    @property
    def current(self) -> SessionItem | None:
        if self._state is not SessionState.IN_PROGRESS:
            return None
        return self._items[self._cursor]

    @property
    def remaining(self) -> int:
        if self._state is not SessionState.IN_PROGRESS:
            return 0
        return len(self._items) - self._cursor

    @property
    def answers(self) -> list[tuple[SessionItem, Outcome]]:
        """Items submitted so far with their outcomes, in presentation order."""
        return list(self._answers)

    @property
    def presented(self) -> list[SessionItem]:
        return [item for item, _ in self._answers]

    @property
    def summary(self) -> SessionSummary | None:
        return self._summary

    # ---------- Transitions ----------

    def start(self, items: Sequence[SessionItem]) -> None:
        """
        Begin a session over ``items`` in the given order.

        Raises:
            EmptySelectionError: if ``items`` is empty.
        """
        if not items:
            raise EmptySelectionError()

        self._generation += 1
        self._items = list(items)
        self._cursor = 0
        self._flipped = False
        self._busy = False
        self._reset_tallies()
        self._state = SessionState.IN_PROGRESS
        logger.info(f"Review session started with {len(self._items)} items")

    def flip(self) -> None:
        """Toggle between the front and the back of the current card."""
        if self._state is SessionState.IN_PROGRESS:
            self._flipped = not self._flipped

    async def submit(self, outcome: Outcome | str) -> bool:
        """
        Record an outcome for the current item and advance.

        The cursor only moves after the event log acknowledges the append.

        Returns:
            True if the outcome was recorded and the session advanced, False if
            the call was ignored (not in progress, or a submission is pending).

        Raises:
            EventAppendError: if the log rejects the event. The session stays
                on the current item and may be retried.
        """
        if self._busy:
            logger.debug("Ignoring submit while another submission is pending")
            return False
        if self._state is not SessionState.IN_PROGRESS:
            return False

        outcome = Outcome(outcome)
        current = self._items[self._cursor]
        generation = self._generation
        event = ReviewEvent(
            timestamp=self._clock(),
            category=current.category,
            item_id=current.item_id,
            outcome=outcome,
        )

        self._busy = True
        try:
            await self._log.append_event(event)
        finally:
            # A newer session owns the flag once exit/start bumped the generation
            if generation == self._generation:
                self._busy = False

        logger.debug(f"Recorded {outcome.value} for {current.category.value}:{current.item_id}")

        if generation != self._generation or self._state is not SessionState.IN_PROGRESS:
            # Session was exited (or restarted) while the append was pending
            return False

        self._tally(current, outcome)
        self._flipped = False

        if self._cursor >= len(self._items) - 1:
            self._complete()
        else:
            self._cursor += 1
        return True

    def exit(self) -> None:
        """Abandon the session. Events already appended stay in the log."""
        self._generation += 1
        self._state = SessionState.NOT_STARTED
        self._items = []
        self._cursor = 0
        self._flipped = False
        self._busy = False
        self._reset_tallies()

    # ---------- Internals ----------

    def _tally(self, item: SessionItem, outcome: Outcome) -> None:
        correct = outcome.is_correct
        self._total += 1
        self._correct += int(correct)
        tally = self._breakdown[item.category]
        tally.total += 1
        tally.correct += int(correct)
        self._answers.append((item, outcome))

    def _complete(self) -> None:
        self._state = SessionState.COMPLETED
        self._summary = SessionSummary(
            correct=self._correct,
            total=self._total,
            breakdown={c: t for c, t in self._breakdown.items() if t.total > 0},
        )
        logger.info(
            f"Review session completed: {self._summary.correct}/{self._summary.total} "
            f"({self._summary.accuracy}%)"
        )
