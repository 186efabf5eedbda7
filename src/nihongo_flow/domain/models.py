"""
Domain models for study items, review events and sessions.

These are pure data structures with no I/O or external dependencies.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum


class Category(str, Enum):
    """Collection a study item belongs to. Values match the CSV ``category`` column."""

    VOCAB = "vocab"
    KANJI = "kanji"
    GRAMMAR = "grammar"


class Outcome(str, Enum):
    """Self-reported recall quality for one review."""

    FORGOT = "forgot"
    HARD = "hard"
    EASY = "easy"
    MASTERED = "mastered"

    @property
    def is_correct(self) -> bool:
        return self in (Outcome.EASY, Outcome.MASTERED)


class LearningStage(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MASTERED = "mastered"

    @property
    def rank(self) -> int:
        return _STAGE_ORDER.index(self)


_STAGE_ORDER = [
    LearningStage.NEW,
    LearningStage.LEARNING,
    LearningStage.REVIEW,
    LearningStage.MASTERED,
]


@dataclass(frozen=True)
class ReviewEvent:
    """
    A single entry of the review log.

    Attributes:
        timestamp: When the review happened (timezone-aware, UTC).
        category: Collection of the reviewed item.
        item_id: Identifier of the item inside its collection.
        outcome: Button pressed by the learner.
    """

    timestamp: datetime
    category: Category
    item_id: str
    outcome: Outcome


# ---------- Study items ----------


@dataclass(frozen=True)
class ConjugationForms:
    """Known verb/adjective forms. Every form is optional."""

    te: str | None = None
    nai: str | None = None
    masu: str | None = None
    ta: str | None = None
    potential: str | None = None
    volitional: str | None = None
    passive: str | None = None
    causative: str | None = None
    past_negative: str | None = None
    adverbial: str | None = None
    noun_form: str | None = None
    conditional: str | None = None

    def present(self) -> dict[str, str]:
        """Return only the forms that are filled in, in declaration order."""
        return {
            f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)
        }


@dataclass(frozen=True, kw_only=True)
class StudyItem(ABC):
    """Fields shared by every collection. Subclasses define the card faces."""

    id: str
    jlpt: str = ""
    chapter: str = ""
    source: str | None = None

    @property
    @abstractmethod
    def front(self) -> str: ...

    @property
    @abstractmethod
    def back(self) -> str: ...


@dataclass(frozen=True, kw_only=True)
class VocabItem(StudyItem):
    word: str
    reading: str = ""
    meaning: str = ""
    part_of_speech: str = ""
    conjugations: ConjugationForms = field(default_factory=ConjugationForms)

    @property
    def front(self) -> str:
        return self.word

    @property
    def back(self) -> str:
        if self.reading and self.reading != self.word:
            return f"{self.reading} - {self.meaning}"
        return self.meaning


@dataclass(frozen=True, kw_only=True)
class KanjiItem(StudyItem):
    character: str
    onyomi: str = ""
    kunyomi: str = ""
    meaning: str = ""
    strokes: str = ""

    @property
    def front(self) -> str:
        return self.character

    @property
    def back(self) -> str:
        readings = " / ".join(r for r in (self.onyomi, self.kunyomi) if r)
        return f"{self.meaning} ({readings})" if readings else self.meaning


@dataclass(frozen=True, kw_only=True)
class GrammarItem(StudyItem):
    rule: str
    explanation: str = ""
    examples: tuple[str, ...] = ()
    usage_notes: str | None = None

    @property
    def front(self) -> str:
        return self.rule

    @property
    def back(self) -> str:
        if self.examples:
            return f"{self.explanation}\n" + "\n".join(self.examples)
        return self.explanation


ITEM_TYPES: dict[Category, type[StudyItem]] = {
    Category.VOCAB: VocabItem,
    Category.KANJI: KanjiItem,
    Category.GRAMMAR: GrammarItem,
}


# ---------- Sessions ----------


@dataclass(frozen=True)
class SessionConfig:
    """
    Criteria for assembling a review session.

    Empty ``levels``, ``chapters`` or ``sources`` mean "no filter".
    A ``limit`` of 0 keeps every matching item.
    """

    categories: frozenset[Category] = frozenset(Category)
    levels: frozenset[str] = frozenset()
    chapters: frozenset[str] = frozenset()
    sources: frozenset[str] = frozenset()
    limit: int = 0

    def __post_init__(self):
        if self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")
        # Accept any iterable from callers, store frozensets
        object.__setattr__(self, "categories", frozenset(Category(c) for c in self.categories))
        object.__setattr__(self, "levels", frozenset(self.levels))
        object.__setattr__(self, "chapters", frozenset(self.chapters))
        object.__setattr__(self, "sources", frozenset(self.sources))


@dataclass(frozen=True)
class SessionItem:
    """A study item tagged with the collection it was drawn from."""

    category: Category
    item: StudyItem

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def front(self) -> str:
        return self.item.front

    @property
    def back(self) -> str:
        return self.item.back


@dataclass
class CategoryTally:
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> int:
        return percent(self.correct, self.total)


@dataclass(frozen=True)
class SessionSummary:
    """Final report of a completed review session."""

    correct: int
    total: int
    breakdown: dict[Category, CategoryTally]

    @property
    def accuracy(self) -> int:
        return percent(self.correct, self.total)


@dataclass(frozen=True)
class ItemProgress:
    """Derived SRS state for one item."""

    category: Category
    item_id: str
    interval: float
    stage: LearningStage
    mastery: int
    reviews: int
    last_reviewed: datetime | None = None


def percent(part: float, whole: float) -> int:
    """Half-up rounded percentage; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)
