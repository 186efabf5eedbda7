# Domain Package
from .models import (
    Category,
    CategoryTally,
    ConjugationForms,
    GrammarItem,
    ItemProgress,
    KanjiItem,
    LearningStage,
    Outcome,
    ReviewEvent,
    SessionConfig,
    SessionItem,
    SessionSummary,
    StudyItem,
    VocabItem,
)
from .ports import CollectionProvider, EventLogProvider

__all__ = [
    "Category",
    "CategoryTally",
    "CollectionProvider",
    "ConjugationForms",
    "EventLogProvider",
    "GrammarItem",
    "ItemProgress",
    "KanjiItem",
    "LearningStage",
    "Outcome",
    "ReviewEvent",
    "SessionConfig",
    "SessionItem",
    "SessionSummary",
    "StudyItem",
    "VocabItem",
]
