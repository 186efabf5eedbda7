from datetime import datetime, timedelta, timezone

import pytest

from nihongo_flow.domain.models import (
    Category,
    GrammarItem,
    KanjiItem,
    Outcome,
    ReviewEvent,
    VocabItem,
)

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_event(
    outcome: Outcome | str,
    minutes: int = 0,
    category: Category = Category.VOCAB,
    item_id: str = "1",
) -> ReviewEvent:
    return ReviewEvent(
        timestamp=T0 + timedelta(minutes=minutes),
        category=category,
        item_id=item_id,
        outcome=Outcome(outcome),
    )


@pytest.fixture
def collections():
    """Small mixed-level pool across all three categories."""
    return {
        Category.VOCAB: [
            VocabItem(id="1", word="猫", reading="ねこ", meaning="Cat", jlpt="N5", chapter="1"),
            VocabItem(id="2", word="犬", reading="いぬ", meaning="Dog", jlpt="N5", chapter="1",
                      source="Genki"),
            VocabItem(id="3", word="全然", reading="ぜんぜん", meaning="Not at all", jlpt="N4",
                      chapter="10"),
            VocabItem(id="4", word="経済", reading="けいざい", meaning="Economy", jlpt="N3",
                      chapter="12", source="Tobira"),
        ],
        Category.KANJI: [
            KanjiItem(id="1", character="日", onyomi="ニチ", kunyomi="ひ", meaning="Day",
                      jlpt="N5", chapter="1", source="Genki"),
            KanjiItem(id="2", character="議", onyomi="ギ", meaning="Deliberation", jlpt="N3",
                      chapter="12"),
        ],
        Category.GRAMMAR: [
            GrammarItem(id="1", rule="〜てください", explanation="Polite request",
                        examples=("座ってください。",), jlpt="N5", chapter="3"),
        ],
    }


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/data
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "NIHONGO_FLOW_DATA_DIR",
        "NIHONGO_FLOW_STORAGE",
        "NIHONGO_FLOW_SESSION_LIMIT",
        "NIHONGO_FLOW_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def event():
    """Factory for ReviewEvents at fixed minute offsets from a base time."""
    return make_event
