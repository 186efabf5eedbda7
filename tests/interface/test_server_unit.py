import pytest
from fastapi.testclient import TestClient

from nihongo_flow.consts import VERSION
from nihongo_flow.infrastructure.adapters.memory import MemoryCollectionRepository, MemoryEventLog
from nihongo_flow.server import app, collections_dep, event_log_dep


@pytest.fixture
def log():
    return MemoryEventLog()


@pytest.fixture
def client(collections, log):
    repo = MemoryCollectionRepository(collections)
    app.dependency_overrides[collections_dep] = lambda: repo
    app.dependency_overrides[event_log_dep] = lambda: log
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version(client):
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


# --- Items ---


def test_list_items(client):
    response = client.get("/items/vocab")
    assert response.status_code == 200
    data = response.json()
    assert [d["id"] for d in data] == ["1", "2", "3", "4"]
    assert data[0]["front"] == "猫"
    assert data[0]["stage"] == "new"
    assert data[0]["mastery"] == 0


def test_list_items_filters(client):
    assert [d["id"] for d in client.get("/items/vocab", params={"level": "N5"}).json()] == [
        "1",
        "2",
    ]
    assert [d["id"] for d in client.get("/items/vocab", params={"q": "dog"}).json()] == ["2"]


def test_list_items_unknown_category(client):
    assert client.get("/items/verbs").status_code == 422


# --- Reviews ---


def test_log_review_updates_progress(client, log):
    response = client.post(
        "/reviews", json={"category": "vocab", "item_id": "1", "outcome": "easy"}
    )
    assert response.status_code == 201
    assert response.json()["outcome"] == "easy"
    assert len(log._events) == 1

    progress = client.get("/items/vocab/1/progress").json()
    assert progress["interval"] == 1.0
    assert progress["stage"] == "learning"
    assert progress["mastery"] == 5
    assert progress["reviews"] == 1
    assert progress["last_reviewed"] is not None


def test_log_review_unknown_item(client, log):
    response = client.post(
        "/reviews", json={"category": "kanji", "item_id": "42", "outcome": "easy"}
    )
    assert response.status_code == 404
    assert log._events == []


def test_log_review_rejects_unknown_outcome(client):
    response = client.post(
        "/reviews", json={"category": "vocab", "item_id": "1", "outcome": "meh"}
    )
    assert response.status_code == 422


def test_log_review_append_failure(client, log):
    log.fail_appends = True
    response = client.post(
        "/reviews", json={"category": "vocab", "item_id": "1", "outcome": "hard"}
    )
    assert response.status_code == 500
    assert "reject" in response.json()["detail"]


def test_item_progress_missing_item(client):
    assert client.get("/items/grammar/9/progress").status_code == 404


def test_item_progress_unreviewed(client):
    data = client.get("/items/kanji/2/progress").json()
    assert data["stage"] == "new"
    assert data["interval"] == 0.0
    assert data["last_reviewed"] is None


# --- Sessions ---


def test_session_preview(client):
    response = client.post("/sessions/preview", json={"categories": ["kanji"], "levels": ["N5"]})
    assert response.status_code == 200
    data = response.json()
    assert data["matched"] == 1
    assert data["items"][0]["front"] == "日"
    assert data["items"][0]["category"] == "kanji"


def test_session_preview_limit_is_seeded(client):
    body = {"limit": 3, "seed": 7}
    first = client.post("/sessions/preview", json=body).json()
    second = client.post("/sessions/preview", json=body).json()

    assert first["matched"] == 7
    assert len(first["items"]) == 3
    assert first["items"] == second["items"]


def test_session_preview_empty(client):
    response = client.post("/sessions/preview", json={"levels": ["N1"]})
    assert response.status_code == 404


def test_session_preview_rejects_negative_limit(client):
    assert client.post("/sessions/preview", json={"limit": -1}).status_code == 422


# --- Progress ---


def test_progress_overview(client):
    client.post("/reviews", json={"category": "kanji", "item_id": "1", "outcome": "mastered"})

    data = client.get("/progress").json()

    assert data["streak"] == 1
    by_category = {c["category"]: c for c in data["categories"]}
    assert by_category["kanji"] == {"category": "kanji", "total_items": 2, "learned": 1}
    assert by_category["vocab"]["learned"] == 0


def test_progress_overview_activity(client):
    client.post("/reviews", json={"category": "vocab", "item_id": "2", "outcome": "hard"})
    client.post("/reviews", json={"category": "vocab", "item_id": "3", "outcome": "easy"})

    data = client.get("/progress", params={"days": 3}).json()

    assert len(data["activity"]) == 3
    assert [a["count"] for a in data["activity"]] == [0, 0, 2]
    assert data["activity"][0]["day"] < data["activity"][-1]["day"]


def test_progress_overview_rejects_zero_days(client):
    assert client.get("/progress", params={"days": 0}).status_code == 422


# --- Editing ---


def test_add_item(client):
    response = client.post(
        "/items/vocab", json={"fields": {"word": "鳥", "reading": "とり", "meaning": "Bird"}}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["id"] == "5"
    assert data["front"] == "鳥"

    assert [d["id"] for d in client.get("/items/vocab").json()][-1] == "5"


def test_add_grammar_item_with_examples(client):
    response = client.post(
        "/items/grammar",
        json={"fields": {"rule": "〜たい", "explanation": "Want to", "examples": ["食べたい。"]}},
    )
    assert response.status_code == 201
    assert response.json()["back"] == "Want to\n食べたい。"


def test_add_item_missing_required_field(client):
    response = client.post("/items/kanji", json={"fields": {"meaning": "Tree"}})
    assert response.status_code == 422
    assert "character" in response.json()["detail"]


def test_add_item_unknown_field(client):
    response = client.post("/items/vocab", json={"fields": {"word": "鳥", "colour": "red"}})
    assert response.status_code == 422


def test_edit_item(client):
    response = client.put("/items/vocab/1", json={"fields": {"meaning": "Kitty"}})
    assert response.status_code == 200
    assert response.json()["back"] == "ねこ - Kitty"

    listed = {d["id"]: d for d in client.get("/items/vocab").json()}
    assert listed["1"]["back"] == "ねこ - Kitty"


def test_edit_missing_item(client):
    response = client.put("/items/vocab/99", json={"fields": {"meaning": "?"}})
    assert response.status_code == 404


def test_edit_cannot_blank_required_field(client):
    response = client.put("/items/kanji/1", json={"fields": {"character": ""}})
    assert response.status_code == 422


def test_delete_item_keeps_history(client, log):
    client.post("/reviews", json={"category": "vocab", "item_id": "2", "outcome": "easy"})

    response = client.delete("/items/vocab/2")

    assert response.status_code == 200
    assert response.json() == {"removed": 1}
    assert [d["id"] for d in client.get("/items/vocab").json()] == ["1", "3", "4"]
    assert len(log._events) == 1
    assert client.delete("/items/vocab/2").status_code == 404


def test_reset_item_history(client, log):
    for outcome in ("easy", "hard"):
        client.post("/reviews", json={"category": "vocab", "item_id": "1", "outcome": outcome})
    client.post("/reviews", json={"category": "vocab", "item_id": "2", "outcome": "easy"})

    response = client.delete("/items/vocab/1/reviews")

    assert response.status_code == 200
    assert response.json() == {"removed": 2}
    assert [e.item_id for e in log._events] == ["2"]


def test_reset_missing_item_history(client):
    response = client.delete("/items/grammar/9/reviews")
    assert response.status_code == 404
    assert "9" in response.json()["detail"]


# --- Lifespan ---


def test_memory_backend_keeps_state_between_requests(mock_home, monkeypatch):
    monkeypatch.setenv("NIHONGO_FLOW_STORAGE", "memory")

    with TestClient(app) as client:
        response = client.post(
            "/reviews", json={"category": "vocab", "item_id": "1", "outcome": "mastered"}
        )
        assert response.status_code == 201

        progress = client.get("/items/vocab/1/progress").json()
        assert progress["reviews"] == 1
        assert progress["stage"] == "mastered"

        added = client.post("/items/kanji", json={"fields": {"character": "木"}}).json()
        assert added["id"] in {d["id"] for d in client.get("/items/kanji").json()}

    # Nothing was written to disk
    assert not (mock_home / ".local" / "share" / "nihongo-flow" / "stats.csv").exists()
