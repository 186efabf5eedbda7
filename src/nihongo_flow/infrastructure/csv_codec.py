"""
CSV codec for collections and the review log.

Maps flat CSV rows (camelCase headers, one row per record) to domain models
and back. Grammar examples are stored as a JSON array string.
"""

import csv
import io
import json
import logging
from dataclasses import fields
from datetime import datetime, timezone
from typing import Any

from nihongo_flow.domain.constants import EVENT_LOG_HEADER
from nihongo_flow.domain.models import (
    Category,
    ConjugationForms,
    GrammarItem,
    KanjiItem,
    Outcome,
    ReviewEvent,
    StudyItem,
    VocabItem,
)

logger = logging.getLogger(__name__)

# Conjugation field -> CSV column
CONJUGATION_COLUMNS = {
    "te": "te",
    "nai": "nai",
    "masu": "masu",
    "ta": "ta",
    "potential": "potential",
    "volitional": "volitional",
    "passive": "passive",
    "causative": "causative",
    "past_negative": "pastNegative",
    "adverbial": "adverbial",
    "noun_form": "nounForm",
    "conditional": "conditional",
}

HEADERS: dict[Category, list[str]] = {
    Category.VOCAB: [
        "id", "word", "reading", "meaning", "partOfSpeech", "jlpt", "chapter", "source",
        *CONJUGATION_COLUMNS.values(),
    ],
    Category.KANJI: [
        "id", "character", "onyomi", "kunyomi", "meaning", "jlpt", "strokes", "chapter", "source",
    ],
    Category.GRAMMAR: [
        "id", "rule", "explanation", "usageNotes", "examples", "jlpt", "chapter", "source",
    ],
}


# ---------- Raw CSV ----------


def read_rows(text: str) -> list[dict[str, str]]:
    """
    Parse CSV text into dicts keyed by the (stripped) header row.

    Tolerates a UTF-8 BOM and CRLF line endings; blank lines are skipped and
    missing trailing fields read as "".
    """
    text = text.lstrip("\ufeff")
    if not text.strip():
        return []

    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        headers = [h.strip() for h in next(reader)]
    except StopIteration:
        return []

    rows = []
    for record in reader:
        if not record or record == [""]:
            continue
        row = {}
        for index, header in enumerate(headers):
            if header:
                row[header] = record[index] if index < len(record) else ""
        rows.append(row)
    return rows


def write_rows(headers: list[str], rows: list[dict[str, Any]]) -> str:
    """Serialize rows, quoting only fields that need it."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=headers, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return buffer.getvalue()


# ---------- Items ----------


def item_from_row(category: Category, row: dict[str, str]) -> StudyItem:
    common = {
        "id": row.get("id", "").strip(),
        "jlpt": row.get("jlpt", "").strip(),
        "chapter": row.get("chapter", "").strip(),
        "source": row.get("source", "").strip() or None,
    }

    if category is Category.VOCAB:
        return VocabItem(
            **common,
            word=row.get("word", ""),
            reading=row.get("reading", ""),
            meaning=row.get("meaning", ""),
            part_of_speech=row.get("partOfSpeech", ""),
            conjugations=_conjugations_from_row(row),
        )

    if category is Category.KANJI:
        return KanjiItem(
            **common,
            character=row.get("character", ""),
            onyomi=row.get("onyomi", ""),
            kunyomi=row.get("kunyomi", ""),
            meaning=row.get("meaning", ""),
            strokes=row.get("strokes", ""),
        )

    return GrammarItem(
        **common,
        rule=row.get("rule", ""),
        explanation=row.get("explanation", ""),
        examples=_parse_examples(row),
        usage_notes=row.get("usageNotes") or None,
    )


def item_to_row(item: StudyItem) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": item.id,
        "jlpt": item.jlpt,
        "chapter": item.chapter,
        "source": item.source or "",
    }

    if isinstance(item, VocabItem):
        row.update(
            word=item.word,
            reading=item.reading,
            meaning=item.meaning,
            partOfSpeech=item.part_of_speech,
        )
        for f in fields(ConjugationForms):
            row[CONJUGATION_COLUMNS[f.name]] = getattr(item.conjugations, f.name) or ""
    elif isinstance(item, KanjiItem):
        row.update(
            character=item.character,
            onyomi=item.onyomi,
            kunyomi=item.kunyomi,
            meaning=item.meaning,
            strokes=item.strokes,
        )
    elif isinstance(item, GrammarItem):
        row.update(
            rule=item.rule,
            explanation=item.explanation,
            usageNotes=item.usage_notes or "",
            examples=json.dumps(list(item.examples), ensure_ascii=False),
        )
    return row


def _conjugations_from_row(row: dict[str, str]) -> ConjugationForms:
    """
    Read conjugation columns. Legacy ``v_``/``a_`` prefixed columns are
    used when the plain column is empty.
    """
    values = {}
    for name, column in CONJUGATION_COLUMNS.items():
        value = row.get(column) or row.get(f"v_{column}") or row.get(f"a_{column}")
        values[name] = value.strip() if value and value.strip() else None
    return ConjugationForms(**values)


def _parse_examples(row: dict[str, str]) -> tuple[str, ...]:
    raw = row.get("examples", "")
    if raw:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return tuple(str(x) for x in parsed)
    # Legacy single-example column
    legacy = row.get("example", "")
    return (legacy,) if legacy else ()


# ---------- Review log ----------


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp (``Z`` suffix allowed). Naive values are UTC.

    Raises:
        ValueError: if the value is not ISO-8601.
    """
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-05-01T09:30:00.000Z."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def event_from_row(row: dict[str, str]) -> ReviewEvent | None:
    """
    Build a ReviewEvent from a log row. Malformed rows return None.
    """
    try:
        return ReviewEvent(
            timestamp=parse_timestamp(row.get("date", "")),
            category=Category(row.get("category", "").strip().lower()),
            item_id=row.get("itemId", "").strip(),
            outcome=Outcome(row.get("result", "").strip().lower()),
        )
    except ValueError as e:
        logger.warning(f"Skipping malformed review log row {row}: {e}")
        return None


def event_to_row(event: ReviewEvent) -> dict[str, str]:
    return dict(
        zip(
            EVENT_LOG_HEADER,
            [
                format_timestamp(event.timestamp),
                event.category.value,
                event.item_id,
                event.outcome.value,
            ],
        )
    )
