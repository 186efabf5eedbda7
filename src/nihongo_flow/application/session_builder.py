"""
Session builder for review sessions.

Builds a study queue by:
1. Pooling the items of every requested collection, tagged with their category
2. Filtering by JLPT level, chapter and source tag
3. Shuffling and truncating to the session limit
"""

import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from nihongo_flow.domain.models import Category, SessionConfig, SessionItem, StudyItem
from nihongo_flow.domain.ports import CollectionProvider

logger = logging.getLogger(__name__)


@dataclass
class SessionBuildResult:
    """Result of session building."""

    items: list[SessionItem]  # Shuffled and truncated queue
    matched: int  # Pool size after filtering, before truncation

    @property
    def is_empty(self) -> bool:
        """True when nothing matched; the session must not be started."""
        return not self.items


def build_session(
    collections: Mapping[Category, Sequence[StudyItem]],
    config: SessionConfig,
    rng: random.Random | None = None,
) -> SessionBuildResult:
    """
    Assemble a shuffled review queue from a snapshot of the collections.

    Args:
        collections: Items per category, as returned by the collection provider.
        config: Categories, filters and limit for the session.
        rng: Random source for the shuffle. A fresh one is used when omitted.

    Returns:
        SessionBuildResult; check ``is_empty`` before starting a session.
    """
    pool = [
        SessionItem(category=category, item=item)
        for category in Category
        if category in config.categories
        for item in collections.get(category, ())
        if _matches(item, config)
    ]

    (rng or random.Random()).shuffle(pool)
    matched = len(pool)
    if config.limit:
        pool = pool[: config.limit]

    if not pool:
        logger.info("No items matched the session criteria")
    else:
        logger.debug(f"Built session with {len(pool)} of {matched} matching items")

    return SessionBuildResult(items=pool, matched=matched)


def _matches(item: StudyItem, config: SessionConfig) -> bool:
    """
    Conjunctive filter check. Empty filter sets are not checked.
    """
    if config.levels and item.jlpt not in config.levels:
        return False

    if config.chapters and (not item.chapter or item.chapter not in config.chapters):
        return False

    # An item without a source tag never matches a source filter
    if config.sources and (not item.source or item.source not in config.sources):
        return False

    return True


async def load_collections(
    provider: CollectionProvider, categories: frozenset[Category] | None = None
) -> dict[Category, list[StudyItem]]:
    """
    Snapshot the requested collections from a provider.
    """
    wanted = categories if categories is not None else frozenset(Category)
    return {
        category: await provider.list_items(category)
        for category in Category
        if category in wanted
    }
