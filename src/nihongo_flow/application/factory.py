"""
Provider Factory
Centralizes the logic for selecting the storage adapters.
"""

import logging

from nihongo_flow.application.config import AppConfig
from nihongo_flow.domain.ports import CollectionProvider, EventLogProvider
from nihongo_flow.infrastructure.adapters.csv_store import CsvCollectionRepository, CsvEventLog
from nihongo_flow.infrastructure.adapters.memory import MemoryCollectionRepository, MemoryEventLog
from nihongo_flow.infrastructure.samples import SAMPLES

logger = logging.getLogger(__name__)


def get_collection_provider(config: AppConfig) -> CollectionProvider:
    """
    Returns the CollectionProvider implementation selected by ``config.storage``.
    """
    if config.storage == "memory":
        return MemoryCollectionRepository(SAMPLES if config.seed_samples else None)

    logger.debug(f"Using CSV collections in {config.data_dir}")
    return CsvCollectionRepository(config.data_dir, seed_samples=config.seed_samples)


def get_event_log(config: AppConfig) -> EventLogProvider:
    """
    Returns the EventLogProvider implementation selected by ``config.storage``.
    """
    if config.storage == "memory":
        return MemoryEventLog()

    return CsvEventLog(config.data_dir)
