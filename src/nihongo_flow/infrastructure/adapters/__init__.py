# Storage adapters
from .csv_store import CsvCollectionRepository, CsvEventLog
from .memory import MemoryCollectionRepository, MemoryEventLog

__all__ = [
    "CsvCollectionRepository",
    "CsvEventLog",
    "MemoryCollectionRepository",
    "MemoryEventLog",
]
