"""
Ports (interfaces) for collections and the review log.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Category, ReviewEvent, StudyItem


class CollectionProvider(ABC):
    """
    Port for reading and editing the study collections.

    Implementations:
        - CsvCollectionRepository: one CSV file per collection in a data directory.
        - MemoryCollectionRepository: in-process lists, seeded with the sample set.
    """

    @abstractmethod
    async def list_items(self, category: Category) -> list[StudyItem]:
        """
        Return every item of a collection in storage order.
        """
        pass

    @abstractmethod
    async def list_distinct_sources(self, category: Category) -> set[str]:
        """
        Return the set of non-empty source tags used in a collection.
        """
        pass

    @abstractmethod
    async def add_item(self, category: Category, item: StudyItem) -> StudyItem:
        """
        Append an item, assigning the next numeric id. Any id on ``item`` is ignored.

        Returns:
            The stored item with its assigned id.
        """
        pass

    @abstractmethod
    async def update_item(self, category: Category, item: StudyItem) -> None:
        """
        Replace the item with the same id.

        Raises:
            ItemNotFoundError: if no item has that id.
        """
        pass

    @abstractmethod
    async def delete_items(self, category: Category, ids: list[str]) -> int:
        """
        Remove items by id. Returns the number removed.
        """
        pass


class EventLogProvider(ABC):
    """
    Port for the append-only review log.

    Implementations:
        - CsvEventLog: ``stats.csv`` with columns date,category,itemId,result.
        - MemoryEventLog: in-process list.
    """

    @abstractmethod
    async def append_event(self, event: ReviewEvent) -> None:
        """
        Durably record one review outcome.

        Raises:
            EventAppendError: if the event could not be written.
        """
        pass

    @abstractmethod
    async def list_events(
        self,
        category: Category | None = None,
        item_id: str | None = None,
    ) -> list[ReviewEvent]:
        """
        Fetch review events, optionally restricted to a category and item.

        Returns:
            ReviewEvent objects sorted by timestamp ascending.
        """
        pass

    @abstractmethod
    async def reset_item(self, category: Category, item_id: str) -> int:
        """
        Drop the whole history of one item. Returns the number of events removed.
        """
        pass
