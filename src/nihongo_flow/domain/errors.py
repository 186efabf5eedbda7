"""Exception hierarchy for nihongo-flow."""


class NihongoFlowError(Exception):
    """Base class for all nihongo-flow errors."""


class EmptySelectionError(NihongoFlowError):
    """A review session was requested with no items to present."""

    def __init__(self, message: str = "No items matched the session criteria."):
        super().__init__(message)


class EventAppendError(NihongoFlowError):
    """The event log could not durably record a review outcome."""


class ItemNotFoundError(NihongoFlowError):
    """An item id does not exist in its collection."""

    def __init__(self, category: str, item_id: str):
        self.category = category
        self.item_id = item_id
        super().__init__(f"No {category} item with id {item_id!r}")
