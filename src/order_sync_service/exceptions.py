"""Exception hierarchy for the order sync service."""


class OrderSyncError(Exception):
    """Base class for all order sync errors."""


class ConfigurationError(OrderSyncError):
    """Raised when a required setting is missing or invalid."""


class StoreError(OrderSyncError):
    """Raised when a document store operation fails."""


class DeadlineExceededError(StoreError):
    """Raised when a store operation does not finish within its deadline.

    This is the only failure kind the retry policy treats as transient.
    """


class UpstreamError(OrderSyncError):
    """Raised when the upstream commerce API request fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedOrderError(OrderSyncError):
    """Raised when an upstream order node cannot be turned into an order."""

    def __init__(self, message: str, order_id: str | None = None):
        super().__init__(message)
        self.order_id = order_id
