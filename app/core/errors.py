class InventoryError(ValueError):
    """Base class for failures surfaced to API callers.

    Each subclass maps onto an HTTP status and an error code used in the
    shared error envelope (see ``app.core.observability``).
    """

    status_code: int = 400
    code: str = "bad_request"


class NotFoundError(InventoryError):
    status_code = 404
    code = "not_found"


class DuplicateResourceError(InventoryError):
    status_code = 409
    code = "conflict"


class InvalidArgumentError(InventoryError):
    status_code = 400
    code = "bad_request"


class InsufficientStockError(InventoryError):
    status_code = 400
    code = "insufficient_stock"

    def __init__(self, *, sku: str, available: int, requested: int):
        self.sku = sku
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for variant {sku}. "
            f"Available: {available}, Requested: {requested}"
        )


class InvalidStockStateError(InventoryError):
    status_code = 400
    code = "invalid_stock_state"


class ConcurrentModificationError(InventoryError):
    status_code = 409
    code = "conflict"
