from .orders import (
    FORWARD_FLOW,
    CannotDeliverWithBalanceError,
    OrderAlreadyDeliveredError,
    OrderDeletedError,
    OrderDraft,
    OrderItemDraft,
    OrderService,
    has_cent_precision,
)

__all__ = [
    "FORWARD_FLOW",
    "CannotDeliverWithBalanceError",
    "OrderAlreadyDeliveredError",
    "OrderDeletedError",
    "OrderDraft",
    "OrderItemDraft",
    "OrderService",
    "has_cent_precision",
]
