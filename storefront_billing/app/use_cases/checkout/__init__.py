from .price_order import PriceOrder
from .place_order import PlaceOrder
from .mark_order_paid import MarkOrderPaid
from .dtos import (
    OrderItemDTO,
    PriceOrderCommandDTO,
    PricedOrderDTO,
    PaymentRequestDTO,
    OrderConfirmationDTO,
    MarkOrderPaidCommandDTO,
    PaidOrderDTO,
)

__all__ = [
    "PriceOrder",
    "PlaceOrder",
    "MarkOrderPaid",
    "OrderItemDTO",
    "PriceOrderCommandDTO",
    "PricedOrderDTO",
    "PaymentRequestDTO",
    "OrderConfirmationDTO",
    "MarkOrderPaidCommandDTO",
    "PaidOrderDTO",
]
