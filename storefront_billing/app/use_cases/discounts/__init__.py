from .validate_discount import ValidateDiscount
from .redeem_discount import RedeemDiscount
from .create_discount_code import CreateDiscountCode
from .rules import DiscountErrorCode, DISCOUNT_ERROR_CODES, compute_discount
from .dtos import (
    ValidateDiscountCommandDTO,
    PricedDiscountDTO,
    RedeemDiscountCommandDTO,
    RedemptionDTO,
    CreateDiscountCodeCommandDTO,
    DiscountCodeDTO,
)

__all__ = [
    "ValidateDiscount",
    "RedeemDiscount",
    "CreateDiscountCode",
    "DiscountErrorCode",
    "DISCOUNT_ERROR_CODES",
    "compute_discount",
    "ValidateDiscountCommandDTO",
    "PricedDiscountDTO",
    "RedeemDiscountCommandDTO",
    "RedemptionDTO",
    "CreateDiscountCodeCommandDTO",
    "DiscountCodeDTO",
]
