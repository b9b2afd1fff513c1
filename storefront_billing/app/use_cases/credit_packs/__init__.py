from .list_credit_packs import ListCreditPacks, to_credit_pack_dto
from .create_credit_pack import CreateCreditPack
from .purchase_credit_pack import PurchaseCreditPack
from .dtos import (
    CreditPackDTO,
    CreditPackListDTO,
    CreateCreditPackCommandDTO,
    PurchaseCreditPackCommandDTO,
)

__all__ = [
    "ListCreditPacks",
    "to_credit_pack_dto",
    "CreateCreditPack",
    "PurchaseCreditPack",
    "CreditPackDTO",
    "CreditPackListDTO",
    "CreateCreditPackCommandDTO",
    "PurchaseCreditPackCommandDTO",
]
