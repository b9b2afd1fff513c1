from .get_or_init_account import GetOrInitAccount
from .check_balance import CheckBalance
from .deduct_credits import DeductCredits
from .grant_credits import GrantCredits
from .grant_purchase_bonus import GrantPurchaseBonus
from .get_credit_stats import GetCreditStats
from .list_transactions import ListTransactions
from .reconcile_ledger import ReconcileLedger
from .dtos import (
    AccountCreditDTO,
    CheckBalanceCommandDTO,
    BalanceCheckResponseDTO,
    DeductCommandDTO,
    DeductResponseDTO,
    GrantCommandDTO,
    GrantResponseDTO,
    PurchaseBonusCommandDTO,
    PurchaseBonusResponseDTO,
    TransactionDTO,
    ListTransactionsResponseDTO,
    CreditStatsDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
    MonthlyResetSweepResultDTO,
)

__all__ = [
    "GetOrInitAccount",
    "CheckBalance",
    "DeductCredits",
    "GrantCredits",
    "GrantPurchaseBonus",
    "GetCreditStats",
    "ListTransactions",
    "ReconcileLedger",
    "AccountCreditDTO",
    "CheckBalanceCommandDTO",
    "BalanceCheckResponseDTO",
    "DeductCommandDTO",
    "DeductResponseDTO",
    "GrantCommandDTO",
    "GrantResponseDTO",
    "PurchaseBonusCommandDTO",
    "PurchaseBonusResponseDTO",
    "TransactionDTO",
    "ListTransactionsResponseDTO",
    "CreditStatsDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
    "MonthlyResetSweepResultDTO",
]
