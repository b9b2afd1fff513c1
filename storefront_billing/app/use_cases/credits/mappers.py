from storefront_billing.domain.account_credit import AccountCredit
from storefront_billing.domain.credit_transaction import CreditTransaction
from .dtos import AccountCreditDTO, TransactionDTO


def to_account_dto(account: AccountCredit) -> AccountCreditDTO:
    return AccountCreditDTO(
        account_id=account.account_id,
        balance=account.balance,
        monthly_allocation=account.monthly_allocation,
        monthly_used=account.monthly_used,
        last_monthly_reset_at=account.last_monthly_reset_at,
        welcome_allocation=account.welcome_allocation,
        welcome_used=account.welcome_used,
        lifetime_granted=account.lifetime_granted,
        lifetime_spent=account.lifetime_spent,
    )


def to_transaction_dto(transaction: CreditTransaction) -> TransactionDTO:
    return TransactionDTO(
        id=transaction.id,
        account_id=transaction.account_id,
        kind=transaction.kind.value if hasattr(transaction.kind, "value") else transaction.kind,
        amount=transaction.amount,
        balance_after=transaction.balance_after,
        reason=transaction.reason or "",
        metadata=transaction.metadata_dict(),
        created_at=transaction.created_at,
    )
