"""CheckBalance Use Case

Answers whether an account can afford one generation, without spending.
"""

from libs.result import Result, Return, Error
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.domain.errors import LedgerInvariantViolation
from .dtos import BalanceCheckResponseDTO, CheckBalanceCommandDTO
from .get_or_init_account import GetOrInitAccount


class CheckBalance:
    """
    Use case: Check whether the balance covers a generation

    The cost comes from the command when given, otherwise from the price
    table entry of the requested action (default cost for unknown actions).
    """

    def __init__(self, accounts: GetOrInitAccount, settings: BillingSettings):
        self.accounts = accounts
        self.settings = settings

    async def execute(self, command: CheckBalanceCommandDTO) -> Result[BalanceCheckResponseDTO]:
        cost = command.cost if command.cost is not None else self.settings.cost_for(command.action)

        try:
            account = await self.accounts.load(command.account_id)
        except LedgerInvariantViolation:
            raise
        except Exception as e:
            return Return.err(
                Error(
                    code="CHECK_BALANCE_FAILED",
                    message="Failed to check credit balance",
                    reason=str(e),
                )
            )

        return Return.ok(
            BalanceCheckResponseDTO(
                sufficient=account.balance >= cost,
                balance=account.balance,
                cost=cost,
            )
        )
