"""
Module: rentbook_kernel.selectors.account_selector
Responsibility: Read-only chart-of-accounts queries: account definitions and
    the subset that are cash/bank accounts.
Architecture position: Kernel > Selectors.

Failure modes:
    - DataAccessError on any query failure (no retry).
    - Returns an empty list for a business with no accounts.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentbook_kernel.domain.records import AccountInfo, BankAccountInfo
from rentbook_kernel.logging_config import get_logger
from rentbook_kernel.models.account import AccountType, GLAccount, NormalBalance
from rentbook_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.account")


class AccountSelector(BaseSelector[GLAccount]):
    """
    Chart-of-Accounts Reader.

    Guarantees:
        - Results are ordered by account_number.
        - account_type / normal_balance are returned as enums.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def list_accounts(
        self,
        business_id: UUID,
        *,
        is_active: bool | None = True,
        is_header_account: bool | None = False,
    ) -> list[AccountInfo]:
        """
        List account definitions for a business.

        Args:
            business_id: Owning business.
            is_active: Filter on the active flag (None = no filter).
            is_header_account: Filter on the header flag (None = no filter).

        Returns:
            AccountInfo records ordered by account_number.
        """
        query = (
            select(GLAccount)
            .where(GLAccount.business_id == business_id)
            .order_by(GLAccount.account_number)
        )
        if is_active is not None:
            query = query.where(GLAccount.is_active.is_(is_active))
        if is_header_account is not None:
            query = query.where(GLAccount.is_header_account.is_(is_header_account))

        rows = self._execute("list_accounts", business_id, query)
        accounts = [self._to_info(row[0]) for row in rows]

        logger.debug(
            "accounts_loaded",
            extra={"business_id": str(business_id), "account_count": len(accounts)},
        )
        return accounts

    def list_bank_accounts(self, business_id: UUID) -> list[BankAccountInfo]:
        """
        List the active leaf accounts flagged as cash/bank accounts.

        current_balance_cents is the write path's cached figure and is
        informational only.
        """
        query = (
            select(
                GLAccount.id,
                GLAccount.account_number,
                GLAccount.current_balance_cents,
            )
            .where(
                GLAccount.business_id == business_id,
                GLAccount.is_bank_account.is_(True),
                GLAccount.is_active.is_(True),
                GLAccount.is_header_account.is_(False),
            )
            .order_by(GLAccount.account_number)
        )
        rows = self._execute("list_bank_accounts", business_id, query)
        return [
            BankAccountInfo(
                account_id=row.id,
                account_number=row.account_number,
                current_balance_cents=row.current_balance_cents or 0,
            )
            for row in rows
        ]

    @staticmethod
    def _to_info(account: GLAccount) -> AccountInfo:
        return AccountInfo(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.account_name,
            account_type=AccountType(account.account_type),
            normal_balance=NormalBalance(account.normal_balance),
            is_active=account.is_active,
            is_header_account=account.is_header_account,
            is_bank_account=account.is_bank_account,
        )
