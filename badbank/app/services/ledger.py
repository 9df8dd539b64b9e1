from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session

from ..core.config import Settings, get_settings
from ..core.errors import (
    AccountNotFoundError,
    BusyError,
    InsufficientFundsError,
    InvalidAccountTypeError,
    SameAccountError,
    StorageError,
)
from ..core.locks import UserLocks, get_user_locks
from ..core.money import parse_amount, to_amount
from ..models import (
    AccountModel,
    AccountType,
    Balances,
    TransactionKind,
    TransactionRecordModel,
    TransactionResponse,
)
from .repository import LedgerRepository


logger = logging.getLogger(__name__)

# Mutates a {AccountType: minor units} mapping in place or raises.
Mutation = Callable[[dict[AccountType, int]], None]

_TRANSIENT_MARKERS = (
    "database is locked",
    "database table is locked",
    "could not serialize",
    "deadlock detected",
)


def _is_transient(exc: OperationalError) -> bool:
    text = str(exc.orig).lower()
    return any(marker in text for marker in _TRANSIENT_MARKERS)


def parse_account_type(raw: Any) -> AccountType:
    try:
        return AccountType(raw)
    except ValueError as exc:
        raise InvalidAccountTypeError("Invalid account type") from exc


class LedgerService:
    """Applies deposit, withdraw and transfer operations to a user's balances.

    Each operation runs as read-validate-write-append under the user's
    in-process lock, and the write is a compare-and-swap on the account
    version so writers in other processes are serialized as well. The balance
    update and its transaction record are committed together.
    """

    def __init__(
        self,
        session: Session,
        repository: Optional[LedgerRepository] = None,
        *,
        settings: Optional[Settings] = None,
        locks: Optional[UserLocks] = None,
    ) -> None:
        self.session = session
        self.repository = repository or LedgerRepository(session)
        self.settings = settings or get_settings()
        self.locks = locks or get_user_locks()

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def _get_account(self, user_id: UUID, *, fresh: bool = False) -> AccountModel:
        account = self.repository.get_account(user_id, fresh=fresh)
        if account is None:
            raise AccountNotFoundError(f"Account for user {user_id} not found")
        return account

    def _to_balances(self, checking_cents: int, savings_cents: int) -> Balances:
        return Balances(checking=to_amount(checking_cents), savings=to_amount(savings_cents))

    def _record_to_response(self, record: TransactionRecordModel) -> TransactionResponse:
        return TransactionResponse(
            id=record.id,
            user_id=record.user_id,
            kind=record.kind,
            amount=to_amount(record.amount_cents),
            account_type=record.account_type,
            from_account=record.from_account,
            to_account=record.to_account,
            timestamp=record.timestamp,
        )

    def _attempt(
        self,
        user_id: UUID,
        kind: TransactionKind,
        mutate: Mutation,
        record: dict[str, Any],
    ) -> Optional[Balances]:
        """One read-validate-write-append pass. Returns None on a lost race."""
        account = self._get_account(user_id, fresh=True)
        expected_version = account.version
        balances = {
            AccountType.CHECKING: account.checking_cents,
            AccountType.SAVINGS: account.savings_cents,
        }

        mutate(balances)
        if min(balances.values()) < 0:
            raise InsufficientFundsError("Insufficient funds")

        swapped = self.repository.swap_balances(
            user_id=user_id,
            expected_version=expected_version,
            checking_cents=balances[AccountType.CHECKING],
            savings_cents=balances[AccountType.SAVINGS],
        )
        if not swapped:
            self.session.rollback()
            return None

        entry = self.repository.add_transaction(user_id=user_id, kind=kind, **record)
        transaction_id = entry.id
        self.session.commit()

        logger.info(
            f"account.{kind.value.lower()}",
            extra={
                "user_id": str(user_id),
                "transaction_id": transaction_id,
                "amount_cents": record["amount_cents"],
                "checking_cents": balances[AccountType.CHECKING],
                "savings_cents": balances[AccountType.SAVINGS],
            },
        )
        return self._to_balances(
            balances[AccountType.CHECKING], balances[AccountType.SAVINGS]
        )

    def _apply(
        self,
        user_id: UUID,
        kind: TransactionKind,
        mutate: Mutation,
        **record: Any,
    ) -> Balances:
        attempts = self.settings.max_retries + 1
        for attempt in range(1, attempts + 1):
            with self.locks.hold(user_id, self.settings.lock_timeout_seconds):
                try:
                    result = self._attempt(user_id, kind, mutate, record)
                except OperationalError as exc:
                    self.session.rollback()
                    if not _is_transient(exc):
                        logger.exception(
                            "ledger.storage_error", extra={"user_id": str(user_id)}
                        )
                        raise StorageError("Storage unavailable") from exc
                    logger.warning(
                        "ledger.store_busy",
                        extra={"user_id": str(user_id), "attempt": attempt},
                    )
                    result = None
                except SQLAlchemyError as exc:
                    self.session.rollback()
                    logger.exception("ledger.storage_error", extra={"user_id": str(user_id)})
                    raise StorageError("Storage unavailable") from exc
                except Exception:
                    self.session.rollback()
                    raise

            if result is not None:
                return result

            logger.info(
                "ledger.conflict",
                extra={"user_id": str(user_id), "kind": kind.value, "attempt": attempt},
            )
            if attempt < attempts:
                time.sleep(self.settings.retry_backoff_seconds * attempt)

        raise BusyError("Account is busy, please retry")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def deposit(self, user_id: UUID, account_type: Any, amount: Any) -> Balances:
        amount_cents = parse_amount(amount)
        account = parse_account_type(account_type)

        def mutate(balances: dict[AccountType, int]) -> None:
            balances[account] += amount_cents

        return self._apply(
            user_id,
            TransactionKind.DEPOSIT,
            mutate,
            amount_cents=amount_cents,
            account_type=account,
        )

    def withdraw(self, user_id: UUID, account_type: Any, amount: Any) -> Balances:
        amount_cents = parse_amount(amount)
        account = parse_account_type(account_type)

        def mutate(balances: dict[AccountType, int]) -> None:
            if balances[account] < amount_cents:
                raise InsufficientFundsError("Insufficient funds")
            balances[account] -= amount_cents

        return self._apply(
            user_id,
            TransactionKind.WITHDRAW,
            mutate,
            amount_cents=amount_cents,
            account_type=account,
        )

    def transfer(
        self,
        user_id: UUID,
        from_account: Any,
        to_account: Any,
        amount: Any,
    ) -> Balances:
        if from_account == to_account:
            raise SameAccountError("Cannot transfer to the same account")
        amount_cents = parse_amount(amount)
        source = parse_account_type(from_account)
        dest = parse_account_type(to_account)

        def mutate(balances: dict[AccountType, int]) -> None:
            if balances[source] < amount_cents:
                raise InsufficientFundsError("Insufficient funds")
            balances[source] -= amount_cents
            balances[dest] += amount_cents

        return self._apply(
            user_id,
            TransactionKind.TRANSFER,
            mutate,
            amount_cents=amount_cents,
            account_type=source,
            from_account=source,
            to_account=dest,
        )

    def get_balances(self, user_id: UUID) -> Balances:
        account = self._get_account(user_id, fresh=True)
        return self._to_balances(account.checking_cents, account.savings_cents)

    def list_transactions(self, user_id: UUID) -> list[TransactionResponse]:
        self._get_account(user_id)
        records = self.repository.list_transactions(user_id)
        return [self._record_to_response(record) for record in records]
