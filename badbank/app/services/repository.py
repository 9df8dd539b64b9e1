from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import Session, select

from ..models import (
    AccountModel,
    AccountType,
    TransactionKind,
    TransactionRecordModel,
    UserModel,
)


class LedgerRepository:
    """Thin data access layer around the SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # User operations ----------------------------------------------------
    def add_user(self, *, username: str, email: str, password_hash: str) -> UserModel:
        user = UserModel(username=username, email=email, password_hash=password_hash)
        self.session.add(user)
        self.session.flush()
        self.session.refresh(user)
        return user

    def get_user(self, user_id: UUID) -> Optional[UserModel]:
        return self.session.get(UserModel, user_id)

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.email == email)
        return self.session.exec(stmt).first()

    def get_user_by_username(self, username: str) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.username == username)
        return self.session.exec(stmt).first()

    # Account operations -------------------------------------------------
    def add_account(self, user_id: UUID) -> AccountModel:
        account = AccountModel(user_id=user_id)
        self.session.add(account)
        self.session.flush()
        return account

    def get_account(self, user_id: UUID, *, fresh: bool = False) -> Optional[AccountModel]:
        # fresh=True skips the identity map so the read reflects the store
        return self.session.get(AccountModel, user_id, populate_existing=fresh)

    def swap_balances(
        self,
        *,
        user_id: UUID,
        expected_version: int,
        checking_cents: int,
        savings_cents: int,
    ) -> bool:
        stmt = (
            update(AccountModel)
            .where(AccountModel.user_id == user_id)
            .where(AccountModel.version == expected_version)
            .values(
                checking_cents=checking_cents,
                savings_cents=savings_cents,
                version=expected_version + 1,
                updated_at=datetime.now(UTC),
            )
        )
        result = self.session.connection().execute(stmt)
        return result.rowcount == 1

    # Transaction log ----------------------------------------------------
    def add_transaction(
        self,
        *,
        user_id: UUID,
        kind: TransactionKind,
        amount_cents: int,
        account_type: AccountType,
        from_account: Optional[AccountType] = None,
        to_account: Optional[AccountType] = None,
    ) -> TransactionRecordModel:
        record = TransactionRecordModel(
            user_id=user_id,
            kind=kind,
            amount_cents=amount_cents,
            account_type=account_type,
            from_account=from_account,
            to_account=to_account,
        )
        self.session.add(record)
        self.session.flush()
        return record

    def list_transactions(self, user_id: UUID) -> list[TransactionRecordModel]:
        stmt = (
            select(TransactionRecordModel)
            .where(TransactionRecordModel.user_id == user_id)
            .order_by(
                TransactionRecordModel.timestamp.desc(),
                TransactionRecordModel.id.desc(),
            )
        )
        return list(self.session.exec(stmt))
