from __future__ import annotations
from datetime import datetime, UTC
from typing import Optional
from uuid import UUID, uuid4
from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from .enums import AccountType, TransactionKind

class User(SQLModel, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    username: str = Field(index=True, unique=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

class Account(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint("checking_cents >= 0", name="ck_account_checking_non_negative"),
        CheckConstraint("savings_cents >= 0", name="ck_account_savings_non_negative"),
    )

    user_id: UUID = Field(foreign_key="user.id", primary_key=True)
    checking_cents: int = Field(default=0, ge=0)
    savings_cents: int = Field(default=0, ge=0)
    version: int = Field(default=0)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

class TransactionRecord(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transaction_amount_positive"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    kind: TransactionKind
    amount_cents: int = Field(gt=0)
    account_type: AccountType
    from_account: Optional[AccountType] = None
    to_account: Optional[AccountType] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
