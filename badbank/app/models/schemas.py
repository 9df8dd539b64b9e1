from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .enums import AccountType, TransactionKind

# Amounts and account names reach the ledger service unparsed; it owns their validation.
RawAmount = Any


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: UUID
    username: str
    email: str
    created_at: datetime


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    username: str
    user_id: UUID


class DepositRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: RawAmount = None
    account_type: Any = Field(default=None, alias="accountType")


class WithdrawRequest(DepositRequest):
    pass


class TransferRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: RawAmount = None
    from_account: Any = Field(default=None, alias="fromAccount")
    to_account: Any = Field(default=None, alias="toAccount")


class Balances(BaseModel):
    checking: Decimal = Field(..., ge=0)
    savings: Decimal = Field(..., ge=0)


class BalanceResponse(BaseModel):
    balances: Balances


class OperationResponse(BaseModel):
    message: str
    balances: Balances


class TransactionResponse(BaseModel):
    id: int
    user_id: UUID
    kind: TransactionKind
    amount: Decimal = Field(..., gt=0)
    account_type: AccountType
    from_account: Optional[AccountType] = None
    to_account: Optional[AccountType] = None
    timestamp: datetime
