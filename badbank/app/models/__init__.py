from .db import Account as AccountModel
from .db import TransactionRecord as TransactionRecordModel
from .db import User as UserModel
from .enums import AccountType, TransactionKind
from .schemas import (
    BalanceResponse,
    Balances,
    DepositRequest,
    LoginRequest,
    OperationResponse,
    SignupRequest,
    TokenResponse,
    TransactionResponse,
    TransferRequest,
    UserResponse,
    WithdrawRequest,
)

__all__ = [
    "AccountType",
    "TransactionKind",
    "BalanceResponse",
    "Balances",
    "DepositRequest",
    "LoginRequest",
    "OperationResponse",
    "SignupRequest",
    "TokenResponse",
    "TransactionResponse",
    "TransferRequest",
    "UserResponse",
    "WithdrawRequest",
    "AccountModel",
    "TransactionRecordModel",
    "UserModel",
]
