from uuid import UUID

from fastapi import APIRouter, Depends, status

from ..core.dependencies import get_auth_service, get_current_user_id, get_ledger_service
from ..models import (
    BalanceResponse,
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
from ..services import AuthService, LedgerService


router = APIRouter(prefix="/api/users", tags=["users"])

@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    auth: AuthService = Depends(get_auth_service),
) -> UserResponse:
    return auth.signup(payload)

@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    return auth.login(payload)

@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    user_id: UUID = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> BalanceResponse:
    return BalanceResponse(balances=service.get_balances(user_id))

@router.post("/deposit", response_model=OperationResponse)
def deposit(
    payload: DepositRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> OperationResponse:
    balances = service.deposit(user_id, payload.account_type, payload.amount)
    return OperationResponse(message="Deposit successful", balances=balances)

@router.post("/withdraw", response_model=OperationResponse)
def withdraw(
    payload: WithdrawRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> OperationResponse:
    balances = service.withdraw(user_id, payload.account_type, payload.amount)
    return OperationResponse(message="Withdrawal successful", balances=balances)

@router.post("/transfer", response_model=OperationResponse)
def transfer(
    payload: TransferRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> OperationResponse:
    balances = service.transfer(
        user_id, payload.from_account, payload.to_account, payload.amount
    )
    return OperationResponse(message="Transfer successful", balances=balances)

@router.get("/transactions", response_model=list[TransactionResponse])
def list_transactions(
    user_id: UUID = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service),
) -> list[TransactionResponse]:
    return service.list_transactions(user_id)

__all__ = ["router"]
