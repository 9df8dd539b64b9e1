from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.errors import (
    AccountNotFoundError,
    AuthenticationError,
    BankError,
    BusyError,
    InsufficientFundsError,
    StorageError,
    UserAlreadyExistsError,
    ValidationFailure,
)


def _error_response(status_code: int, exc: BankError, **kwargs) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
        **kwargs,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(
        request: Request, exc: ValidationFailure
    ) -> JSONResponse:
        return _error_response(400, exc)

    @app.exception_handler(AccountNotFoundError)
    async def account_not_found_handler(
        request: Request, exc: AccountNotFoundError
    ) -> JSONResponse:
        return _error_response(404, exc)

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return _error_response(409, exc)

    @app.exception_handler(UserAlreadyExistsError)
    async def user_exists_handler(
        request: Request, exc: UserAlreadyExistsError
    ) -> JSONResponse:
        return _error_response(409, exc)

    @app.exception_handler(BusyError)
    async def busy_handler(request: Request, exc: BusyError) -> JSONResponse:
        return _error_response(503, exc, headers={"Retry-After": "1"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        return _error_response(503, exc)

    @app.exception_handler(AuthenticationError)
    async def authentication_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        return _error_response(401, exc, headers={"WWW-Authenticate": "Bearer"})
