"""Failure taxonomy shared by the services and the HTTP layer."""


class BankError(Exception):
    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailure(BankError):
    """Caller-supplied data is malformed. Never retried automatically."""


class InvalidAmountError(ValidationFailure):
    code = "invalid_amount"


class InvalidAccountTypeError(ValidationFailure):
    code = "invalid_account_type"


class SameAccountError(ValidationFailure):
    code = "same_account"


class StateFailure(BankError):
    """The request conflicts with the current persisted state."""


class InsufficientFundsError(StateFailure):
    code = "insufficient_funds"


class AccountNotFoundError(StateFailure):
    code = "account_not_found"


class UserAlreadyExistsError(StateFailure):
    code = "user_exists"


class BusyError(BankError):
    """Raised when the per-user lock or the optimistic retries run out."""

    code = "busy"


class StorageError(BankError):
    """Raised when the durable store fails. The message stays generic."""

    code = "storage_unavailable"


class AuthenticationError(BankError):
    code = "not_authenticated"
