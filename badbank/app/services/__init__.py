from .auth import AuthService
from .ledger import LedgerService
from .repository import LedgerRepository

__all__ = ["AuthService", "LedgerRepository", "LedgerService"]
