from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from ..services import AuthService, LedgerRepository, LedgerService
from .config import Settings, get_settings
from .db import get_session
from .errors import AuthenticationError
from .locks import get_user_locks

bearer_scheme = HTTPBearer(auto_error=False)

def get_ledger_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> LedgerService:
    repository = LedgerRepository(session)
    return LedgerService(session, repository, settings=settings, locks=get_user_locks())

def get_auth_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(session, LedgerRepository(session), settings=settings)

def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> UUID:
    if credentials is None:
        raise AuthenticationError("Access denied. No token provided.")
    return auth.authenticate(credentials.credentials)
