from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from ..core.config import Settings, get_settings
from ..core.errors import AuthenticationError, StorageError, UserAlreadyExistsError
from ..core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from ..models import (
    LoginRequest,
    SignupRequest,
    TokenResponse,
    UserModel,
    UserResponse,
)
from .repository import LedgerRepository


logger = logging.getLogger(__name__)


class AuthService:
    """Signup, login and bearer token verification."""

    def __init__(
        self,
        session: Session,
        repository: Optional[LedgerRepository] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self.session = session
        self.repository = repository or LedgerRepository(session)
        self.settings = settings or get_settings()

    def _user_to_response(self, user: UserModel) -> UserResponse:
        return UserResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            created_at=user.created_at,
        )

    def signup(self, payload: SignupRequest) -> UserResponse:
        if self.repository.get_user_by_email(payload.email) is not None:
            raise UserAlreadyExistsError("User already exists with this email")
        if self.repository.get_user_by_username(payload.username) is not None:
            raise UserAlreadyExistsError("User already exists with this username")

        try:
            user = self.repository.add_user(
                username=payload.username,
                email=payload.email,
                password_hash=hash_password(
                    payload.password,
                    iterations=self.settings.password_hash_iterations,
                ),
            )
            # the account starts at zero in the same commit as the user
            self.repository.add_account(user.id)
            response = self._user_to_response(user)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise UserAlreadyExistsError("User already exists") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("user.signup_failed")
            raise StorageError("Storage unavailable") from exc

        logger.info(
            "user.signup",
            extra={"user_id": str(response.id), "username": response.username},
        )
        return response

    def login(self, payload: LoginRequest) -> TokenResponse:
        user = self.repository.get_user_by_email(payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            logger.info("user.login_failed")
            raise AuthenticationError("Invalid credentials")

        token = create_access_token(user.id, self.settings)
        logger.info("user.login", extra={"user_id": str(user.id)})
        return TokenResponse(token=token, username=user.username, user_id=user.id)

    def authenticate(self, token: str) -> UUID:
        user_id = decode_access_token(token, self.settings)
        if self.repository.get_user(user_id) is None:
            raise AuthenticationError("User not found")
        return user_id
