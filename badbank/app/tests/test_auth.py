import uuid
from datetime import timedelta

import pytest

from ..core.errors import AuthenticationError, UserAlreadyExistsError
from ..core.security import create_access_token, hash_password, verify_password
from ..models import AccountModel, LoginRequest, SignupRequest, UserModel
from ..services import AuthService


@pytest.fixture
def auth(session, settings) -> AuthService:
    return AuthService(session, settings=settings)


def test_signup_creates_user_with_empty_account(auth, session) -> None:
    user = auth.signup(
        SignupRequest(username="carol", email="carol@example.com", password="pw")
    )

    account = session.get(AccountModel, user.id)
    assert account is not None
    assert (account.checking_cents, account.savings_cents) == (0, 0)


def test_signup_rejects_duplicate_email_and_username(auth, user_id) -> None:
    with pytest.raises(UserAlreadyExistsError, match="email"):
        auth.signup(
            SignupRequest(username="other", email="alice@example.com", password="pw")
        )
    with pytest.raises(UserAlreadyExistsError, match="username"):
        auth.signup(
            SignupRequest(username="alice", email="other@example.com", password="pw")
        )


def test_password_is_stored_hashed(session, user_id) -> None:
    user = session.get(UserModel, user_id)
    assert user.password_hash != "s3cret"
    assert verify_password("s3cret", user.password_hash)
    assert not verify_password("wrong", user.password_hash)


def test_hash_password_uses_a_fresh_salt() -> None:
    assert hash_password("pw", iterations=1000) != hash_password("pw", iterations=1000)
    assert not verify_password("pw", "not-a-hash")


def test_login_issues_token_for_the_user(auth, user_id) -> None:
    token = auth.login(LoginRequest(email="alice@example.com", password="s3cret"))

    assert token.user_id == user_id
    assert token.username == "alice"
    assert auth.authenticate(token.token) == user_id


@pytest.mark.parametrize(
    "email, password",
    [("alice@example.com", "wrong"), ("nobody@example.com", "s3cret")],
)
def test_login_rejects_bad_credentials(auth, user_id, email, password) -> None:
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        auth.login(LoginRequest(email=email, password=password))


def test_expired_token_is_rejected(auth, settings, user_id) -> None:
    token = create_access_token(user_id, settings, expires_delta=timedelta(seconds=-5))

    with pytest.raises(AuthenticationError, match="expired"):
        auth.authenticate(token)


def test_token_signed_with_another_secret_is_rejected(auth, settings, user_id) -> None:
    forged = settings.model_copy(update={"jwt_secret": "not-the-secret"})
    token = create_access_token(user_id, forged)

    with pytest.raises(AuthenticationError, match="Invalid token"):
        auth.authenticate(token)


def test_token_for_unknown_user_is_rejected(auth, settings) -> None:
    token = create_access_token(uuid.uuid4(), settings)

    with pytest.raises(AuthenticationError, match="User not found"):
        auth.authenticate(token)
