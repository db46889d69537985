import logging

from sqlalchemy.orm import Session

from taskapi.models.user import User
from taskapi.schemas.auth import LoginRequest, RegisterRequest
from taskapi.services.token_store import TokenStore, is_expired
from taskapi.utils.security import CredentialService, REFRESH
from taskapi.utils.exceptions import (
    BadRequestException, ConflictException, InvalidTokenException,
    NotFoundException, TokenExpiredException, UnauthorizedException,
)

logger = logging.getLogger(__name__)


def _auth_payload(user: User, access_token: str, refresh_token: str) -> dict:
    return {
        "user": {
            "id":    user.id,
            "email": user.email,
            "name":  user.name,
        },
        "accessToken":  access_token,
        "refreshToken": refresh_token,
    }


class AuthService:
    """
    Session flow: register, login, refresh (with rotation), logout, logout-all.

    Built once at startup around a shared CredentialService and TokenStore.
    """

    def __init__(self, credentials: CredentialService, tokens: TokenStore):
        self.credentials = credentials
        self.tokens = tokens

    # ─── Token Pair ───────────────────────────────────────────────────────────
    def _issue_tokens(self, db: Session, user: User) -> tuple[str, str]:
        access_token = self.credentials.issue_access_token(user.id, user.email)
        refresh_token, expires_at = self.credentials.issue_refresh_token(user.id, user.email)
        self.tokens.save(db, user.id, refresh_token, expires_at)
        return access_token, refresh_token

    # ─── Register ─────────────────────────────────────────────────────────────
    def register(self, db: Session, data: RegisterRequest) -> dict:
        email = str(data.email)
        if db.query(User).filter(User.email == email).first():
            raise ConflictException("User with this email already exists", field="email")

        user = User(
            email=email,
            name=data.name,
            password=self.credentials.hash_password(data.password),
        )
        db.add(user)
        db.flush()  # Get user.id without committing

        access_token, refresh_token = self._issue_tokens(db, user)
        db.commit()

        logger.info(f"Registered user {user.id}")
        return _auth_payload(user, access_token, refresh_token)

    # ─── Login ────────────────────────────────────────────────────────────────
    def login(self, db: Session, data: LoginRequest) -> dict:
        user = db.query(User).filter(User.email == str(data.email)).first()

        if not user or not self.credentials.verify_password(data.password, user.password):
            logger.warning("Failed login attempt")
            raise UnauthorizedException("Invalid email or password")

        access_token, refresh_token = self._issue_tokens(db, user)
        db.commit()

        logger.info(f"User {user.id} logged in")
        return _auth_payload(user, access_token, refresh_token)

    # ─── Refresh Token ────────────────────────────────────────────────────────
    def refresh(self, db: Session, refresh_token: str) -> dict:
        if not refresh_token:
            raise BadRequestException("Refresh token is required", field="refreshToken")

        stored = self.tokens.find(db, refresh_token)
        if not stored:
            raise InvalidTokenException("Invalid refresh token")

        if is_expired(stored):
            self.tokens.revoke(db, refresh_token)
            db.commit()
            raise TokenExpiredException("Refresh token expired")

        payload = self.credentials.verify_token(refresh_token, REFRESH)
        if payload["userId"] != stored.userId:
            raise InvalidTokenException("Invalid refresh token")

        user = db.query(User).filter(User.id == payload["userId"]).first()
        if not user:
            raise NotFoundException("User")

        # Rotate: the presented token dies with this request
        if not self.tokens.revoke(db, refresh_token):
            raise InvalidTokenException("Invalid refresh token")
        access_token, new_refresh_token = self._issue_tokens(db, user)
        db.commit()

        logger.info(f"Rotated refresh token for user {user.id}")
        return _auth_payload(user, access_token, new_refresh_token)

    # ─── Logout ───────────────────────────────────────────────────────────────
    def logout(self, db: Session, refresh_token: str) -> None:
        """Revoke one refresh token. An unknown token counts as already logged out."""
        if not refresh_token:
            raise BadRequestException("Refresh token is required", field="refreshToken")

        if self.tokens.revoke(db, refresh_token):
            db.commit()

    # ─── Logout All ───────────────────────────────────────────────────────────
    def logout_all(self, db: Session, user_id: str) -> int:
        revoked = self.tokens.revoke_all(db, user_id)
        db.commit()
        logger.info(f"Revoked {revoked} refresh token(s) for user {user_id}")
        return revoked
