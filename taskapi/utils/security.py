import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext

from taskapi.config import Settings
from taskapi.utils.exceptions import InvalidTokenException

ACCESS = "access"
REFRESH = "refresh"


class CredentialService:
    """
    Password hashing and JWT issuing/verification.

    Access and refresh tokens are signed with separate secrets and carry a
    ``type`` claim, so one kind can never be accepted in place of the other.
    Built once at startup from ``Settings`` and shared by reference.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.BCRYPT_ROUNDS,
        )

    # ─── Password Hashing ─────────────────────────────────────────────────────
    def hash_password(self, plain_password: str) -> str:
        """Hash a plain-text password using bcrypt."""
        return self.pwd_context.hash(plain_password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a plain-text password against a bcrypt hash."""
        return self.pwd_context.verify(plain_password, hashed_password)

    # ─── JWT ──────────────────────────────────────────────────────────────────
    def _secret(self, kind: str) -> str:
        if kind == ACCESS:
            return self.settings.JWT_SECRET
        if kind == REFRESH:
            return self.settings.REFRESH_TOKEN_SECRET
        raise ValueError(f"Unknown token kind: {kind}")

    def _encode(self, user_id: str, email: str, kind: str, expire: datetime) -> str:
        payload = {
            "userId": str(user_id),
            "email":  email,
            "type":   kind,
            "jti":    uuid.uuid4().hex,
            "iat":    datetime.now(timezone.utc),
            "exp":    expire,
        }
        return jwt.encode(payload, self._secret(kind), algorithm=self.settings.ALGORITHM)

    def issue_access_token(
        self, user_id: str, email: str, expires_delta: timedelta | None = None,
    ) -> str:
        """
        Create a short-lived JWT access token.
        Payload: userId, email, type, jti, iat, exp
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        expire = datetime.now(timezone.utc) + expires_delta
        return self._encode(user_id, email, ACCESS, expire)

    def issue_refresh_token(
        self, user_id: str, email: str, expires_delta: timedelta | None = None,
    ) -> tuple[str, datetime]:
        """
        Create a long-lived JWT refresh token.
        Returns (token_string, expiry_datetime).
        """
        if expires_delta is None:
            expires_delta = timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS)
        expire = datetime.now(timezone.utc) + expires_delta
        return self._encode(user_id, email, REFRESH, expire), expire

    def verify_token(self, token: str, kind: str) -> dict:
        """
        Decode and validate a JWT of the given kind ("access" or "refresh").
        Raises InvalidTokenException on a bad signature, expiry or wrong type.
        """
        try:
            payload = jwt.decode(token, self._secret(kind), algorithms=[self.settings.ALGORITHM])
        except ExpiredSignatureError:
            raise InvalidTokenException("jwt expired")
        except JWTError:
            raise InvalidTokenException("Invalid token")

        if payload.get("type") != kind or not payload.get("userId"):
            raise InvalidTokenException("Invalid token")
        return payload
