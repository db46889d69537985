import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from taskapi.models.refresh_token import RefreshToken
from taskapi.utils.exceptions import ConflictException

logger = logging.getLogger(__name__)


def is_expired(record: RefreshToken, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    expires_at = record.expiresAt
    # SQLite hands back naive datetimes; everything is stored in UTC
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < now


class TokenStore:
    """
    Persistence for refresh tokens.

    Every method works inside the caller's session and never commits.
    ``save`` flushes so that a colliding token surfaces immediately.
    Deletes evict the matching rows from the session, so a rotated token
    never lingers in the identity map next to its replacement.
    """

    # ─── Save ─────────────────────────────────────────────────────────────────
    def save(self, db: Session, user_id: str, token: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(userId=user_id, token=token, expiresAt=expires_at)
        db.add(record)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ConflictException("Refresh token already exists", field="refreshToken")
        return record

    # ─── Find ─────────────────────────────────────────────────────────────────
    def find(self, db: Session, token: str) -> RefreshToken | None:
        return (
            db.query(RefreshToken)
            .options(joinedload(RefreshToken.user))
            .filter(RefreshToken.token == token)
            .first()
        )

    # ─── Revoke ───────────────────────────────────────────────────────────────
    def revoke(self, db: Session, token: str) -> bool:
        """Delete a token by value. Returns False if it was already gone."""
        deleted = (
            db.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .delete(synchronize_session="fetch")
        )
        return deleted > 0

    def revoke_all(self, db: Session, user_id: str) -> int:
        return (
            db.query(RefreshToken)
            .filter(RefreshToken.userId == user_id)
            .delete(synchronize_session="fetch")
        )

    # ─── Maintenance ──────────────────────────────────────────────────────────
    def sweep_expired(self, db: Session) -> int:
        deleted = (
            db.query(RefreshToken)
            .filter(RefreshToken.expiresAt < datetime.now(timezone.utc))
            .delete(synchronize_session="fetch")
        )
        logger.info(f"Swept {deleted} expired refresh token(s)")
        return deleted
