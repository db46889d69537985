"""Maintenance commands.

Usage:
    python -m taskapi.maintenance sweep-tokens
    python -m taskapi.maintenance init-db
"""
import argparse
import logging
import sys

from taskapi.database import SessionLocal, init_db
from taskapi.services.token_store import TokenStore

logger = logging.getLogger(__name__)


def sweep_tokens(store: TokenStore | None = None) -> int:
    """Delete every expired refresh token and return how many went."""
    store = store or TokenStore()
    db = SessionLocal()
    try:
        deleted = store.sweep_expired(db)
        db.commit()
        return deleted
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="taskapi.maintenance")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("sweep-tokens", help="Delete expired refresh tokens")
    sub.add_parser("init-db", help="Create tables without Alembic (local development)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "sweep-tokens":
        deleted = sweep_tokens()
        print(f"Deleted {deleted} expired refresh token(s)")
    elif args.command == "init-db":
        init_db()
        print("Tables created")
    return 0


if __name__ == "__main__":
    sys.exit(main())
