from datetime import datetime, timedelta, timezone

import pytest

from taskapi.models.refresh_token import RefreshToken
from taskapi.models.user import User
from taskapi.utils.exceptions import ConflictException


@pytest.fixture
def user(db):
    u = User(email="owner@example.com", name="Owner", password="x")
    db.add(u)
    db.commit()
    return u


def _future():
    return datetime.now(timezone.utc) + timedelta(days=1)


def _past():
    return datetime.now(timezone.utc) - timedelta(minutes=1)


def test_save_and_find_includes_owner(db, token_store, user):
    token_store.save(db, user.id, "tok-1", _future())
    db.commit()

    record = token_store.find(db, "tok-1")

    assert record is not None
    assert record.userId == user.id
    assert record.user.email == "owner@example.com"
    assert token_store.find(db, "missing") is None


def test_save_duplicate_token_conflicts(db, token_store, user):
    token_store.save(db, user.id, "tok-1", _future())
    db.commit()

    with pytest.raises(ConflictException):
        token_store.save(db, user.id, "tok-1", _future())


def test_revoke_is_idempotent(db, token_store, user):
    token_store.save(db, user.id, "tok-1", _future())
    db.commit()

    assert token_store.revoke(db, "tok-1") is True
    assert token_store.revoke(db, "tok-1") is False
    db.commit()
    assert token_store.find(db, "tok-1") is None


def test_revoke_all_only_touches_owner(db, token_store, user):
    other = User(email="other@example.com", password="x")
    db.add(other)
    db.commit()
    for i in range(3):
        token_store.save(db, user.id, f"mine-{i}", _future())
    token_store.save(db, other.id, "theirs", _future())
    db.commit()

    assert token_store.revoke_all(db, user.id) == 3
    db.commit()

    assert db.query(RefreshToken).count() == 1
    assert token_store.find(db, "theirs") is not None


def test_sweep_expired_keeps_live_tokens(db, token_store, user):
    token_store.save(db, user.id, "old", _past())
    token_store.save(db, user.id, "live", _future())
    db.commit()

    assert token_store.sweep_expired(db) == 1
    db.commit()

    assert token_store.find(db, "old") is None
    assert token_store.find(db, "live") is not None


def test_revoke_evicts_loaded_record(db, token_store, user):
    record = token_store.save(db, user.id, "tok-1", _future())
    db.commit()

    assert token_store.revoke(db, "tok-1") is True

    assert record not in db
