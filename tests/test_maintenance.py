from datetime import datetime, timedelta, timezone

from taskapi import maintenance
from taskapi.models.refresh_token import RefreshToken
from taskapi.models.user import User


def test_sweep_tokens_deletes_only_expired(db, token_store):
    user = User(email="sweep@mail.com", password="x")
    db.add(user)
    db.commit()
    now = datetime.now(timezone.utc)
    token_store.save(db, user.id, "expired-1", now - timedelta(days=1))
    token_store.save(db, user.id, "expired-2", now - timedelta(seconds=1))
    token_store.save(db, user.id, "live", now + timedelta(days=1))
    db.commit()

    assert maintenance.sweep_tokens(token_store) == 2

    assert [t.token for t in db.query(RefreshToken).all()] == ["live"]


def test_cli_reports_count(capsys):
    assert maintenance.main(["sweep-tokens"]) == 0

    assert "Deleted 0 expired refresh token(s)" in capsys.readouterr().out
