import argparse
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parent.parent


def _alembic_config(url: str) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.cmd_opts = argparse.Namespace(x=[f"url={url}"])
    return cfg


def test_upgrade_and_downgrade_on_url_argument(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = _alembic_config(url)
    engine = create_engine(url)

    command.upgrade(cfg, "head")
    tables = set(inspect(engine).get_table_names())
    assert {"users", "refresh_tokens", "tasks", "task_assignees"} <= tables
    columns = {c["name"] for c in inspect(engine).get_columns("refresh_tokens")}
    assert {"userId", "token", "expiresAt"} <= columns

    command.downgrade(cfg, "base")
    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    engine.dispose()
