from sqlalchemy import Engine, inspect
from sqlalchemy.exc import OperationalError
from tenacity import stop_after_attempt, wait_fixed

from pagehost import backend_pre_start
from pagehost.backend_pre_start import missing_tables, prepare, wait_for_database
from pagehost.core.db import make_engine


def test_missing_tables_on_fresh_database(tmp_path):
    fresh = make_engine(f"sqlite:///{tmp_path / 'fresh.db'}")
    try:
        assert missing_tables(fresh) == ["site", "site_file"]
    finally:
        fresh.dispose()


def test_no_missing_tables_after_init(engine: Engine):
    assert missing_tables(engine) == []


def test_prepare_creates_schema(tmp_path):
    fresh = make_engine(f"sqlite:///{tmp_path / 'fresh.db'}")
    try:
        prepare(fresh)

        tables = inspect(fresh).get_table_names()
        assert {"site", "site_file"} <= set(tables)
        assert missing_tables(fresh) == []
    finally:
        fresh.dispose()


def test_prepare_leaves_existing_schema(engine: Engine, monkeypatch):
    calls = []
    monkeypatch.setattr(backend_pre_start, "init_db", lambda db_engine: calls.append(db_engine))

    prepare(engine)

    assert calls == []


def test_wait_for_database_retries_until_ready(engine: Engine, monkeypatch):
    attempts = []

    def flaky(db_engine):
        attempts.append(db_engine)
        if len(attempts) < 3:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        return []

    monkeypatch.setattr(backend_pre_start, "missing_tables", flaky)
    quick = wait_for_database.retry_with(stop=stop_after_attempt(5), wait=wait_fixed(0))

    assert quick(engine) == []
    assert len(attempts) == 3
