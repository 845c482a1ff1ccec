"""
Startup check: wait until the database answers, then make sure the `site` and
`site_file` tables exist (creating them on a fresh database).

    python -m pagehost.backend_pre_start
"""
import logging

from sqlalchemy import Engine, inspect
from sqlalchemy.exc import SQLAlchemyError
from tenacity import after_log, before_log, retry, stop_after_attempt, wait_fixed

from pagehost.core.db import engine, init_db
from pagehost.models import Site, StoredFile

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REQUIRED_TABLES = (Site.__tablename__, StoredFile.__tablename__)

max_tries = 60 * 5  # 5 分钟
wait_seconds = 1


def missing_tables(db_engine: Engine) -> list[str]:
    inspector = inspect(db_engine)
    return [table for table in REQUIRED_TABLES if not inspector.has_table(table)]


@retry(
    stop=stop_after_attempt(max_tries),
    wait=wait_fixed(wait_seconds),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
)
def wait_for_database(db_engine: Engine) -> list[str]:
    """Retry until the schema can be inspected; returns the tables still missing."""
    try:
        return missing_tables(db_engine)
    except SQLAlchemyError as e:
        logger.error(f"Database not ready: {e}")
        raise


def prepare(db_engine: Engine) -> None:
    missing = wait_for_database(db_engine)
    if missing:
        logger.info(f"Creating missing tables: {', '.join(missing)}")
        init_db(db_engine)
    else:
        logger.info("Schema is up to date")


def main() -> None:
    logger.info("Waiting for the database")
    prepare(engine)
    logger.info("Database is up")


if __name__ == "__main__":
    main()
