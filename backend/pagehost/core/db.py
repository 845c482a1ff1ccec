import logging

from sqlalchemy import Engine, event
from sqlmodel import SQLModel, create_engine

from pagehost.core.config import settings

logger = logging.getLogger(__name__)

# 执行选项：SQLite 事务开始语句（写事务使用 BEGIN IMMEDIATE）
SQLITE_BEGIN = "sqlite_begin"


def make_engine(database_uri: str, busy_timeout: float | None = None) -> Engine:
    """Create an engine for `database_uri`.

    SQLite connections get foreign keys, WAL journaling and explicit
    transaction control, so a unit of work can take the write lock up front.
    """
    if not database_uri.startswith("sqlite"):
        return create_engine(database_uri, pool_pre_ping=True)

    if busy_timeout is None:
        busy_timeout = settings.SQLITE_BUSY_TIMEOUT

    engine = create_engine(
        database_uri,
        connect_args={"check_same_thread": False, "timeout": busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ARG001
        # 关闭 pysqlite 的隐式事务，由 begin 事件发出 BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql(conn.get_execution_options().get(SQLITE_BEGIN, "BEGIN"))

    return engine


engine = make_engine(settings.SQLALCHEMY_DATABASE_URI)


# 确保在初始化数据库之前导入所有 SQLModel 模型 (pagehost.models)
# 否则，SQLModel 可能无法正确初始化关系
def init_db(db_engine: Engine) -> None:
    from pagehost import models  # noqa: F401

    # 没有迁移工具，直接按模型建表（已存在的表不受影响）
    SQLModel.metadata.create_all(db_engine)
    logger.info("Database tables ready")
