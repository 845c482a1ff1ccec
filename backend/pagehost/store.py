"""
Persistent site storage.

`SiteStore` owns the hostname -> site and (site, path) -> file mappings. All
writes go through `SiteStore.unit_of_work()`, which commits every upsert made
inside it at once or none of them.
"""
import hashlib
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import Engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from pagehost.core.db import SQLITE_BEGIN
from pagehost.core.errors import StoreFailure
from pagehost.models import Site, StoredFile

logger = logging.getLogger(__name__)

# INSERT .. ON CONFLICT 构造，按方言选择
UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SiteWriter:
    """Upserts bound to one open unit of work."""

    def __init__(self, session: Session, insert):
        self.session = session
        self._insert = insert

    def upsert_site(self, hostname: str, now: datetime) -> uuid.UUID:
        """Insert the site or bump its update time; returns the site id."""
        stmt = self._insert(Site).values(id=uuid.uuid4(), hostname=hostname, update_time=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=["hostname"],
            set_={"update_time": stmt.excluded.update_time},
        ).returning(Site.id)
        return self.session.connection().execute(stmt).scalar_one()

    def upsert_file(self, site_id: uuid.UUID, path: str, blob: bytes, now: datetime) -> None:
        content_hash = hashlib.sha256(blob).hexdigest()
        stmt = self._insert(StoredFile).values(
            id=uuid.uuid4(),
            site_id=site_id,
            path=path,
            blob=blob,
            content_hash=content_hash,
            size=len(blob),
            update_time=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["site_id", "path"],
            set_={
                "blob": stmt.excluded.blob,
                "content_hash": stmt.excluded.content_hash,
                "size": stmt.excluded.size,
                "update_time": stmt.excluded.update_time,
            },
        )
        self.session.connection().execute(stmt)


class SiteStore:
    def __init__(self, engine: Engine):
        dialect = engine.dialect.name
        if dialect not in UPSERT_DIALECTS:
            raise ValueError(f"unsupported database dialect: {dialect}")
        self.engine = engine
        self._insert = UPSERT_DIALECTS[dialect]

    @contextmanager
    def unit_of_work(self) -> Iterator[SiteWriter]:
        """
        Open one transaction for a whole upload.

        Commits when the block exits normally. On any exception the
        transaction is rolled back; database errors are re-raised as
        `StoreFailure`, everything else propagates unchanged.
        """
        # SQLite 写事务直接获取写锁，避免两个上传互相死锁
        bind = self.engine.execution_options(**{SQLITE_BEGIN: "BEGIN IMMEDIATE"})
        with Session(bind) as session:
            try:
                yield SiteWriter(session, self._insert)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Unit of work rolled back: {e}")
                raise StoreFailure(f"could not store site: {e}") from e
            except BaseException:
                session.rollback()
                raise

    def get_site(self, hostname: str) -> Site | None:
        try:
            with Session(self.engine) as session:
                return session.exec(select(Site).where(Site.hostname == hostname)).first()
        except SQLAlchemyError as e:
            raise StoreFailure(f"could not look up site: {e}") from e

    def get_file(self, site_id: uuid.UUID, path: str) -> StoredFile | None:
        try:
            with Session(self.engine) as session:
                statement = select(StoredFile).where(
                    StoredFile.site_id == site_id, StoredFile.path == path
                )
                return session.exec(statement).first()
        except SQLAlchemyError as e:
            raise StoreFailure(f"could not look up file: {e}") from e

