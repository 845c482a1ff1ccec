from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine

from pagehost.api.deps import get_store
from pagehost.core.db import init_db, make_engine
from pagehost.main import app
from pagehost.services import IngestionService, ResolutionService
from pagehost.store import SiteStore


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    # 每个测试使用独立的 SQLite 文件
    db_engine = make_engine(f"sqlite:///{tmp_path / 'pagehost.db'}", busy_timeout=30)
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def store(engine: Engine) -> SiteStore:
    return SiteStore(engine)


@pytest.fixture
def ingestion(store: SiteStore) -> IngestionService:
    return IngestionService(store)


@pytest.fixture
def resolution(store: SiteStore) -> ResolutionService:
    return ResolutionService(store)


@pytest.fixture
def client(store: SiteStore) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_store] = lambda: store
    # 不进入 lifespan，避免在默认数据库上建表
    yield TestClient(app)
    app.dependency_overrides.clear()
