from typing import Annotated

from fastapi import Depends

from pagehost.core.db import engine
from pagehost.services import IngestionService, ResolutionService
from pagehost.store import SiteStore

_site_store = SiteStore(engine)


def get_store() -> SiteStore:
    return _site_store


StoreDep = Annotated[SiteStore, Depends(get_store)]


def get_ingestion_service(store: StoreDep) -> IngestionService:
    return IngestionService(store)


def get_resolution_service(store: StoreDep) -> ResolutionService:
    return ResolutionService(store)


IngestionDep = Annotated[IngestionService, Depends(get_ingestion_service)]
ResolutionDep = Annotated[ResolutionService, Depends(get_resolution_service)]
