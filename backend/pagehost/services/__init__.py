from .hostnames import canonical_host, normalize_hostname
from .ingestion import IngestionService
from .resolution import ResolutionService

__all__ = ["IngestionService", "ResolutionService", "canonical_host", "normalize_hostname"]
