from .archive import ArchiveEntry, extract_archive
from .paths import normalize_path

__all__ = ["ArchiveEntry", "extract_archive", "normalize_path"]
