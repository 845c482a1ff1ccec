from sqlmodel import SQLModel

from .site import ResolvedFile, Site, SiteSummary, StoredFile
