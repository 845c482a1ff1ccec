import logging
import mimetypes
from datetime import datetime, timezone

from pagehost.core.errors import NotFound
from pagehost.models import ResolvedFile
from pagehost.services.hostnames import canonical_host
from pagehost.store import SiteStore

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"
INDEX_MEDIA_TYPE = "text/html"

# 只检查内容的前 512 字节
SNIFF_LENGTH = 512

_SIGNATURES = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"%PDF-", "application/pdf"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x00asm", "application/wasm"),
]

_HTML_PREFIXES = (b"<!doctype html", b"<html", b"<head", b"<body", b"<!--")

# Bytes that never appear in plain text: controls other than \t \n \f \r and ESC
_BINARY_BYTES = frozenset(range(0x20)) - {0x09, 0x0A, 0x0C, 0x0D, 0x1B}


def sniff_media_type(content: bytes) -> str:
    """Guess a media type from the leading bytes of `content`."""
    head = content[:SNIFF_LENGTH]
    for signature, media_type in _SIGNATURES:
        if head.startswith(signature):
            return media_type
    if head.startswith(b"RIFF") and head[8:12] == b"WEBP":
        return "image/webp"
    if head.lstrip().lower().startswith(_HTML_PREFIXES):
        return INDEX_MEDIA_TYPE
    if not any(byte in _BINARY_BYTES for byte in head):
        return "text/plain"
    return DEFAULT_MEDIA_TYPE


def media_type_for_path(path: str, content: bytes = b"") -> str:
    """Media type from the path's extension, sniffed from `content` when unknown."""
    if path.endswith("/"):
        media_type = INDEX_MEDIA_TYPE
    else:
        media_type = mimetypes.guess_type(path)[0] or sniff_media_type(content)
    if media_type.startswith("text/"):
        return f"{media_type}; charset=utf-8"
    return media_type


def as_utc(value: datetime) -> datetime:
    # SQLite 返回的时间不带时区，存入时都是 UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ResolutionService:
    """Read path: request host + path -> stored file and response metadata."""

    def __init__(self, store: SiteStore):
        self.store = store

    def resolve(self, host: str, path: str) -> ResolvedFile:
        hostname = canonical_host(host)
        site = self.store.get_site(hostname)
        if site is None:
            logger.debug(f"Unknown host {hostname!r}")
            raise NotFound("unknown host")

        path = path or "/"
        stored = self.store.get_file(site.id, path)
        if stored is None:
            # 目录 URL 不带末尾斜杠时，匹配其 index.html 的规范路径
            stored = self.store.get_file(site.id, path + "/")
        if stored is None:
            logger.debug(f"[{hostname}] no file at {path}")
            raise NotFound("file not found")

        return ResolvedFile(
            path=stored.path,
            content=stored.blob,
            media_type=media_type_for_path(stored.path, stored.blob),
            content_hash=stored.content_hash,
            # 使用站点的更新时间，而不是单个文件的
            last_modified=as_utc(site.update_time),
        )
