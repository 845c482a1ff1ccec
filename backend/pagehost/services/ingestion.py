import logging
import mimetypes
from datetime import datetime, timezone
from typing import BinaryIO

from pagehost.core.errors import BadRequest, FormatError
from pagehost.ingest import extract_archive, normalize_path
from pagehost.models import SiteSummary
from pagehost.services.hostnames import normalize_hostname
from pagehost.store import SiteStore

logger = logging.getLogger(__name__)

GZIP_MEDIA_TYPES = {"application/gzip", "application/x-gzip"}


def media_type_for_upload(filename: str | None) -> str | None:
    """Media type declared by an uploaded file's name extension.

    `site.tar.gz` and `site.tgz` are gzip payloads; a bare `.tar` is not.
    """
    if not filename:
        return None
    media_type, encoding = mimetypes.guess_type(filename)
    if encoding == "gzip":
        return "application/gzip"
    return media_type


class IngestionService:
    """
    Turns one uploaded archive into the stored content of a site.

    The whole upload runs inside a single unit of work: either every file of
    the archive becomes visible together with the site's new update time, or
    nothing changes.
    """

    def __init__(self, store: SiteStore):
        self.store = store

    def ingest(self, hostname: str, archive: BinaryIO, media_type: str | None) -> SiteSummary:
        hostname = normalize_hostname(hostname)
        if media_type not in GZIP_MEDIA_TYPES:
            logger.warning(f"Rejected upload for {hostname}: media type {media_type!r}")
            raise BadRequest("unsupported archive type")

        # 同一次上传的所有行使用同一个时间戳
        now = datetime.now(timezone.utc)
        file_count = 0
        try:
            with self.store.unit_of_work() as writer:
                site_id = writer.upsert_site(hostname, now)
                for entry in extract_archive(archive):
                    path = normalize_path(entry.name)
                    writer.upsert_file(site_id, path, entry.content, now)
                    file_count += 1
                    logger.debug(f"[{hostname}] stored {path} ({len(entry.content)} bytes)")
        except FormatError as e:
            logger.warning(f"Rejected upload for {hostname}: {e}")
            raise BadRequest(f"malformed archive: {e}") from e

        # 注意：旧上传中存在、新上传中缺失的文件不会被删除
        logger.info(f"Uploaded site {hostname} ({file_count} files)")
        return SiteSummary(hostname=hostname, file_count=file_count, update_time=now)
