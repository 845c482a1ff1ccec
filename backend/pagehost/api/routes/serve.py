"""
Serving of uploaded sites.

Every request that is not an upload is resolved against its `Host` header
and path. Responses carry `Last-Modified`, `ETag` and `Accept-Ranges`;
conditional requests are answered with 304 and a single `bytes=` range with
206 (or 416 when it lies outside the file).
"""
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime

from fastapi import APIRouter, Request, Response

from pagehost.api.deps import ResolutionDep
from pagehost.core.errors import RangeNotSatisfiable
from pagehost.models import ResolvedFile

router = APIRouter(tags=["serve"])


def entity_tag(resolved: ResolvedFile) -> str:
    return f'"{resolved.content_hash}"'


def parse_http_date(value: str) -> datetime | None:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_not_modified(request: Request, resolved: ResolvedFile) -> bool:
    """Evaluate If-None-Match, falling back to If-Modified-Since."""
    if_none_match = request.headers.get("if-none-match")
    if if_none_match is not None:
        etag = entity_tag(resolved)
        tags = {tag.strip() for tag in if_none_match.split(",")}
        return "*" in tags or etag in tags or f"W/{etag}" in tags

    if_modified_since = request.headers.get("if-modified-since")
    if not if_modified_since:
        return False
    since = parse_http_date(if_modified_since)
    if since is None:
        return False
    # HTTP 日期只精确到秒
    return resolved.last_modified.replace(microsecond=0) <= since


def if_range_matches(request: Request, resolved: ResolvedFile) -> bool:
    """A missing If-Range always matches; an entity tag must match strongly."""
    if_range = request.headers.get("if-range")
    if if_range is None:
        return True
    if_range = if_range.strip()
    if if_range.startswith(('"', "W/")):
        return if_range == entity_tag(resolved)
    date = parse_http_date(if_range)
    return date is not None and date == resolved.last_modified.replace(microsecond=0)


def parse_byte_range(header: str, size: int) -> tuple[int, int] | None:
    """
    Parse a `Range` header into an inclusive (start, end) pair.

    Returns None when the header is to be ignored and the whole file served:
    units other than bytes, several ranges, or a malformed range. Raises
    `RangeNotSatisfiable` when the range starts past the end of the file.
    """
    unit, _, ranges = header.partition("=")
    if unit.strip().lower() != "bytes" or "," in ranges:
        return None
    first, sep, last = ranges.strip().partition("-")
    first, last = first.strip(), last.strip()
    if not sep or not (first or last):
        return None
    if (first and not first.isdigit()) or (last and not last.isdigit()):
        return None

    unsatisfiable = RangeNotSatisfiable(
        "range not satisfiable", headers={"Content-Range": f"bytes */{size}"}
    )
    if not first:
        # bytes=-N：最后 N 个字节
        length = int(last)
        if length == 0 or size == 0:
            raise unsatisfiable
        return max(size - length, 0), size - 1

    start = int(first)
    end = int(last) if last else size - 1
    if end < start:
        return None
    if start >= size:
        raise unsatisfiable
    return start, min(end, size - 1)


@router.api_route("/{path:path}", methods=["GET", "HEAD"], include_in_schema=False)
def serve_site_file(request: Request, resolution: ResolutionDep) -> Response:
    # scope["path"] 已解码，保留文件名中的 # 和 ?
    resolved = resolution.resolve(request.headers.get("host", ""), request.scope["path"])

    headers = {
        "Last-Modified": format_datetime(resolved.last_modified, usegmt=True),
        "ETag": entity_tag(resolved),
        "Accept-Ranges": "bytes",
    }
    if is_not_modified(request, resolved):
        return Response(status_code=304, headers=headers)

    content = resolved.content
    status_code = 200
    range_header = request.headers.get("range")
    if range_header and if_range_matches(request, resolved):
        byte_range = parse_byte_range(range_header, len(content))
        if byte_range is not None:
            start, end = byte_range
            headers["Content-Range"] = f"bytes {start}-{end}/{len(content)}"
            content = content[start : end + 1]
            status_code = 206

    headers["Content-Length"] = str(len(content))
    if request.method == "HEAD":
        return Response(status_code=status_code, headers=headers, media_type=resolved.media_type)
    return Response(
        content=content,
        status_code=status_code,
        headers=headers,
        media_type=resolved.media_type,
    )
