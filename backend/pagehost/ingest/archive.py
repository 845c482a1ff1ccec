"""
Archive decoding for site uploads.

Uploads are gzip-compressed tar archives. The archive is read as a stream:
entries come out in archive order, one at a time, and cannot be revisited.
"""
import gzip
import logging
import tarfile
import zlib
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from pagehost.core.errors import FormatError

logger = logging.getLogger(__name__)

# Errors raised by gzip/tarfile on malformed or truncated input
_DECODE_ERRORS = (tarfile.TarError, EOFError, OSError, zlib.error)

_DRAIN_CHUNK = 64 * 1024


@dataclass(frozen=True)
class ArchiveEntry:
    name: str
    content: bytes


def extract_archive(stream: BinaryIO) -> Iterator[ArchiveEntry]:
    """
    Lazily decode a gzip-compressed tar stream into regular-file entries.

    Directory entries (and links, devices, FIFOs) are skipped. Raises
    `FormatError` as soon as the gzip header, a tar header or a member's data
    turns out to be malformed; the caller must discard whatever it already
    received.
    """
    gz = gzip.GzipFile(fileobj=stream, mode="rb")
    try:
        # "r|" reads the tar sequentially, without seeking back
        tar = tarfile.open(fileobj=gz, mode="r|")
    except _DECODE_ERRORS as e:
        raise FormatError(f"could not decompress archive: {e}") from e

    with tar:
        try:
            for member in tar:
                if member.isdir():
                    continue
                if not member.isfile():
                    logger.debug(f"Skipping non-regular archive entry {member.name!r}")
                    continue
                fileobj = tar.extractfile(member)
                content = fileobj.read() if fileobj is not None else b""
                yield ArchiveEntry(name=member.name, content=content)

            # tar stops at its end-of-archive marker; read the rest so the
            # gzip trailer (CRC and size) is checked too
            while gz.read(_DRAIN_CHUNK):
                pass
        except _DECODE_ERRORS as e:
            raise FormatError(f"could not read archive: {e}") from e
