import gzip
import io
import tarfile


def make_tar(
    files: dict[str, bytes],
    directories: tuple[str, ...] = (),
    symlinks: dict[str, str] | None = None,
) -> bytes:
    """Build an uncompressed tar archive in memory, directories first."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name in directories:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def make_archive(
    files: dict[str, bytes],
    directories: tuple[str, ...] = (),
    symlinks: dict[str, str] | None = None,
) -> bytes:
    """Build a .tar.gz upload in memory."""
    return gzip.compress(make_tar(files, directories, symlinks))
