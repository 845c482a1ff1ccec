import posixpath

INDEX_FILE = "index.html"


def normalize_path(name: str) -> str:
    """Map an archive entry name to the logical path it is served under.

    `a/index.html` becomes `/a/` and a top-level `index.html` becomes `/`, so
    a directory request and its index file share one key. Everything else is
    kept as-is behind a single leading slash.
    """
    # tar -C site -czf site.tgz . names entries ./index.html, ./img/logo.png
    while name.startswith("./"):
        name = name[2:]
    name = name.lstrip("/")

    if posixpath.basename(name) == INDEX_FILE:
        directory = posixpath.dirname(name)
        if directory in ("", "."):
            return "/"
        return f"/{directory}/"
    return f"/{name}"
