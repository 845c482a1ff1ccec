import re

from pagehost.core.errors import BadRequest

_LABEL_PATTERN = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def canonical_host(host: str) -> str:
    """Lookup key for a host: lowercased, without `:port` or a trailing dot.

    `Demo.Test.:4444` -> `demo.test`; IPv6 literals keep their brackets,
    `[::1]:4444` -> `[::1]`.
    """
    host = host.strip().lower()
    if host.startswith("["):
        end = host.find("]")
        if end != -1:
            host = host[: end + 1]
    else:
        host = host.split(":", 1)[0]
    return host.rstrip(".")


def normalize_hostname(candidate: str) -> str:
    """`canonical_host`, plus a check that the result is a valid DNS name."""
    hostname = canonical_host(candidate)
    if not hostname or len(hostname) > 253:
        raise BadRequest("invalid hostname")
    if not all(_LABEL_PATTERN.match(label) for label in hostname.split(".")):
        raise BadRequest("invalid hostname")
    return hostname
