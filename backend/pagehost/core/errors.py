"""Error taxonomy shared by the ingestion and resolution pipelines.

Every error carries the HTTP status it is rendered with; the application
registers a single handler for `PageHostError` (see `pagehost.main`).
"""


class PageHostError(Exception):
    status_code: int = 500
    headers: dict[str, str] | None = None

    def __init__(self, message: str, headers: dict[str, str] | None = None):
        self.message = message
        if headers is not None:
            self.headers = headers
        super().__init__(message)


class BadRequest(PageHostError):
    """Caller-supplied input is structurally invalid."""

    status_code = 400


class MethodNotAllowed(PageHostError):
    status_code = 405
    headers = {"Allow": "POST"}


class NotFound(PageHostError):
    """Unknown hostname or path."""

    status_code = 404


class RangeNotSatisfiable(PageHostError):
    status_code = 416


class StoreFailure(PageHostError):
    """A query or commit failed; any open unit of work was rolled back."""

    status_code = 500


class FormatError(PageHostError):
    """The uploaded archive could not be decompressed or parsed."""

    status_code = 400
