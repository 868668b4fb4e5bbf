"""Errors raised by upstream data collectors."""


class UpstreamError(Exception):
    """Raised when the listings provider cannot be reached or answers badly.

    Covers network failures, timeouts, non-success responses and bodies that
    are not valid JSON. Callers decide the fallback behaviour.

    Attributes:
        resource: Upstream collection being fetched (e.g. "properties")
        message: Error description
        status_code: HTTP status of the failing response, if any
    """

    def __init__(self, resource: str, message: str, status_code: int | None = None):
        self.resource = resource
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{resource}] {message}")
