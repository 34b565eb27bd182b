from typing import Optional


class UpstreamError(Exception):
    """Raised when the news API answers with an error of any kind."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class UpstreamHTTPError(UpstreamError):
    """Non-2xx HTTP status from the news API."""

    def __init__(self, status: int, body: Optional[str] = None):
        super().__init__(f"NewsAPI error: HTTP {status}")
        self.status = status
        self.body = body


class UpstreamPayloadError(UpstreamError):
    """HTTP 200 with a payload whose own status flags a failure."""

    def __init__(self, reason: str, code: Optional[str] = None):
        super().__init__(reason)
        self.code = code
