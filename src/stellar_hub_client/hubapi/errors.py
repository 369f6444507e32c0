"""Exception types raised by the hub API client."""


class HubError(Exception):
    """Base exception for all hub client errors."""


class TransportError(HubError):
    """Raised when an exchange with the hub fails below the HTTP status level.

    Covers unreachable hubs (DNS, refused connection, timeout) as well as
    broken exchanges such as undecodable bodies or redirect loops.
    """


class AuthenticationError(HubError):
    """Raised when the hub rejects the supplied credentials."""

    def __init__(self, status_code: int, username: str):
        self.status_code = status_code
        self.username = username
        super().__init__(f"Login rejected for user {username!r} (HTTP {status_code})")


class RequestError(HubError):
    """Raised when an endpoint answers with an unexpected non-2xx status.

    The status code is kept so callers can tell a missing resource (404)
    from a server fault (5xx).
    """

    def __init__(self, status_code: int, method: str, path: str):
        self.status_code = status_code
        self.method = method
        self.path = path
        super().__init__(f"{method} {path} failed with HTTP {status_code}")


class ResponseDecodeError(HubError):
    """Raised when a successful response body does not match the expected shape."""

    def __init__(self, status_code: int, path: str, reason: str):
        self.status_code = status_code
        self.path = path
        super().__init__(f"Malformed response from {path}: {reason}")
