"""Stellar Bit Hub REST API client.

Provides an asynchronous HTTP client with cookie-session authentication,
transparent re-login on session expiry, and response validation using
Pydantic models.
"""

from collections.abc import Mapping
from typing import TypeVar
from urllib.parse import quote

import httpx
import pydantic
import structlog

from .errors import RequestError, ResponseDecodeError
from .executor import AuthenticatedExecutor, RequestTemplate
from .session import Credentials, SessionStore
from .types import ServerAccess, ServerDetails, UserData

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/"

DEFAULT_TIMEOUT = 30.0

T = TypeVar("T")

_SERVER_LIST = pydantic.TypeAdapter(list[ServerDetails])
_USER = pydantic.TypeAdapter(UserData)
_SERVER_ACCESS = pydantic.TypeAdapter(ServerAccess)


def _segment(value: object) -> str:
    """Percent-encode a single path segment, keeping ``host:port`` readable."""
    return quote(str(value), safe=":")


class HubApiClient:
    """HTTP client for the Stellar Bit Hub API.

    Ensures that each request is authorized with the supplied credentials:
    the session cookie is renewed once whenever the hub answers 401. All
    requests of one instance share a single session.

    Use :meth:`connect` to obtain a logged-in client with ``user_id``
    resolved. Can be used as an async context manager for cleanup.
    """

    def __init__(
        self,
        username: str,
        password: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client without contacting the hub.

        Args:
            username: Hub account name.
            password: Hub account password.
            base_url: Base URL of the hub (default: http://localhost:3000/).
            timeout: Request timeout in seconds (default: 30.0).
            transport: Optional httpx transport, mainly for tests.

        Raises:
            ValueError: If base_url is empty or timeout is not positive.
        """
        if not base_url:
            msg = "base_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.user_id: int | None = None

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self._session = SessionStore(self._http, Credentials(username, password))
        self._executor = AuthenticatedExecutor(self._http, self._session)

    @classmethod
    async def connect(
        cls,
        username: str,
        password: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HubApiClient":
        """Log in and resolve the id of the logged-in user.

        Either both steps succeed and a ready client is returned, or the
        client is closed and the error propagates.

        Raises:
            AuthenticationError: If the hub rejects the credentials.
            TransportError: If the hub cannot be reached.
            RequestError: If the user lookup fails.
        """
        client = cls(
            username,
            password,
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )
        try:
            await client.login()
            user = await client.get_user_by_username(username)
        except BaseException:
            await client.aclose()
            raise

        client.user_id = user.id
        logger.info("Connected to hub", base_url=client.base_url, user_id=user.id)
        return client

    async def __aenter__(self) -> "HubApiClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager and close the HTTP client."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client. The hub session is left to expire."""
        if not self._http.is_closed:
            await self._http.aclose()

    @property
    def username(self) -> str:
        return self._session.username

    async def login(self) -> None:
        """Establish a fresh hub session with the stored credentials."""
        await self._session.login()

    def get(self, path: str) -> RequestTemplate:
        """Build a GET request for a hub path."""
        return RequestTemplate("GET", path)

    def post(self, path: str, form: Mapping[str, str] | None = None) -> RequestTemplate:
        """Build a POST request for a hub path with an optional form body."""
        fields = tuple(form.items()) if form is not None else None
        return RequestTemplate("POST", path, fields)

    async def send(self, template: RequestTemplate) -> httpx.Response:
        """Send an arbitrary request through the authenticated pipeline."""
        return await self._executor.execute(template)

    async def _checked_send(self, template: RequestTemplate) -> httpx.Response:
        response = await self.send(template)
        self._raise_for_status(template, response)
        return response

    def _raise_for_status(
        self, template: RequestTemplate, response: httpx.Response
    ) -> None:
        if not response.is_success:
            logger.error(
                "Hub returned error status",
                method=template.method,
                path=template.path,
                status=response.status_code,
            )
            raise RequestError(response.status_code, template.method, template.path)

    async def _fetch(
        self, template: RequestTemplate, adapter: pydantic.TypeAdapter[T]
    ) -> T:
        """Send a request and validate its JSON body.

        Args:
            template: The request to send.
            adapter: TypeAdapter for the expected response type.

        Raises:
            RequestError: On any non-2xx status.
            ResponseDecodeError: If the body is not the expected JSON.
        """
        response = await self._checked_send(template)
        try:
            return adapter.validate_python(response.json())
        except (ValueError, pydantic.ValidationError) as e:
            logger.exception("Failed to decode hub response", path=template.path)
            raise ResponseDecodeError(
                response.status_code, template.path, str(e)
            ) from e

    async def servers(self) -> list[ServerDetails]:
        """List all servers registered on the hub.

        Returns:
            List of validated ServerDetails; offline servers have no address.
        """
        return await self._fetch(self.get("/api/servers"), _SERVER_LIST)

    async def get_user(self, user_id: int) -> UserData:
        """Fetch a user by numeric id."""
        return await self._fetch(
            self.get(f"/api/users/{_segment(user_id)}"), _USER
        )

    async def get_user_by_username(self, username: str) -> UserData:
        """Fetch a user by username."""
        return await self._fetch(
            self.get(f"/api/users/by_username/{_segment(username)}"), _USER
        )

    async def keep_alive(self, server_id: int, server_addr: str) -> None:
        """Report that a server is alive and reachable at ``server_addr``."""
        path = f"/api/servers/keep_alive/{_segment(server_id)}/{_segment(server_addr)}"
        await self._checked_send(self.post(path))

    async def access_server(self, server_id: int) -> ServerAccess:
        """Request an access token for joining a server."""
        return await self._fetch(
            self.get(f"/api/servers/access/{_segment(server_id)}"), _SERVER_ACCESS
        )

    async def verify_token(self, server_id: int, user_id: int, token: str) -> bool:
        """Check an access token a user presented to a server.

        Returns:
            True if the hub accepts the token, False if it answers 412
            Precondition Failed.

        Raises:
            RequestError: On any other non-2xx status.
        """
        path = (
            f"/api/servers/verify/{_segment(server_id)}/"
            f"{_segment(user_id)}/{_segment(token)}"
        )
        template = self.get(path)
        response = await self.send(template)
        if response.status_code == httpx.codes.PRECONDITION_FAILED:
            logger.debug("Access token rejected", server_id=server_id, user_id=user_id)
            return False
        self._raise_for_status(template, response)
        return True
