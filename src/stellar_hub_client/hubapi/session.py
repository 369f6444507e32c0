"""Credential-backed session store for the hub API.

Holds the user's credentials and (re-)establishes the cookie session on the
shared HTTP client. Logins are serialized so that several requests hitting
an expired session at the same time trigger a single re-authentication.
"""

import asyncio
import time
from dataclasses import dataclass, field

import httpx
import structlog

from .errors import AuthenticationError, TransportError

logger = structlog.get_logger(__name__)

LOGIN_PATH = "/api/login"


@dataclass(frozen=True)
class Credentials:
    """Username and password used to log in to the hub."""

    username: str
    password: str = field(repr=False)


class SessionStore:
    """Owns the credentials and the session cookies of one client instance.

    The session itself is opaque: whatever cookies the hub sets on a
    successful login are kept by the ``httpx.AsyncClient`` and replayed on
    every later request. The store only counts successful logins, so callers
    can tell whether the session was already renewed while they waited.
    """

    def __init__(self, http: httpx.AsyncClient, credentials: Credentials):
        """Initialize the session store.

        Args:
            http: HTTP client whose cookie jar carries the session.
            credentials: Credentials submitted on every login.
        """
        self._http = http
        self._credentials = credentials
        self._lock = asyncio.Lock()
        self._generation = 0

    @property
    def username(self) -> str:
        return self._credentials.username

    @property
    def generation(self) -> int:
        """Number of successful logins performed so far."""
        return self._generation

    async def login(self) -> None:
        """Log in with the stored credentials.

        Raises:
            AuthenticationError: If the hub rejects the credentials.
            TransportError: If the hub cannot be reached or the exchange
                fails in transit (e.g. an undecodable body).
        """
        async with self._lock:
            await self._login()

    async def refresh(self, seen_generation: int) -> None:
        """Renew the session unless a concurrent caller already did.

        Args:
            seen_generation: The generation observed before the request
                that came back unauthorized.

        Raises:
            AuthenticationError: If the hub rejects the credentials.
            TransportError: If the hub cannot be reached or the exchange
                fails in transit (e.g. an undecodable body).
        """
        async with self._lock:
            if self._generation != seen_generation:
                logger.debug(
                    "Session already refreshed",
                    seen_generation=seen_generation,
                    generation=self._generation,
                )
                return
            await self._login()

    async def _login(self) -> None:
        start_time = time.monotonic()
        form = {
            "username": self._credentials.username,
            "password": self._credentials.password,
        }
        try:
            response = await self._http.post(LOGIN_PATH, data=form)
        except httpx.RequestError as e:
            logger.exception("Login request failed", username=self.username)
            msg = f"Login exchange with hub failed: {e}"
            raise TransportError(msg) from e

        duration = time.monotonic() - start_time
        if not response.is_success:
            logger.warning(
                "Login rejected",
                username=self.username,
                status=response.status_code,
            )
            raise AuthenticationError(response.status_code, self.username)

        self._generation += 1
        logger.info(
            "Logged in",
            username=self.username,
            generation=self._generation,
            duration_seconds=round(duration, 3),
        )
