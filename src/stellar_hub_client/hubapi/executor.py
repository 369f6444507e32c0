"""Authenticated request pipeline.

Every hub request goes through :class:`AuthenticatedExecutor`, which re-logs
in once when the hub reports an expired session and replays the request.
"""

import time
from dataclasses import dataclass
from typing import Protocol

import httpx
import structlog

from .errors import TransportError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RequestTemplate:
    """Immutable description of a hub request.

    A fresh ``httpx.Request`` is built from the template for every send, so
    the same template can be replayed after a re-login.
    """

    method: str
    path: str
    form: tuple[tuple[str, str], ...] | None = None

    def build(self, http: httpx.AsyncClient) -> httpx.Request:
        data = dict(self.form) if self.form is not None else None
        return http.build_request(self.method, self.path, data=data)


class SessionRefresher(Protocol):
    """What the executor needs from a session store."""

    @property
    def generation(self) -> int: ...

    async def refresh(self, seen_generation: int) -> None: ...


class AuthenticatedExecutor:
    """Sends requests with the current session, re-authenticating on 401.

    The retry happens at most once per call. A request that is still
    unauthorized after a fresh login is returned as-is so that a broken
    account cannot cause an endless login loop. Any other status is left for
    the caller to interpret.
    """

    def __init__(self, http: httpx.AsyncClient, session: SessionRefresher):
        self._http = http
        self._session = session

    async def execute(self, template: RequestTemplate) -> httpx.Response:
        """Send a request, renewing the session once if it has expired.

        Args:
            template: The request to send.

        Returns:
            The first response, or the response to the replayed request if
            the first one was unauthorized.

        Raises:
            TransportError: If the hub cannot be reached or the exchange
                fails in transit (e.g. an undecodable body).
            AuthenticationError: If re-authentication is rejected.
        """
        generation = self._session.generation
        response = await self._send(template)
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return response

        logger.info(
            "Session expired, logging in again",
            method=template.method,
            path=template.path,
        )
        await self._session.refresh(generation)
        return await self._send(template)

    async def _send(self, template: RequestTemplate) -> httpx.Response:
        start_time = time.monotonic()
        try:
            response = await self._http.send(template.build(self._http))
        except httpx.RequestError as e:
            duration = time.monotonic() - start_time
            logger.exception(
                "Hub request failed",
                method=template.method,
                path=template.path,
                duration_seconds=round(duration, 3),
            )
            msg = f"{template.method} {template.path} failed in transit: {e}"
            raise TransportError(msg) from e

        duration = time.monotonic() - start_time
        logger.debug(
            "Hub request completed",
            method=template.method,
            path=template.path,
            status=response.status_code,
            duration_seconds=round(duration, 3),
        )
        return response
