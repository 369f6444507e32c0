"""Shared fixtures: an in-memory hub served through httpx.MockTransport."""

from http.cookies import SimpleCookie
from urllib.parse import parse_qs

import httpx
import pytest

BASE_URL = "http://hub.example.com"
USERNAME = "nova"
PASSWORD = "hunter2"


class FakeHub:
    """Minimal stand-in for the hub's REST API.

    Issues a new session cookie on every login and only accepts the cookies
    it has issued since the last call to :meth:`expire_sessions`. Individual
    routes can be replaced through ``overrides``.
    """

    def __init__(self):
        self.users = {42: USERNAME, 7: "orion"}
        self.servers = [
            {"name": "Alpha", "id": 1, "addr": "10.0.0.1:9000", "owner_id": 7},
        ]
        self.valid_tokens = {"good-token"}
        self.requests: list[httpx.Request] = []
        self.overrides: dict[tuple[str, str], httpx.Response] = {}
        self.logins = 0
        self._sessions: set[str] = set()

    def expire_sessions(self) -> None:
        self._sessions.clear()

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)

        if key == ("POST", "/api/login"):
            return self._login(request)
        if not self._has_session(request):
            return httpx.Response(401)
        if key in self.overrides:
            return self.overrides[key]
        return self._route(request)

    def _login(self, request: httpx.Request) -> httpx.Response:
        form = parse_qs(request.content.decode())
        if form.get("username") != [USERNAME] or form.get("password") != [PASSWORD]:
            return httpx.Response(403)
        self.logins += 1
        token = f"session-{self.logins}"
        self._sessions.add(token)
        return httpx.Response(200, headers={"set-cookie": f"session={token}; Path=/"})

    def _has_session(self, request: httpx.Request) -> bool:
        cookie = SimpleCookie(request.headers.get("cookie", ""))
        return "session" in cookie and cookie["session"].value in self._sessions

    def _route(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        parts = request.url.path.strip("/").split("/")[1:]

        if method == "GET" and parts == ["servers"]:
            return httpx.Response(200, json=self.servers)
        if method == "GET" and parts[:2] == ["users", "by_username"]:
            for user_id, username in self.users.items():
                if username == parts[2]:
                    return httpx.Response(200, json={"username": username, "id": user_id})
        elif method == "GET" and parts[0] == "users" and int(parts[1]) in self.users:
            user_id = int(parts[1])
            return httpx.Response(
                200, json={"username": self.users[user_id], "id": user_id}
            )
        if method == "POST" and parts[:2] == ["servers", "keep_alive"]:
            return httpx.Response(200)
        if method == "GET" and parts[:2] == ["servers", "access"]:
            return httpx.Response(
                200,
                json={
                    "server_id": int(parts[2]),
                    "server_addr": "10.0.0.1:9000",
                    "access_token": "good-token",
                },
            )
        if method == "GET" and parts[:2] == ["servers", "verify"]:
            return httpx.Response(200 if parts[4] in self.valid_tokens else 412)
        return httpx.Response(404)


@pytest.fixture
def hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def transport(hub: FakeHub) -> httpx.MockTransport:
    return httpx.MockTransport(hub.handler)
