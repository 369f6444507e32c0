"""API response types for the Stellar Bit Hub.

Pydantic models representing the JSON documents returned by the hub. They
are fetched per call and never cached by the client.
"""

from pydantic import BaseModel


class ServerDetails(BaseModel):
    """A game server registered on the hub."""

    name: str
    id: int
    # None while the server is offline
    addr: str | None = None
    owner_id: int

    @property
    def is_online(self) -> bool:
        """Whether the server has reported an address to the hub."""
        return self.addr is not None


class UserData(BaseModel):
    """Public data of a hub user."""

    username: str
    id: int


class ServerAccess(BaseModel):
    """Short-lived capability granting the current user access to a server.

    The client does not persist it; the caller owns its lifetime.
    """

    server_id: int
    server_addr: str
    access_token: str
