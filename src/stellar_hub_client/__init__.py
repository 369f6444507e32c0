"""Stellar Hub Client.

Asynchronous client for the Stellar Bit Hub REST API: logs in with user
credentials, keeps the session alive across expiry, and exposes typed
operations for servers, users and access tokens.
"""

__version__ = "0.1.0"
