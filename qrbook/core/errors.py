"""
Client error taxonomy.

Every failure surfaced to the presentation layer carries a human-readable
`message`. Errors with `requires_login` set are raised only after the
session has been cleared and a redirect to the login view was requested.
"""

from __future__ import annotations


class ClientError(RuntimeError):
    default_message = "An unexpected error occurred."
    requires_login = False

    def __init__(self, message: str | None = None) -> None:
        self.message = (message or "").strip() or self.default_message
        super().__init__(self.message)


class InvalidCredentials(ClientError):
    default_message = "Invalid credentials"


class Unauthenticated(ClientError):
    default_message = "No authentication token found. Please login again."
    requires_login = True


class SessionExpired(ClientError):
    default_message = "Session expired. Please login again."
    requires_login = True


class ServerError(ClientError):
    default_message = "Unknown error"

    def __init__(self, message: str | None = None, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        return f"Server error: {self.message}"


class ConnectivityError(ClientError):
    default_message = "Could not connect to server. Please check your internet connection."


# Never surfaced: token decoding failures are treated as a valid session.
class MalformedToken(ClientError):
    default_message = "Token payload could not be decoded."


class InvalidEntry(ClientError):
    default_message = "Name and mobile are required."
