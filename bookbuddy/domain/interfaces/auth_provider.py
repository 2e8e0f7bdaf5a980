"""Authentication provider protocol."""

from typing import Protocol, runtime_checkable

from ..entities.user_settings import UserIdentity


class AuthenticationError(Exception):
    """Raised when a session token cannot be authenticated."""


@runtime_checkable
class AuthProvider(Protocol):
    """Protocol for session/identity providers."""

    def issue_token(self, identity: UserIdentity) -> str:
        """Sign in a user and return a session token.

        Args:
            identity: The user to sign in.

        Returns:
            str: An opaque bearer token.
        """
        ...

    def authenticate(self, token: str) -> UserIdentity:
        """Resolve a session token to the current user.

        Args:
            token: The bearer token presented by the client.

        Returns:
            UserIdentity: The signed-in user.

        Raises:
            AuthenticationError: If the token is missing, malformed, expired or revoked.
        """
        ...

    def sign_out(self, token: str) -> None:
        """Invalidate a session token."""
        ...
