"""JWT implementation of AuthProvider."""

import logging
import uuid
from datetime import timedelta
from typing import Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ..domain.entities.timestamps import utc_now
from ..domain.entities.user_settings import UserIdentity
from ..domain.interfaces.auth_provider import AuthenticationError, AuthProvider

logger = logging.getLogger(__name__)


class JwtAuthProvider(AuthProvider):
    """Issues and verifies signed session tokens.

    Signed-out tokens are remembered by their ``jti`` claim until they
    expire; expired entries are pruned on the next authentication.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 60):
        """Initialize the JWT auth provider.

        Args:
            secret_key: Key used to sign and verify tokens.
            algorithm: JWS algorithm (default: HS256).
            expires_minutes: Lifetime of issued tokens.
        """
        if not secret_key:
            raise ValueError("A secret key is required to sign session tokens")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes
        self._revoked: Dict[str, Optional[int]] = {}

    def issue_token(self, identity: UserIdentity) -> str:
        now = utc_now()
        claims = {
            "sub": identity.user_id,
            "email": identity.email,
            "name": identity.name,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=self.expires_minutes)).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def authenticate(self, token: Optional[str]) -> UserIdentity:
        """Verify a token and return the identity it was issued to.

        Raises:
            AuthenticationError: If the token is missing, invalid, expired or signed out.
        """
        if not token:
            raise AuthenticationError("Missing session token")

        claims = self._decode(token)
        self._prune_revoked()
        if claims.get("jti") in self._revoked:
            raise AuthenticationError("Session has been signed out")
        if not claims.get("sub"):
            raise AuthenticationError("Session token has no subject")

        return UserIdentity(user_id=claims["sub"], email=claims.get("email"), name=claims.get("name"))

    def sign_out(self, token: str) -> None:
        claims = self._decode(token)
        if claims.get("jti"):
            self._revoked[claims["jti"]] = claims.get("exp")
        logger.info(f"User {claims.get('sub')} signed out")

    def _prune_revoked(self) -> None:
        now = int(utc_now().timestamp())
        expired = [jti for jti, exp in self._revoked.items() if exp is not None and exp <= now]
        for jti in expired:
            del self._revoked[jti]

    def _decode(self, token: str) -> dict:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthenticationError("Session token has expired") from None
        except JWTError as e:
            logger.warning(f"Rejected session token: {e}")
            raise AuthenticationError("Invalid session token") from e
