"""JWT bearer-token gate backed by PyJWT."""

from datetime import datetime, timedelta, timezone

import jwt
from loguru import logger

from ..errors import Unauthenticated
from .base import AuthGate
from .models import Identity


class JWTAuthGate(AuthGate):
    """Verifies HMAC-signed JWTs carrying 'sub' (user id) and 'exp' claims."""

    def __init__(self, secret: str, algorithm: str = "HS256", token_ttl_seconds: int = 3600):
        if not secret:
            raise ValueError("JWTAuthGate requires a non-empty secret")
        self._secret = secret
        self._algorithm = algorithm
        self._token_ttl = timedelta(seconds=token_ttl_seconds)

    def verify_token(self, token: str) -> Identity:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Rejected expired bearer token")
            raise Unauthenticated("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("Rejected invalid bearer token: {}", type(e).__name__)
            raise Unauthenticated("Invalid token") from e

        return Identity(user_id=str(claims["sub"]), name=claims.get("name"))

    def issue_token(self, user_id: str, name: str | None = None) -> str:
        """Sign a token for 'user_id' valid for the configured TTL.

        Used by the operator CLI and tests; end-user login lives elsewhere.
        """
        now = datetime.now(timezone.utc)
        claims = {"sub": user_id, "iat": now, "exp": now + self._token_ttl}
        if name:
            claims["name"] = name
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)
