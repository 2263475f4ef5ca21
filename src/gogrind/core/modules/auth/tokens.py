from datetime import datetime, timedelta
from uuid import UUID

import jwt

from gogrind.core.modules.auth.models import JWT_ALGORITHM, AuthToken
from gogrind.errors import AuthenticationError


def encode_auth_token(user_id: UUID, secret: str, ttl: timedelta, issued_at: datetime) -> AuthToken:
    """Sign a token carrying the user id and an expiry."""
    payload = {"user_id": str(user_id), "iat": issued_at, "exp": issued_at + ttl}
    return AuthToken(jwt.encode(payload, secret, algorithm=JWT_ALGORITHM))


def decode_auth_token(token: str, secret: str) -> UUID:
    """Verify a token and return the user id it was issued for.

    Raises:
        AuthenticationError: If the token is malformed, expired or signed with another secret
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], options={"require": ["exp", "user_id"]})
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Unauthorized - Token expired") from e
    except jwt.PyJWTError as e:
        raise AuthenticationError("Unauthorized - Invalid token") from e

    try:
        return UUID(payload["user_id"])
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Unauthorized - Invalid token") from e
