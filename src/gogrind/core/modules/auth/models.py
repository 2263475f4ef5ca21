"""Authentication token types."""

from typing import NewType

AuthToken = NewType("AuthToken", str)

AUTH_COOKIE_NAME = "jwt"
JWT_ALGORITHM = "HS256"
