"""JWT tokens for users and view access checks."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Optional, Protocol, Union

import jwt

_ALGORITHMS = ["HS256", "HS384", "HS512"]


class InvalidTokenError(Exception):
    """The token could not be verified."""


class View(Protocol):
    is_public: bool

    def is_allowed(self, user: str) -> bool: ...


def create_token(secret: Union[str, bytes], user: str, validity: Union[timedelta, float]) -> str:
    """Create an HS256 token for the user, valid for the given duration (seconds or timedelta)."""
    seconds = validity.total_seconds() if isinstance(validity, timedelta) else float(validity)
    claims = {"sub": user, "exp": int(time.time() + seconds)}
    return jwt.encode(claims, secret, algorithm="HS256")


def check_token(token: str, secret: Union[str, bytes]) -> str:
    """Verify the token and return the user it was issued for."""
    try:
        claims = jwt.decode(token, secret, algorithms=_ALGORITHMS)
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    user = claims.get("sub", "")
    if not isinstance(user, str):
        raise InvalidTokenError("invalid token")
    return user


def is_view_authenticated_by_user(view: View, user: Optional[str], allow_anonymous: bool) -> bool:
    """Whether the user (empty for anonymous) may access the view."""
    if not allow_anonymous and not user:
        return False
    if view.is_public:
        return True
    if not user:
        return False
    return view.is_allowed(user)