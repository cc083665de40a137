from __future__ import annotations

import time
from typing import Annotated, Callable, Iterable

from fastapi import Depends, Request
from jose import JWTError, jwt

from .core import get_settings, AuthenticationError, AuthorizationError
from .roles import Role

# ---------------------------------------------------------------------------
#  Basic JWT helpers
# ---------------------------------------------------------------------------


def _now() -> int:
    return int(time.time())


def create_token(
    sub: int | str,
    role: str,
    *,
    expires_in: int | None = None,
    **extra_claims,
) -> str:
    """Return a signed JWT including any *extra_claims*.

    Standard claims:
    • sub  – user identifier
    • role – user role string
    • exp  – expiry (unix epoch)
    """
    settings = get_settings()
    if expires_in is None:
        expires_in = settings.ACCESS_TOKEN_EXPIRE_SECONDS
    payload = {
        "sub": str(sub),
        "role": role,
        "exp": _now() + expires_in,
    }
    payload.update(extra_claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify *token* and return its payload."""
    settings = get_settings()
    try:
        payload: dict = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise AuthenticationError("Invalid token") from exc
    return payload


# ---------------------------------------------------------------------------
#  Dependencies
# ---------------------------------------------------------------------------
async def _extract_token(req: Request) -> str | None:
    """Return JWT from Authorization header *or* access_token cookie."""
    auth: str | None = req.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1]
    return req.cookies.get("access_token")


async def current_user(req: Request) -> dict:
    """FastAPI dependency returning the JWT payload; raises AuthenticationError (401)."""
    token = await _extract_token(req)
    if not token:
        raise AuthenticationError("Missing credentials")
    return decode_token(token)


def _to_role_str(value: "str | Role") -> str:
    """Return the *string* value of a Role or raw str."""
    if isinstance(value, Role):
        return value.value
    return str(value)


def role_required(*allowed: "str | Role | Iterable[str | Role]") -> Callable[[dict], dict]:
    """Return a dependency that checks *current_user* role is within *allowed*.

    Usage:
        router.include_router(sub, dependencies=[Depends(role_required("admin"))])
    """
    if len(allowed) == 1 and isinstance(allowed[0], (list, tuple, set)):
        allowed = tuple(allowed[0])
    allowed_set = {_to_role_str(a) for a in allowed}

    async def _dep(user: Annotated[dict, Depends(current_user)]):
        role: str | None = user.get("role")
        if role not in allowed_set:
            raise AuthorizationError("Forbidden")
        return user

    return _dep
