"""
Auth dependency for routes that expose privileged content fields.

Resolves `Authorization: Bearer <token>` to `{"username", "elevated"}`.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status

from . import security


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def bearer_token(authorization: str | None) -> str:
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Authorization must be: Bearer <token>.")
    return token.strip()


def user_from_token(token: str) -> dict:
    try:
        claims = security.decode_access_token(token)
    except security.AuthSecurityError as exc:
        raise _unauthorized(str(exc)) from exc

    return {
        "username": str(claims["sub"]).strip(),
        "elevated": bool(claims.get("elevated", False)),
    }


async def get_current_user(authorization: str | None = Header(default=None)) -> dict:
    return user_from_token(bearer_token(authorization))
