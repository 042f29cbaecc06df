"""
Unverified JWT helpers.

The storefront never holds the signing key; claims are read only to learn the
role and expiry of a bearer token the backend issued. Tokens that are not
JWTs at all are treated as opaque: no claims, never expired.
"""
import logging
import time

from jose import jwt, JWTError

from enums.user_role import UserRole

logger = logging.getLogger(__name__)

ROLE_CLAIMS = ("role", "roles", "authorities", "authority")


def decode_token(token: str | None) -> dict | None:
    """
    Read the claims of a JWT without verifying its signature.

    Returns:
        Claims dict, or None if the token is empty or not a JWT
    """
    if not token:
        return None
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.debug(f"[JWT] Token is not a decodable JWT: {e}")
        return None


def is_token_expired(token: str | None, now: float | None = None) -> bool:
    """
    True when the token carries an exp claim in the past.

    Missing tokens count as expired; opaque tokens and JWTs without exp do not.
    """
    if not token:
        return True
    claims = decode_token(token)
    if not claims or claims.get("exp") is None:
        return False
    try:
        exp = float(claims["exp"])
    except (TypeError, ValueError):
        return False
    if now is None:
        now = time.time()
    return exp <= now


def _role_from_value(value) -> UserRole | None:
    if isinstance(value, (list, tuple)):
        roles = [_role_from_value(v) for v in value]
        if UserRole.ADMIN in roles:
            return UserRole.ADMIN
        return next((r for r in roles if r is not None), None)
    if isinstance(value, dict):
        return _role_from_value(value.get("authority") or value.get("role"))
    return UserRole.from_claim(value)


def get_role_from_claims(claims: dict | None) -> UserRole | None:
    if not claims:
        return None
    for claim in ROLE_CLAIMS:
        if claim in claims:
            role = _role_from_value(claims[claim])
            if role is not None:
                return role
    sub = claims.get("sub")
    if isinstance(sub, dict):
        return _role_from_value(sub.get("role"))
    return None


def get_role_from_token(token: str | None) -> UserRole | None:
    return get_role_from_claims(decode_token(token))
