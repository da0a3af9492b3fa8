from jose import JWTError, jwt

from slotbook.core.config import settings
from slotbook.core.enums import Role
from slotbook.core.identity import Actor


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def actor_from_token(token: str) -> Actor:
    """Build the caller identity from a bearer token issued upstream.

    Raises ``JWTError`` when the token is invalid, expired or incomplete.
    """
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("token has no subject")
    try:
        role = Role(str(payload.get("role", Role.USER.value)).upper())
    except ValueError:
        raise JWTError("token carries an unknown role")
    return Actor(user_id=str(user_id), role=role)
