"""
Session tokens of the portal.

The login route signs the user id into a JWT (``sub`` claim) and sets it as the
``token`` cookie; ``/api/me`` and the protected routes read it back with
`verify_token`. Signing uses ``SECRET_KEY`` / ``ALGORITHM`` and the lifetime
``ACCESS_TOKEN_EXPIRE_MINUTES`` from `settings`.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from jose import jwt, JWTError
from campus_portal.database.config.config import settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict) -> str:
    """
    Sign ``data`` plus an ``exp`` claim.

    Parameters
    ----------
    data : dict
        Claims, normally ``{"sub": user_id}``.

    Returns
    -------
    str
        Compact JWT.
    """
    claims = dict(data)
    lifetime = int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    claims["exp"] = int(datetime.now(timezone.utc).timestamp()) + lifetime
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """Return the ``sub`` of a valid token; None for expired, forged or garbled ones."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("Rejected access token: %s", e)
        return None
    return claims.get("sub")
