# routers/auth.py
"""
Identity boundary.

Accounts, passwords and token issuing live in the identity service. Here we
only verify its bearer JWT and read two claims:

- sub  : actor id (citizen or authority user id)
- role : "citizen" | "authority"
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from core.config import Settings
from core.logging import logger
from routers.deps import get_settings

ROLES = ("citizen", "authority")

# Authorization: Bearer <token>
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    id: str
    role: str


# 👤 current actor (used by every complaint route)
def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Actor:
    credentials_exception = HTTPException(
        status_code=401,
        detail="Not authorized, please log in again",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.info(f"rejected token: {e}")
        raise credentials_exception

    sub = payload.get("sub")
    role = payload.get("role")
    if not sub or role not in ROLES:
        raise credentials_exception

    return Actor(id=str(sub), role=role)


def require_role(role: str):
    def _dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role != role:
            raise HTTPException(
                status_code=403,
                detail=f"User role {actor.role} is not authorized to access this route",
            )
        return actor

    return _dependency


require_citizen = require_role("citizen")
require_authority = require_role("authority")
