from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from slotbook.core.identity import Actor
from slotbook.core.security import actor_from_token

bearer = HTTPBearer(auto_error=False)

def get_current_actor(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Actor:
    # Identity is issued upstream; here it is only verified and trusted
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return actor_from_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")
    return actor
