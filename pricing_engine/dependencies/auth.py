from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from pricing_engine.core.security import decode_access_token
from pricing_engine.schemas.user import Actor

# tokens are issued by the upstream identity provider
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    token_data = decode_access_token(token)

    if not token_data.sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Actor(id=token_data.sub, role=token_data.role or "user")


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return actor
