from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from techphone.core.permissions import has_permission
from techphone.core.security import decode_access_token
from techphone.db.session import get_db
from techphone.models.orm import Profile

oauth2 = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

def get_optional_user(token: Optional[str] = Depends(oauth2), db: Session = Depends(get_db)) -> Optional[Profile]:
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token",
                            headers={"WWW-Authenticate": "Bearer"})
    profile = db.query(Profile).filter(Profile.id == payload["sub"]).first()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if profile.status != "active":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")
    return profile

def get_current_user(user: Optional[Profile] = Depends(get_optional_user)) -> Profile:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated",
                            headers={"WWW-Authenticate": "Bearer"})
    return user

def require_permission(permission: str):
    """Dependency factory: the current user's role must grant ``permission``."""
    def checker(user: Profile = Depends(get_current_user)) -> Profile:
        if not has_permission(user.role, permission):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Permission '{permission}' required")
        return user
    return checker

def ensure_self_or(user: Profile, owner_id: Optional[str], permission: str):
    """Users act on their own rows; anything else needs ``permission``."""
    if owner_id == user.id or has_permission(user.role, permission):
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
