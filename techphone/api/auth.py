from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from techphone.api.deps import get_current_user
from techphone.core.permissions import get_role_permissions
from techphone.db.session import get_db
from techphone.models.orm import Profile, to_dict
from techphone.models.schemas import LoginRequest, SignupRequest
from techphone.services import auth_service
from techphone.utils.notifications import ToastQueue

router = APIRouter()

def _login(db: Session, email: str, password: str) -> dict:
    result = auth_service.authenticate(db, email, password)
    if not result:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Email hoặc mật khẩu không đúng",
                            headers={"WWW-Authenticate": "Bearer"})
    token, profile = result

    toasts = ToastQueue()
    toasts.success(f"Chào mừng {profile.full_name or profile.email}!")
    return {
        "access_token": token,
        "token_type": "bearer",
        "profile": to_dict(profile),
        "toasts": toasts.drain(),
    }

@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    profile = auth_service.signup(db, payload.email, payload.password, payload.full_name, payload.phone)
    return {"data": to_dict(profile)}

@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return _login(db, payload.email, payload.password)

@router.post("/token")
def token(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    # OAuth2 form login used by the interactive docs
    return _login(db, form.username, form.password)

@router.get("/me")
def me(user: Profile = Depends(get_current_user)):
    return {"data": {**to_dict(user), "permissions": get_role_permissions(user.role)}}
