from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from techphone.api.deps import ensure_self_or, get_current_user, require_permission
from techphone.core.permissions import PERMISSIONS, has_permission
from techphone.db.session import get_db
from techphone.models.orm import Profile, to_dict
from techphone.models.schemas import ProfileCreate, ProfileUpdate
from techphone.services import profiles_service

router = APIRouter()

@router.get("")
def list_profiles(
    page: int = 1,
    page_size: int = Query(20, alias="pageSize"),
    role: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    admin=Depends(require_permission(PERMISSIONS["USER_VIEW"])),
):
    return profiles_service.list_profiles(db, page=page, page_size=page_size, role=role,
                                          status=status_filter, search=search)

@router.get("/{profile_id}")
def get_profile(profile_id: str, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    ensure_self_or(user, profile_id, PERMISSIONS["USER_VIEW"])
    return {"data": to_dict(profiles_service.get_profile(db, profile_id))}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_profile(payload: ProfileCreate, db: Session = Depends(get_db),
                   user: Profile = Depends(get_current_user)):
    ensure_self_or(user, payload.id, PERMISSIONS["USER_CREATE"])
    if not has_permission(user.role, PERMISSIONS["USER_MANAGE"]):
        # self-service rows always start as a plain active user
        payload.role, payload.status = "user", "active"
    profile = profiles_service.create_profile(db, payload.model_dump())
    return {"data": to_dict(profile)}

@router.put("/{profile_id}")
def update_profile(profile_id: str, payload: ProfileUpdate, db: Session = Depends(get_db),
                   user: Profile = Depends(get_current_user)):
    changes = payload.model_dump(exclude_none=True)
    needed = PERMISSIONS["PROFILE_UPDATE"] if profile_id == user.id else PERMISSIONS["USER_UPDATE"]
    if not has_permission(user.role, needed):
        raise HTTPException(status_code=403, detail="Forbidden")
    if ({"role", "status"} & changes.keys()) and not has_permission(user.role, PERMISSIONS["USER_MANAGE"]):
        raise HTTPException(status_code=403, detail="Only admins can change role or status")

    profile = profiles_service.update_profile(db, profile_id, changes)
    return {"data": to_dict(profile)}

@router.post("/{profile_id}/last-login")
def update_last_login(profile_id: str, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    ensure_self_or(user, profile_id, PERMISSIONS["USER_MANAGE"])
    profile = profiles_service.touch_last_login(db, profile_id)
    return {"data": {"last_login": profile.last_login.isoformat() if profile.last_login else None}}
