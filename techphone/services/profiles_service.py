import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from techphone.core.admin_emails import reconcile_role
from techphone.core.exceptions import ConflictError, NotFoundError
from techphone.core.permissions import ROLES
from techphone.models.orm import Profile, to_dict
from techphone.models.schemas import PROFILE_STATUSES
from techphone.services.realtime import publish_change
from techphone.utils.helpers import total_pages, utcnow
from techphone.utils.validators import ValidationError, validate_user_profile

logger = logging.getLogger(__name__)


def list_profiles(db: Session, page: int = 1, page_size: int = 20, role: Optional[str] = None,
                  status: Optional[str] = None, search: Optional[str] = None) -> dict:
    page, page_size = max(1, page), max(1, page_size)
    q = db.query(Profile)
    if role:
        q = q.filter(Profile.role == role)
    if status:
        q = q.filter(Profile.status == status)
    if search and search.strip():
        term = f"%{search.strip()}%"
        q = q.filter(or_(Profile.email.ilike(term), Profile.full_name.ilike(term)))

    total = q.count()
    rows = q.order_by(Profile.created_at.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return {
        "data": [to_dict(r) for r in rows],
        "count": total,
        "pagination": {"page": page, "pageSize": page_size, "totalPages": total_pages(total, page_size)},
    }


def get_profile(db: Session, profile_id: str) -> Profile:
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


def create_profile(db: Session, data: Dict[str, Any]) -> Profile:
    validate_user_profile(data)
    _check_role_and_status(data.get("role"), data.get("status"))

    profile = Profile(**{k: v for k, v in data.items() if v is not None})
    profile.email = profile.email.lower()
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Profile already exists")
    db.refresh(profile)
    logger.info(f"[Profiles] Created {profile.id} ({profile.role})")
    publish_change("profiles", "INSERT", new=to_dict(profile))
    return profile


def update_profile(db: Session, profile_id: str, data: Dict[str, Any]) -> Profile:
    changes = {k: v for k, v in data.items() if v is not None}
    validate_user_profile(changes)
    _check_role_and_status(changes.get("role"), changes.get("status"))

    profile = get_profile(db, profile_id)
    old = to_dict(profile)
    for key, value in changes.items():
        setattr(profile, key, value)
    db.commit()
    db.refresh(profile)
    logger.info(f"[Profiles] Updated {profile_id}: {sorted(changes)}")
    publish_change("profiles", "UPDATE", new=to_dict(profile), old=old)
    return profile


def touch_last_login(db: Session, profile_id: str) -> Profile:
    profile = get_profile(db, profile_id)
    old = to_dict(profile)
    profile.last_login = utcnow()
    db.commit()
    db.refresh(profile)
    publish_change("profiles", "UPDATE", new=to_dict(profile), old=old)
    return profile


def sync_profile_on_login(db: Session, user_id: str, email: str) -> Profile:
    """Create the profile if missing, reconcile its role with the admin list and stamp last_login."""
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    old = None
    if profile is None:
        profile = Profile(id=user_id, email=email.lower(), role=reconcile_role(email, None), status="active")
        db.add(profile)
        logger.info(f"[Profiles] Created missing profile for {email}")
    else:
        old = to_dict(profile)
        role = reconcile_role(email, profile.role)
        if role != profile.role:
            logger.info(f"[Profiles] Role of {email} reconciled {profile.role} -> {role}")
            profile.role = role

    profile.last_login = utcnow()
    db.commit()
    db.refresh(profile)
    if old is None:
        publish_change("profiles", "INSERT", new=to_dict(profile))
    else:
        publish_change("profiles", "UPDATE", new=to_dict(profile), old=old)
    return profile


def _check_role_and_status(role: Optional[str], status: Optional[str]):
    if role is not None and role not in ROLES.values():
        raise ValidationError(f"Invalid role '{role}'", "role")
    if status is not None and status not in PROFILE_STATUSES:
        raise ValidationError(f"Invalid status '{status}'", "status")
