import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from techphone.core.admin_emails import reconcile_role
from techphone.core.exceptions import AccountDisabledError, ConflictError
from techphone.core.permissions import ROLES
from techphone.core.security import create_access_token, hash_password, password_needs_rehash, verify_password
from techphone.models.orm import Profile, User, to_dict
from techphone.models.schemas import PROFILE_STATUSES
from techphone.services.realtime import publish_change
from techphone.services.profiles_service import sync_profile_on_login
from techphone.utils.validators import ValidationError, validate_email, validate_password, validate_phone

logger = logging.getLogger(__name__)


def signup(db: Session, email: str, password: str, full_name: Optional[str] = None,
           phone: Optional[str] = None, role: Optional[str] = None, status: str = "active") -> Profile:
    """Create login credentials plus the matching profile.

    Without an explicit ``role`` (self-service signup) the role comes from the
    admin allowlist; admins creating accounts may pick it.
    """
    validate_email(email)
    validate_password(password)
    if phone:
        validate_phone(phone)
    if role is not None and role not in ROLES.values():
        raise ValidationError(f"Invalid role '{role}'", "role")
    if status not in PROFILE_STATUSES:
        raise ValidationError(f"Invalid status '{status}'", "status")

    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    user = User(email=email, hashed_password=hash_password(password))
    db.add(user)
    db.flush()
    profile = Profile(
        id=user.id,
        email=email,
        full_name=full_name,
        phone=phone,
        role=role or reconcile_role(email, None),
        status=status,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info(f"[Auth] Signed up {email} as {profile.role}")
    publish_change("profiles", "INSERT", new=to_dict(profile))
    return profile


def authenticate(db: Session, email: str, password: str) -> Optional[Tuple[str, Profile]]:
    """Returns (access_token, profile), or None when the credentials are wrong.

    Raises AccountDisabledError for a non-active profile before anything is
    stamped, so rejected logins never count as logins.
    """
    email = (email or "").strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.warning(f"[Auth] Failed login for {email}")
        return None

    existing = db.query(Profile).filter(Profile.id == user.id).first()
    if existing is not None and existing.status != "active":
        logger.warning(f"[Auth] Rejected login for {email}: account {existing.status}")
        raise AccountDisabledError("Account is disabled")

    if password_needs_rehash(user.hashed_password):
        user.hashed_password = hash_password(password)
        logger.info(f"[Auth] Rehashed password for {email}")

    profile = sync_profile_on_login(db, user.id, user.email)
    token = create_access_token(user.id, role=profile.role)
    return token, profile
