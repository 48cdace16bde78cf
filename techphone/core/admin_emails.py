from typing import List, Optional

from techphone.core.config import ADMIN_EMAILS as _CONFIGURED
from techphone.core.permissions import ROLES

ADMIN_EMAILS: List[str] = list(_CONFIGURED)


def is_admin_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return email.strip().lower() in ADMIN_EMAILS


def get_admin_emails() -> List[str]:
    return list(ADMIN_EMAILS)


def add_admin_email(email: Optional[str]) -> bool:
    if not email or is_admin_email(email):
        return False
    ADMIN_EMAILS.append(email.strip().lower())
    return True


def remove_admin_email(email: Optional[str]) -> bool:
    if not is_admin_email(email):
        return False
    ADMIN_EMAILS.remove(email.strip().lower())
    return True


def reconcile_role(email: Optional[str], current_role: Optional[str]) -> str:
    """Role a profile should carry after login.

    Allowlisted e-mails are always admin. An admin whose e-mail was removed
    from the list drops back to a plain user; any other role is kept.
    """
    if is_admin_email(email):
        return ROLES["ADMIN"]
    if current_role == ROLES["ADMIN"] or not current_role:
        return ROLES["USER"]
    return current_role
