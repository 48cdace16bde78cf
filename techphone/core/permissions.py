from typing import Iterable, List, Optional

ROLES = {
    "ADMIN": "admin",
    "USER": "user",
    "GUEST": "guest",
}

PERMISSIONS = {
    # products
    "PRODUCT_VIEW": "product:view",
    "PRODUCT_CREATE": "product:create",
    "PRODUCT_UPDATE": "product:update",
    "PRODUCT_DELETE": "product:delete",
    "PRODUCT_MANAGE": "product:manage",
    # orders
    "ORDER_VIEW": "order:view",
    "ORDER_CREATE": "order:create",
    "ORDER_UPDATE": "order:update",
    "ORDER_DELETE": "order:delete",
    "ORDER_MANAGE": "order:manage",
    # users
    "USER_VIEW": "user:view",
    "USER_CREATE": "user:create",
    "USER_UPDATE": "user:update",
    "USER_DELETE": "user:delete",
    "USER_MANAGE": "user:manage",
    # own profile
    "PROFILE_VIEW": "profile:view",
    "PROFILE_UPDATE": "profile:update",
    # cart & wishlist
    "CART_MANAGE": "cart:manage",
    "WISHLIST_MANAGE": "wishlist:manage",
    # dashboard
    "DASHBOARD_VIEW": "dashboard:view",
    "ANALYTICS_VIEW": "analytics:view",
    # system
    "SYSTEM_SETTINGS": "system:settings",
    "ROLE_MANAGE": "role:manage",
}

ROLE_PERMISSIONS = {
    # admin gets every permission
    ROLES["ADMIN"]: list(PERMISSIONS.values()),
    ROLES["USER"]: [
        PERMISSIONS["PRODUCT_VIEW"],
        PERMISSIONS["ORDER_VIEW"],
        PERMISSIONS["ORDER_CREATE"],
        PERMISSIONS["PROFILE_VIEW"],
        PERMISSIONS["PROFILE_UPDATE"],
        PERMISSIONS["CART_MANAGE"],
        PERMISSIONS["WISHLIST_MANAGE"],
    ],
    ROLES["GUEST"]: [
        PERMISSIONS["PRODUCT_VIEW"],
    ],
}


def has_permission(role: Optional[str], permission: Optional[str]) -> bool:
    if not role or not permission:
        return False
    return permission in ROLE_PERMISSIONS.get(role, [])


def has_any_permission(role: Optional[str], permissions) -> bool:
    if not role or not isinstance(permissions, (list, tuple)):
        return False
    return any(has_permission(role, p) for p in permissions)


def has_all_permissions(role: Optional[str], permissions) -> bool:
    if not role or not isinstance(permissions, (list, tuple)):
        return False
    return all(has_permission(role, p) for p in permissions)


def is_admin(role: Optional[str]) -> bool:
    return role == ROLES["ADMIN"]


def is_user(role: Optional[str]) -> bool:
    return role == ROLES["USER"]


def is_guest(role: Optional[str]) -> bool:
    return role == ROLES["GUEST"] or not role


def get_role_permissions(role: Optional[str]) -> List[str]:
    return list(ROLE_PERMISSIONS.get(role, []))


def can_access_route(role: Optional[str], route_permissions: Optional[Iterable[str]]) -> bool:
    """Routes with no requirements are open; otherwise any one permission is enough."""
    if not route_permissions:
        return True
    return has_any_permission(role, list(route_permissions))
