from techphone.core import admin_emails
from techphone.core.admin_emails import (
    add_admin_email, get_admin_emails, is_admin_email, reconcile_role, remove_admin_email,
)
from techphone.core.permissions import (
    PERMISSIONS, can_access_route, get_role_permissions, has_all_permissions, has_any_permission,
    has_permission, is_admin, is_guest, is_user,
)


def test_admin_has_every_permission():
    for permission in PERMISSIONS.values():
        assert has_permission("admin", permission)


def test_user_permissions():
    assert has_permission("user", "order:create")
    assert has_permission("user", "profile:update")
    assert not has_permission("user", "product:create")
    assert not has_permission("user", "dashboard:view")


def test_guest_can_only_view_products():
    assert get_role_permissions("guest") == ["product:view"]
    assert not has_permission("guest", "order:create")


def test_unknown_or_missing_role():
    assert not has_permission(None, "product:view")
    assert not has_permission("superuser", "product:view")
    assert not has_permission("admin", None)
    assert get_role_permissions("superuser") == []


def test_any_and_all():
    assert has_any_permission("user", ["product:create", "order:view"])
    assert not has_any_permission("guest", ["order:view", "order:create"])
    assert has_all_permissions("user", ["order:view", "order:create"])
    assert not has_all_permissions("user", ["order:view", "order:manage"])


def test_any_and_all_reject_non_lists():
    assert not has_any_permission("admin", "product:view")
    assert not has_all_permissions("admin", None)


def test_role_predicates():
    assert is_admin("admin") and not is_admin("user")
    assert is_user("user")
    assert is_guest("guest")
    assert is_guest(None) and is_guest("")


def test_can_access_route():
    assert can_access_route("guest", [])
    assert can_access_route(None, None)
    assert can_access_route("user", ["order:view", "dashboard:view"])
    assert not can_access_route("user", ["dashboard:view"])


def test_admin_allowlist_is_case_insensitive():
    assert is_admin_email("Admin@TechPhone.com ")
    assert not is_admin_email(None)
    assert not is_admin_email("someone@example.com")


def test_add_and_remove_admin_email():
    assert add_admin_email("Boss@Example.com")
    assert not add_admin_email("boss@example.com")
    assert "boss@example.com" in get_admin_emails()

    assert remove_admin_email("BOSS@example.com")
    assert not remove_admin_email("boss@example.com")
    assert not is_admin_email("boss@example.com")


def test_get_admin_emails_returns_copy():
    emails = get_admin_emails()
    emails.append("x@example.com")
    assert "x@example.com" not in admin_emails.ADMIN_EMAILS


def test_reconcile_role():
    assert reconcile_role("admin@techphone.com", "user") == "admin"
    assert reconcile_role("admin@techphone.com", None) == "admin"
    # removed from the allowlist -> demoted
    assert reconcile_role("old-admin@example.com", "admin") == "user"
    assert reconcile_role("new@example.com", None) == "user"
    assert reconcile_role("new@example.com", "") == "user"
    assert reconcile_role("guest@example.com", "guest") == "guest"
