"""
Input validators, used by route handlers and the auth flow before touching the DB.

Each ``validate_*`` helper returns True or raises ``ValidationError`` carrying a
Vietnamese message that is shown to the customer as-is.
"""

import math
import re
from typing import Any, Dict, Mapping, Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[0-9]{10,11}$")


class ValidationError(Exception):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


def _fmt(n) -> str:
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return str(n)


def _is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return not value


def validate_email(email: Optional[str]) -> bool:
    if not email:
        raise ValidationError("Email là bắt buộc", "email")
    if not EMAIL_RE.match(email):
        raise ValidationError("Email không hợp lệ", "email")
    return True


def validate_password(password: Optional[str]) -> bool:
    if not password:
        raise ValidationError("Mật khẩu là bắt buộc", "password")
    if len(password) < 6:
        raise ValidationError("Mật khẩu phải có ít nhất 6 ký tự", "password")
    return True


def validate_phone(phone: Optional[str]) -> bool:
    if not phone:
        raise ValidationError("Số điện thoại là bắt buộc", "phone")
    if not PHONE_RE.match(re.sub(r"\s", "", phone)):
        raise ValidationError("Số điện thoại không hợp lệ", "phone")
    return True


def validate_required(value: Any, field_name: str) -> bool:
    if _is_blank(value):
        raise ValidationError(f"{field_name} là bắt buộc", field_name.lower())
    return True


def validate_number(value: Any, field_name: str, min=None, max=None) -> bool:
    try:
        if value is None or isinstance(value, bool):
            raise TypeError
        num = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} phải là số", field_name.lower())
    if math.isnan(num):
        raise ValidationError(f"{field_name} phải là số", field_name.lower())

    if min is not None and num < min:
        raise ValidationError(f"{field_name} phải lớn hơn hoặc bằng {_fmt(min)}", field_name.lower())
    if max is not None and num > max:
        raise ValidationError(f"{field_name} phải nhỏ hơn hoặc bằng {_fmt(max)}", field_name.lower())
    return True


def _collect(errors: list, check, *args, **kwargs):
    try:
        check(*args, **kwargs)
    except ValidationError as e:
        errors.append(e.message)


def validate_product(product: Mapping[str, Any]) -> bool:
    errors = []
    _collect(errors, validate_required, product.get("name"), "Tên sản phẩm")

    price_errors = []
    _collect(price_errors, validate_required, product.get("price"), "Giá sản phẩm")
    if not price_errors:
        _collect(price_errors, validate_number, product.get("price"), "Giá sản phẩm", 0)
    errors.extend(price_errors)

    _collect(errors, validate_required, product.get("category"), "Danh mục")

    if errors:
        raise ValidationError(", ".join(errors))
    return True


def validate_order(order: Mapping[str, Any]) -> bool:
    errors = []
    _collect(errors, validate_required, order.get("user_id"), "User ID")

    items = order.get("items")
    if items is None:
        errors.append("Sản phẩm là bắt buộc")
    elif not isinstance(items, (list, tuple)) or len(items) == 0:
        errors.append("Đơn hàng phải có ít nhất 1 sản phẩm")

    _collect(errors, validate_number, order.get("total_amount"), "Tổng tiền", 0)

    if errors:
        raise ValidationError(", ".join(errors))
    return True


def validate_user_profile(profile: Mapping[str, Any]) -> bool:
    errors = []
    if profile.get("email"):
        _collect(errors, validate_email, profile["email"])
    if profile.get("phone"):
        _collect(errors, validate_phone, profile["phone"])
    if profile.get("full_name") is not None:
        _collect(errors, validate_required, profile["full_name"], "Họ và tên")

    if errors:
        raise ValidationError(", ".join(errors))
    return True


def validate_form(form_data: Mapping[str, Any], rules: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
    """Run per-field rules and report every failing field instead of stopping at the first."""
    errors = {}

    for field, rule in rules.items():
        value = form_data.get(field)
        label = rule.get("label") or field
        try:
            if rule.get("required"):
                validate_required(value, label)

            kind = rule.get("type")
            if value:
                if kind == "email":
                    validate_email(value)
                elif kind == "password":
                    validate_password(value)
                elif kind == "phone":
                    validate_phone(value)
                elif kind == "number":
                    validate_number(value, label, rule.get("min"), rule.get("max"))

                min_length = rule.get("min_length")
                if min_length and len(str(value)) < min_length:
                    raise ValidationError(f"{label} phải có ít nhất {min_length} ký tự")
                max_length = rule.get("max_length")
                if max_length and len(str(value)) > max_length:
                    raise ValidationError(f"{label} không được vượt quá {max_length} ký tự")

                pattern = rule.get("pattern")
                if pattern and not re.search(pattern, str(value)):
                    raise ValidationError(rule.get("pattern_message") or f"{label} không đúng định dạng")
        except ValidationError as e:
            errors[field] = e.message

    return {"is_valid": not errors, "errors": errors}
