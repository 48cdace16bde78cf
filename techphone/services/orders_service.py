import logging
import math
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from techphone.core.exceptions import NotFoundError
from techphone.models.orm import Order, OrderItem, to_dict
from techphone.models.schemas import ORDER_STATUSES, PAYMENT_STATUSES, OrderCreate
from techphone.services.realtime import publish_change
from techphone.utils.helpers import day_bounds, generate_order_number, period_bounds, utcnow
from techphone.utils.validators import ValidationError, validate_order

logger = logging.getLogger(__name__)

ITEM_PRODUCT_FIELDS = ["id", "name", "image", "brand"]
ORDER_SORTABLE = ("created_at", "updated_at", "total_amount", "status", "order_number")


def serialize_order(order: Order, product_fields=ITEM_PRODUCT_FIELDS, include_user: bool = False) -> dict:
    data = to_dict(order)
    data["order_items"] = [
        {**to_dict(item), "product": to_dict(item.product, product_fields) if item.product else None}
        for item in order.order_items
    ]
    if include_user:
        data["user"] = to_dict(order.user, ["id", "email", "full_name"]) if order.user else None
    return data


def _with_items(db: Session):
    return db.query(Order).options(joinedload(Order.order_items).joinedload(OrderItem.product))


def _sort(column: str, ascending: bool):
    if column not in ORDER_SORTABLE:
        raise ValidationError(f"Cannot sort by '{column}'", "orderBy")
    col = getattr(Order, column)
    return col.asc() if ascending else col.desc()


def _page(q, page: int, page_size: int, order_clause):
    page = max(1, page)
    page_size = max(1, page_size)
    total = q.count()
    rows = q.order_by(order_clause).offset((page - 1) * page_size).limit(page_size).all()
    pagination = {"page": page, "pageSize": page_size, "totalPages": math.ceil(total / page_size)}
    return rows, total, pagination


def list_user_orders(db: Session, user_id: str, page: int = 1, page_size: int = 10,
                     status: Optional[str] = None, payment_status: Optional[str] = None,
                     order_by: str = "created_at", ascending: bool = False) -> dict:
    q = db.query(Order).filter(Order.user_id == user_id)
    if status:
        q = q.filter(Order.status == status)
    if payment_status:
        q = q.filter(Order.payment_status == payment_status)

    rows, total, pagination = _page(q, page, page_size, _sort(order_by, ascending))
    return {"data": [serialize_order(o) for o in rows], "count": total, "pagination": pagination}


def _optional_int(value, field: str, low: int, high: int) -> Optional[int]:
    if value is None or str(value).strip() in ("", "all"):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}", field)
    if not low <= number <= high:
        raise ValidationError(f"Invalid {field}", field)
    return number


def created_window(date=None, month=None, year=None,
                   now: Optional[datetime] = None) -> Optional[Tuple[datetime, datetime]]:
    """
    Bounds on ``created_at`` for the admin order filters.

    ``date`` (YYYY-MM-DD) selects one day and wins over month/year, but a day
    outside the chosen month or year matches nothing. A month without a year
    means that month of the current year. Returns None when nothing is filtered.
    """
    month = _optional_int(month, "month", 1, 12)
    year = _optional_int(year, "year", 1, 9999)

    if date and str(date).strip() not in ("", "all"):
        try:
            day = datetime.strptime(str(date).strip(), "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError("Invalid date, expected YYYY-MM-DD", "date")
        start, end = day_bounds(day)
        if (year is not None and day.year != year) or (month is not None and day.month != month):
            return start, start
        return start, end

    if month is None and year is None:
        return None
    if year is None:
        year = (now or utcnow()).year
    return period_bounds(year, month)


def list_all_orders(db: Session, page: int = 1, page_size: int = 10,
                    status: Optional[str] = None, search: Optional[str] = None,
                    date: Optional[str] = None, month=None, year=None) -> dict:
    """Admin listing across every customer."""
    q = db.query(Order)
    if status and status != "all":
        q = q.filter(Order.status == status)
    if search and search.strip():
        term = f"%{search.strip()}%"
        q = q.filter(or_(
            Order.order_number.ilike(term),
            Order.customer_name.ilike(term),
            Order.customer_email.ilike(term),
        ))
    window = created_window(date, month, year)
    if window:
        q = q.filter(Order.created_at >= window[0], Order.created_at < window[1])

    rows, total, pagination = _page(q, page, page_size, Order.created_at.desc())
    return {"data": [serialize_order(o) for o in rows], "count": total, "pagination": pagination}


def get_order(db: Session, order_id: str, user_id: Optional[str] = None) -> Order:
    q = _with_items(db).filter(Order.id == order_id)
    if user_id:
        q = q.filter(Order.user_id == user_id)
    order = q.first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def create_order(db: Session, payload: OrderCreate) -> Order:
    items = [item.model_dump() for item in payload.order_items]
    validate_order({"user_id": payload.user_id, "items": items, "total_amount": payload.total_amount})
    if payload.total_amount <= 0:
        raise ValidationError("Tổng tiền phải lớn hơn 0", "total_amount")

    try:
        order = Order(
            order_number=generate_order_number(),
            user_id=payload.user_id,
            total_amount=float(payload.total_amount),
            shipping_fee=payload.shipping_fee,
            payment_method=payload.payment_method,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            customer_phone=payload.customer_phone,
            shipping_address=payload.shipping_address,
            notes=payload.notes,
            status="pending",
            payment_status="pending",
            items=items,
        )
        db.add(order)
        db.flush()

        for item in payload.order_items:
            db.add(OrderItem(
                order_id=order.id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
            ))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"[Orders] Created {order.order_number} for user {payload.user_id}")
    publish_change("orders", "INSERT", new=to_dict(order))
    return get_order(db, order.id)


def update_order_status(db: Session, order_id: str, status: Optional[str] = None,
                        payment_status: Optional[str] = None) -> Order:
    if not status and not payment_status:
        raise ValidationError("status or payment_status is required")
    if status and status not in ORDER_STATUSES:
        raise ValidationError(f"Invalid status '{status}'", "status")
    if payment_status and payment_status not in PAYMENT_STATUSES:
        raise ValidationError(f"Invalid payment_status '{payment_status}'", "payment_status")

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    old = to_dict(order)
    if status:
        order.status = status
    if payment_status:
        order.payment_status = payment_status
    db.commit()
    db.refresh(order)
    logger.info(f"[Orders] {order_id} -> status={order.status} payment={order.payment_status}")
    publish_change("orders", "UPDATE", new=to_dict(order), old=old)
    return order


def order_stats(db: Session, user_id: str) -> dict:
    by_status = (
        db.query(Order.status, func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.user_id == user_id)
        .group_by(Order.status)
        .all()
    )
    total_orders = db.query(func.count(Order.id)).filter(Order.user_id == user_id).scalar()
    total_spent = (
        db.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.user_id == user_id, Order.payment_status == "completed")
        .scalar()
    )
    return {
        "total_orders": total_orders or 0,
        "total_spent": float(total_spent or 0),
        "by_status": [
            {"status": s, "count": c, "total_amount": float(t or 0)} for s, c, t in by_status
        ],
    }

