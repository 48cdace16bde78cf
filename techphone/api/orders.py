from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from techphone.api.deps import ensure_self_or, get_current_user, require_permission
from techphone.core.permissions import PERMISSIONS, has_permission
from techphone.db.session import get_db
from techphone.models.orm import Profile
from techphone.models.schemas import OrderCreate, OrderStatusUpdate
from techphone.services import orders_service
from techphone.utils.notifications import ToastQueue

router = APIRouter()

@router.get("")
def list_orders(
    user_id: Optional[str] = None,
    page: int = 1,
    page_size: int = Query(10, alias="pageSize"),
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = None,
    order_by: str = Query("created_at", alias="orderBy"),
    ascending: bool = False,
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="user_id is required")
    ensure_self_or(user, user_id, PERMISSIONS["ORDER_MANAGE"])
    return orders_service.list_user_orders(
        db, user_id, page=page, page_size=page_size, status=status_filter,
        payment_status=payment_status, order_by=order_by, ascending=ascending,
    )

@router.get("/all")
def all_orders(
    page: int = 1,
    page_size: int = Query(10, alias="pageSize"),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    date: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[str] = None,
    db: Session = Depends(get_db),
    admin=Depends(require_permission(PERMISSIONS["ORDER_MANAGE"])),
):
    """``date`` is YYYY-MM-DD; ``month``/``year`` accept "all" for no filter."""
    return orders_service.list_all_orders(
        db, page=page, page_size=page_size, status=status_filter, search=search,
        date=date, month=month, year=year,
    )

@router.get("/stats/{user_id}")
def order_stats(user_id: str, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    ensure_self_or(user, user_id, PERMISSIONS["ORDER_MANAGE"])
    return {"data": orders_service.order_stats(db, user_id)}

@router.get("/{order_id}")
def get_order(order_id: str, user_id: Optional[str] = None, db: Session = Depends(get_db),
              user: Profile = Depends(get_current_user)):
    if not has_permission(user.role, PERMISSIONS["ORDER_MANAGE"]):
        # customers only ever see their own orders
        user_id = user.id
    order = orders_service.get_order(db, order_id, user_id)
    return {"data": orders_service.serialize_order(order, product_fields=None, include_user=True)}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, db: Session = Depends(get_db),
                 user: Profile = Depends(require_permission(PERMISSIONS["ORDER_CREATE"]))):
    if not payload.user_id:
        payload.user_id = user.id
    ensure_self_or(user, payload.user_id, PERMISSIONS["ORDER_MANAGE"])

    order = orders_service.create_order(db, payload)
    toasts = ToastQueue()
    toasts.success(f"Đặt hàng thành công! Mã đơn hàng: {order.order_number}")
    return {"data": orders_service.serialize_order(order), "toasts": toasts.drain()}

@router.put("/{order_id}/status")
def update_order_status(order_id: str, payload: OrderStatusUpdate, db: Session = Depends(get_db),
                        admin=Depends(require_permission(PERMISSIONS["ORDER_UPDATE"]))):
    order = orders_service.update_order_status(db, order_id, payload.status, payload.payment_status)
    return {"data": orders_service.serialize_order(order)}
