from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from techphone.api.deps import require_permission
from techphone.core.permissions import PERMISSIONS, ROLES
from techphone.db.session import get_db
from techphone.models.orm import to_dict
from techphone.models.schemas import AdminUserCreate
from techphone.services import auth_service, dashboard_service

router = APIRouter()

dashboard_access = require_permission(PERMISSIONS["DASHBOARD_VIEW"])

@router.get("/stats")
def stats(db: Session = Depends(get_db), admin=Depends(dashboard_access)):
    return {"data": dashboard_service.compute_stats(db)}

@router.get("/stats/live")
def live_stats(db: Session = Depends(get_db), admin=Depends(dashboard_access)):
    """Counters kept current by the change feed; seeded from the database on first use."""
    return {"data": dashboard_service.live_stats(db)}

@router.get("/recent-orders")
def recent_orders(page: int = 1, page_size: int = Query(5, alias="pageSize"),
                  db: Session = Depends(get_db), admin=Depends(dashboard_access)):
    return dashboard_service.recent_orders(db, page=page, page_size=page_size)

@router.get("/revenue/monthly")
def revenue_monthly(year: Optional[int] = Query(None, ge=1, le=9999), db: Session = Depends(get_db),
                    admin=Depends(require_permission(PERMISSIONS["ANALYTICS_VIEW"]))):
    return {"data": dashboard_service.monthly_revenue(db, year=year)}

@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(payload: AdminUserCreate, db: Session = Depends(get_db),
                admin=Depends(require_permission(PERMISSIONS["USER_CREATE"]))):
    """Anything but "admin" creates a customer; anything but "inactive" creates an active account."""
    role = ROLES["ADMIN"] if payload.role == ROLES["ADMIN"] else ROLES["USER"]
    account_status = "inactive" if payload.status == "inactive" else "active"
    profile = auth_service.signup(db, payload.email, payload.password, payload.full_name, payload.phone,
                                  role=role, status=account_status)
    return {"data": to_dict(profile)}
