from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session
from typing import Optional

from techphone.api.deps import require_permission
from techphone.core.permissions import PERMISSIONS
from techphone.db.session import get_db
from techphone.models.orm import to_dict
from techphone.models.schemas import ProductIn, ProductUpdate
from techphone.services import products_service
from techphone.services.product_filters import ProductQuery

router = APIRouter()

@router.get("/search")
def search_products(q: Optional[str] = None, limit: Optional[int] = None, db: Session = Depends(get_db)):
    # declared before /{product_id} so "search" is never taken for an id
    return products_service.search_products(db, q, limit)

@router.get("")
def list_products(request: Request, db: Session = Depends(get_db)):
    try:
        query = ProductQuery.from_params(request.query_params)
    except SchemaError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err.get("loc", ()))
        raise HTTPException(status_code=400, detail=f"{field}: {err['msg']}" if field else err["msg"])
    return products_service.list_products(db, query)

@router.get("/{product_id}")
def get_product(product_id: str, db: Session = Depends(get_db)):
    return {"data": to_dict(products_service.get_product(db, product_id))}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductIn, db: Session = Depends(get_db),
                   user=Depends(require_permission(PERMISSIONS["PRODUCT_CREATE"]))):
    product = products_service.create_product(db, payload.model_dump())
    return {"data": to_dict(product)}

@router.put("/{product_id}")
def update_product(product_id: str, payload: ProductUpdate, db: Session = Depends(get_db),
                   user=Depends(require_permission(PERMISSIONS["PRODUCT_UPDATE"]))):
    product = products_service.update_product(db, product_id, payload.model_dump())
    return {"data": to_dict(product)}

@router.delete("/{product_id}")
def delete_product(product_id: str, db: Session = Depends(get_db),
                   user=Depends(require_permission(PERMISSIONS["PRODUCT_DELETE"]))):
    product = products_service.soft_delete_product(db, product_id)
    return {"data": to_dict(product)}

@router.post("/{product_id}/restore")
def restore_product(product_id: str, db: Session = Depends(get_db),
                    user=Depends(require_permission(PERMISSIONS["PRODUCT_MANAGE"]))):
    product = products_service.restore_product(db, product_id)
    return {"data": to_dict(product)}
