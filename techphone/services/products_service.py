import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from techphone.core.exceptions import NotFoundError
from techphone.models.orm import Product, to_dict
from techphone.services.product_filters import ProductQuery
from techphone.services.realtime import publish_change
from techphone.utils.helpers import total_pages, utcnow
from techphone.utils.validators import validate_product

logger = logging.getLogger(__name__)


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def list_products(db: Session, query: ProductQuery) -> dict:
    q = query.apply_filters(db.query(Product))
    total = q.count() if query.count else None
    rows = query.apply_ordering(q).all()

    return {
        "data": [to_dict(r, query.fields or None) for r in rows],
        "count": total,
        "pagination": {
            "page": query.page,
            "pageSize": query.page_size,
            "totalPages": total_pages(total, query.page_size),
        },
    }


def search_products(db: Session, q: Optional[str], limit: Optional[int] = None) -> dict:
    if not q or not q.strip():
        return {"data": []}
    query = ProductQuery.for_search(q.strip(), limit)
    rows = query.apply_ordering(query.apply_filters(db.query(Product))).all()
    return {"data": [to_dict(r, query.fields) for r in rows]}


def get_product(db: Session, product_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def create_product(db: Session, data: Dict[str, Any]) -> Product:
    validate_product(data)
    product = Product(**_clean(data))
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info(f"[Products] Created {product.id}")
    publish_change("products", "INSERT", new=to_dict(product))
    return product


def update_product(db: Session, product_id: str, data: Dict[str, Any]) -> Product:
    product = get_product(db, product_id)
    old = to_dict(product)
    for key, value in _clean(data).items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    logger.info(f"[Products] Updated {product_id}")
    publish_change("products", "UPDATE", new=to_dict(product), old=old)
    return product


def soft_delete_product(db: Session, product_id: str) -> Product:
    product = get_product(db, product_id)
    old = to_dict(product)
    product.deleted_at = utcnow()
    db.commit()
    db.refresh(product)
    logger.info(f"[Products] Soft-deleted {product_id}")
    publish_change("products", "UPDATE", new=to_dict(product), old=old)
    return product


def restore_product(db: Session, product_id: str) -> Product:
    product = get_product(db, product_id)
    old = to_dict(product)
    product.deleted_at = None
    db.commit()
    db.refresh(product)
    logger.info(f"[Products] Restored {product_id}")
    publish_change("products", "UPDATE", new=to_dict(product), old=old)
    return product
