"""
Product listing filters.

One ``ProductQuery`` describes a catalog request (flat query-string params in,
typed fields out). Its filters are produced once, in a fixed order chosen for
index selectivity, and rendered either onto a SQLAlchemy query (REST layer)
or onto the Supabase fluent builder (direct BaaS access), so both access
paths always agree on what a given set of params means.
"""

from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import or_

from techphone.core.config import DEFAULT_PAGE_SIZE, SEARCH_LIMIT
from techphone.models.orm import Product
from techphone.utils.cache import stable_key
from techphone.utils.categories import expand_category_values

PRODUCT_COLUMNS = tuple(c.name for c in Product.__table__.columns)
SORTABLE_COLUMNS = ("created_at", "updated_at", "price", "name", "rating", "stock", "discount", "brand")
SEARCH_FIELDS = ["id", "name", "price", "image", "category"]

# query-string name -> field name
PARAM_ALIASES = {
    "inCategory": "in_category",
    "priceGte": "price_gte",
    "priceLte": "price_lte",
    "ratingGte": "rating_gte",
    "isSale": "is_sale",
    "isTrending": "is_trending",
    "isBestSeller": "is_best_seller",
    "onSaleOnly": "on_sale_only",
    "isActive": "is_active",
    "pageSize": "page_size",
    "orderBy": "order_by",
    "search": "keyword",
}
LIST_PARAMS = ("categories", "in_category", "brands", "fields")
FLAG_PARAMS = ("featured", "is_sale", "is_trending", "is_best_seller", "on_sale_only")

Filter = Tuple[str, Any, Any]


def _split(value) -> List[str]:
    if isinstance(value, (list, tuple)):
        items = []
        for v in value:
            items.extend(_split(v))
        return items
    return [v.strip() for v in str(value).split(",") if v.strip()]


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductQuery(BaseModel):
    category: Optional[str] = None
    categories: List[str] = []
    in_category: List[str] = []
    condition: Optional[str] = None
    brand: Optional[str] = None
    brands: List[str] = []
    price_gte: Optional[float] = None
    price_lte: Optional[float] = None
    rating_gte: Optional[float] = None
    featured: bool = False
    is_sale: bool = False
    is_trending: bool = False
    is_best_seller: bool = False
    on_sale_only: bool = False
    keyword: Optional[str] = None
    is_active: bool = True

    page: int = 1
    page_size: int = Field(DEFAULT_PAGE_SIZE)
    order_by: str = "created_at"
    ascending: bool = False
    fields: List[str] = []
    count: bool = True

    @field_validator("page", "page_size", mode="before")
    @classmethod
    def _at_least_one(cls, v):
        try:
            return max(1, int(v))
        except (TypeError, ValueError):
            return 1

    @field_validator("order_by")
    @classmethod
    def _sortable(cls, v):
        if v not in SORTABLE_COLUMNS:
            raise ValueError(f"Cannot sort by '{v}'")
        return v

    @field_validator("fields")
    @classmethod
    def _known_fields(cls, v):
        unknown = [f for f in v if f not in PRODUCT_COLUMNS]
        if unknown:
            raise ValueError(f"Unknown fields: {', '.join(unknown)}")
        return v

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ProductQuery":
        """Build from raw query-string params; raises ValueError on bad input."""
        data = {}
        for raw_key, value in params.items():
            key = PARAM_ALIASES.get(raw_key, raw_key)
            if key == "limit":
                key = "page_size"
                if "pageSize" in params or "page_size" in params:
                    continue
            if key not in cls.model_fields or value is None or value == "":
                continue

            if key in LIST_PARAMS:
                data[key] = _split(value)
            elif key in FLAG_PARAMS:
                data[key] = str(value).lower() == "true"
            elif key == "is_active":
                data[key] = str(value).lower() != "false"
            elif key == "ascending":
                data[key] = str(value).lower() == "true"
            elif key == "count":
                data[key] = str(value).lower() != "null"
            else:
                data[key] = value

        if data.get("fields") == ["*"]:
            data.pop("fields")
        return cls(**data)

    @classmethod
    def for_search(cls, q: str, limit: Optional[int] = None) -> "ProductQuery":
        return cls(condition="new", keyword=q, page_size=limit or SEARCH_LIMIT,
                   fields=SEARCH_FIELDS, count=False)

    # --- derived values ---

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def category_variants(self) -> List[str]:
        if self.category and self.category != "all":
            return expand_category_values([self.category])
        if self.categories:
            return expand_category_values(self.categories)
        if self.in_category:
            return expand_category_values(self.in_category)
        return []

    def to_params(self) -> dict:
        """Inverse of ``from_params``: query-string params for the REST listing."""
        names = {field: param for param, field in PARAM_ALIASES.items()}
        params = {}
        for key, value in self.model_dump(exclude_defaults=True).items():
            if isinstance(value, list):
                value = ",".join(value)
            elif key == "count":
                value = "null"
            elif isinstance(value, bool):
                value = "true" if value else "false"
            params[names.get(key, key)] = value
        return params

    def cache_key(self) -> str:
        return stable_key(self.model_dump(exclude_defaults=True))

    def filters(self) -> List[Filter]:
        """Ordered (op, column, value) triples; most selective first, text search last."""
        out: List[Filter] = []

        if self.is_active:
            out.append(("is_null", "deleted_at", None))
        if self.condition:
            out.append(("eq", "condition", self.condition))

        for flag in ("featured", "is_sale", "is_trending", "is_best_seller"):
            if getattr(self, flag):
                out.append(("eq", flag, True))

        variants = self.category_variants()
        if variants:
            out.append(("in", "category", variants))

        if self.brand and self.brand != "all":
            out.append(("eq", "brand", self.brand))
        elif self.brands:
            out.append(("in", "brand", list(self.brands)))

        if self.price_gte is not None:
            out.append(("gte", "price", self.price_gte))
        if self.price_lte is not None:
            out.append(("lte", "price", self.price_lte))
        if self.rating_gte is not None:
            out.append(("gte", "rating", self.rating_gte))
        if self.on_sale_only:
            out.append(("gt", "discount", 0))

        keyword = (self.keyword or "").strip()
        if keyword:
            out.append(("search", ("name", "brand"), keyword))
        return out

    # --- SQLAlchemy ---

    def apply_filters(self, query):
        """Works on both ``Session.query(...)`` and ``select(...)``."""
        for op, column, value in self.filters():
            if op == "search":
                pattern = f"%{_escape_like(value)}%"
                query = query.filter(or_(*[getattr(Product, c).ilike(pattern, escape="\\") for c in column]))
                continue
            col = getattr(Product, column)
            if op == "is_null":
                query = query.filter(col.is_(None))
            elif op == "eq":
                query = query.filter(col == value)
            elif op == "in":
                query = query.filter(col.in_(value))
            elif op == "gte":
                query = query.filter(col >= value)
            elif op == "lte":
                query = query.filter(col <= value)
            elif op == "gt":
                query = query.filter(col > value)
        return query

    def apply_ordering(self, query):
        col = getattr(Product, self.order_by)
        query = query.order_by(col.asc() if self.ascending else col.desc())
        return query.offset(self.offset).limit(self.page_size)

    # --- Supabase / PostgREST ---

    def select_clause(self) -> str:
        return ",".join(self.fields) if self.fields else "*"

    def apply_to_builder(self, builder):
        for op, column, value in self.filters():
            if op == "is_null":
                builder = builder.is_(column, "null")
            elif op == "eq":
                builder = builder.eq(column, value)
            elif op == "in":
                builder = builder.in_(column, value)
            elif op == "gte":
                builder = builder.gte(column, value)
            elif op == "lte":
                builder = builder.lte(column, value)
            elif op == "gt":
                builder = builder.gt(column, value)
            elif op == "search":
                # PostgREST uses commas and parentheses as separators inside or=()
                term = value.replace(",", " ").replace("(", " ").replace(")", " ")
                builder = builder.or_(",".join(f"{c}.ilike.%{term}%" for c in column))

        builder = builder.order(self.order_by, desc=not self.ascending)
        return builder.range(self.offset, self.offset + self.page_size - 1)
