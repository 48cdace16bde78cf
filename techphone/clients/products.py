"""
Product access for callers outside the API process.

``ProductsClient`` talks to the REST API and sits behind an LRU/TTL cache and
an in-flight de-duplicator, so bursts of identical catalog requests hit the
server once. ``BaasProductsRepository`` runs the same ``ProductQuery`` straight
against Supabase.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from techphone.clients.api_client import ApiClient
from techphone.core.config import PRODUCT_CACHE_SIZE, PRODUCT_CACHE_TTL_SECONDS, QUERY_TIMEOUT_SECONDS
from techphone.core.exceptions import NotFoundError
from techphone.db.supabase import get_client
from techphone.services.product_filters import ProductQuery
from techphone.utils.cache import RequestDeduplicator, TTLCache, stable_key

logger = logging.getLogger(__name__)


def _as_query(query: Union[ProductQuery, Mapping[str, Any], None]) -> ProductQuery:
    if query is None:
        return ProductQuery()
    if isinstance(query, ProductQuery):
        return query
    return ProductQuery.from_params(query)


class ProductsClient:
    def __init__(self, api: Optional[ApiClient] = None, cache: Optional[TTLCache] = None,
                 timeout: float = QUERY_TIMEOUT_SECONDS):
        self.api = api or ApiClient()
        self.cache = cache if cache is not None else TTLCache(PRODUCT_CACHE_SIZE, PRODUCT_CACHE_TTL_SECONDS)
        self.dedup = RequestDeduplicator()
        self.timeout = timeout

    async def _bounded(self, coro):
        try:
            return await asyncio.wait_for(coro, self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"[Products] Query timeout after {self.timeout:g}s")
            raise TimeoutError(f"Query timeout after {self.timeout:g}s")

    async def _cached(self, key: str, fetch):
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        result = await self.dedup.run(key, lambda: self._bounded(fetch()))
        self.cache.set(key, result)
        return result

    async def fetch_products(self, query: Union[ProductQuery, Mapping[str, Any], None] = None) -> Dict[str, Any]:
        """Returns ``{"products": [...], "count": n}``."""
        query = _as_query(query)

        async def fetch():
            body = await self.api.get("/products", params=query.to_params())
            return {"products": body.get("data") or [], "count": body.get("count")}

        return await self._cached(f"list:{query.cache_key()}", fetch)

    async def search(self, q: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        if not q or not q.strip():
            return []
        params = {"q": q.strip()}
        if limit:
            params["limit"] = limit

        async def fetch():
            body = await self.api.get("/products/search", params=params)
            return body.get("data") or []

        return await self._cached(f"search:{stable_key(params)}", fetch)

    async def get(self, product_id: str) -> Dict[str, Any]:
        async def fetch():
            body = await self.api.get(f"/products/{product_id}")
            return body["data"]

        return await self._cached(f"product:{product_id}", fetch)

    def invalidate(self):
        self.cache.clear()
        self.dedup.clear()


class BaasProductsRepository:
    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def fetch_products(self, query: Union[ProductQuery, Mapping[str, Any], None] = None) -> Dict[str, Any]:
        query = _as_query(query)
        builder = self.client.table("products").select(query.select_clause(), count="exact" if query.count else None)
        resp = query.apply_to_builder(builder).execute()
        return {"products": resp.data or [], "count": resp.count}

    def search(self, q: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        if not q or not q.strip():
            return []
        return self.fetch_products(ProductQuery.for_search(q.strip(), limit))["products"]

    def get(self, product_id: str) -> Dict[str, Any]:
        resp = (
            self.client.table("products")
            .select("*")
            .eq("id", product_id)
            .is_("deleted_at", "null")
            .limit(1)
            .execute()
        )
        if not resp.data:
            raise NotFoundError("Product not found")
        return resp.data[0]
