import asyncio
import os
from time import monotonic
from typing import Any

import httpx

from finance_tracker.core import settings
from finance_tracker.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES_CACHE_TTL_SECONDS = 60.0
DEFAULT_TIMEOUT_SECONDS = 30.0

TRANSACTION_SELECT = "*,categories(name,color,icon)"


def _build_headers(key: str | None, access_token: str | None) -> dict[str, str]:
    return {
        "apikey": key or "",
        "Authorization": f"Bearer {access_token or key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


class SupabaseClient:
    """
    Thin async client for the PostgREST interface of the hosted backend.

    Reads return empty results and writes return a failure value when the
    backend is unconfigured or a request fails; errors are logged, not raised.
    """

    def __init__(
        self,
        base_url: str | None = None,
        key: str | None = None,
        access_token: str | None = None,
        client: httpx.AsyncClient | None = None,
        categories_cache_ttl: float | None = None,
    ):
        self.base_url = (base_url or os.getenv("SUPABASE_URL") or "").rstrip("/") or None
        self.key = key or os.getenv("SUPABASE_KEY")
        self.access_token = access_token or os.getenv("SUPABASE_ACCESS_TOKEN")
        self.headers = _build_headers(self.key, self.access_token)
        self._client = client
        self._client_lock = asyncio.Lock()
        self._cache_lock = asyncio.Lock()
        self._categories_cache: list[dict[str, Any]] | None = None
        self._categories_cache_expires_at = 0.0
        if categories_cache_ttl is None:
            categories_cache_ttl = settings.get_env_float(
                "SUPABASE_CATEGORIES_TTL",
                DEFAULT_CATEGORIES_CACHE_TTL_SECONDS,
            )
        self._categories_cache_ttl = max(0.0, categories_cache_ttl)

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.key)

    def refresh(
        self,
        base_url: str | None = None,
        key: str | None = None,
        access_token: str | None = None,
    ) -> None:
        base_value = base_url if base_url is not None else os.getenv("SUPABASE_URL")
        self.base_url = (base_value or "").rstrip("/") or None
        self.key = (key if key is not None else os.getenv("SUPABASE_KEY")) or None
        token_value = access_token if access_token is not None else os.getenv("SUPABASE_ACCESS_TOKEN")
        self.access_token = token_value or None
        self.headers = _build_headers(self.key, self.access_token)
        self._categories_cache = None
        self._categories_cache_expires_at = 0.0
        self._categories_cache_ttl = max(
            0.0,
            settings.get_env_float("SUPABASE_CATEGORIES_TTL", DEFAULT_CATEGORIES_CACHE_TTL_SECONDS),
        )

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        client = self._client
        if client is not None and not client.is_closed:
            return client

        async with self._client_lock:
            # Another task may have created it while we waited.
            client = self._client
            if client is None or client.is_closed:
                client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECONDS)
                self._client = client
            return client

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _get_cached_categories(self, *, allow_stale: bool = False) -> list[dict[str, Any]] | None:
        if self._categories_cache is None or self._categories_cache_ttl <= 0:
            return None
        if allow_stale:
            return self._categories_cache
        if monotonic() >= self._categories_cache_expires_at:
            return None
        return self._categories_cache

    def _cache_categories(self, categories: list[dict[str, Any]]) -> None:
        """Must be called while holding _cache_lock."""
        if self._categories_cache_ttl <= 0:
            return
        self._categories_cache = categories
        self._categories_cache_expires_at = monotonic() + self._categories_cache_ttl

    async def _fetch_categories_from_api(self, client: httpx.AsyncClient) -> list[dict[str, Any]]:
        response = await client.get(
            self._table_url("categories"),
            headers=self.headers,
            params={"select": "*", "order": "name.asc"},
        )
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, list) else []

    async def get_categories(self, *, use_cache: bool = True) -> list[dict[str, Any]]:
        if not self.is_configured:
            return []

        if not use_cache:
            client = await self._get_client()
            try:
                return await self._fetch_categories_from_api(client)
            except Exception as exc:
                logger.error("[STORE] Error fetching categories: %s", exc)
                return []

        async with self._cache_lock:
            cached = self._get_cached_categories()
            if cached is not None:
                return cached

            client = await self._get_client()
            try:
                categories = await self._fetch_categories_from_api(client)
            except Exception as exc:
                logger.error("[STORE] Error fetching categories: %s", exc)
                cached = self._get_cached_categories(allow_stale=True)
                if cached is not None:
                    logger.warning("[STORE] Serving %d stale categories.", len(cached))
                    return cached
                return []
            self._cache_categories(categories)
            return categories

    async def list_transactions(self, user_id: str, limit: int = 50) -> list[dict[str, Any]]:
        if not self.is_configured:
            logger.error("[STORE] Backend credentials missing.")
            return []

        client = await self._get_client()
        try:
            response = await client.get(
                self._table_url("transactions"),
                headers=self.headers,
                params={
                    "select": TRANSACTION_SELECT,
                    "user_id": f"eq.{user_id}",
                    "order": "date.desc",
                    "limit": limit,
                },
            )
            response.raise_for_status()
            data = response.json()
            return data if isinstance(data, list) else []
        except Exception as exc:
            logger.error("[STORE] Error fetching transactions for user %s: %s", user_id, exc)
            return []

    async def insert_transaction(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        if not self.is_configured:
            logger.error("[STORE] Backend credentials missing.")
            return None

        client = await self._get_client()
        try:
            response = await client.post(
                self._table_url("transactions"),
                headers={**self.headers, "Prefer": "return=representation"},
                params={"select": TRANSACTION_SELECT},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except Exception as exc:
            logger.error("[STORE] Error inserting transaction: %s", exc)
            return None

        if isinstance(data, list):
            return data[0] if data else None
        return data if isinstance(data, dict) else None

    async def update_transaction(self, transaction_id: str, amount: float, description: str) -> bool:
        if not self.is_configured:
            return False

        client = await self._get_client()
        try:
            response = await client.patch(
                self._table_url("transactions"),
                headers=self.headers,
                params={"id": f"eq.{transaction_id}"},
                json={"amount": amount, "description": description},
            )
            response.raise_for_status()
            return True
        except Exception as exc:
            logger.error("[STORE] Error updating transaction %s: %s", transaction_id, exc)
            return False

    async def delete_transaction(self, transaction_id: str) -> bool:
        if not self.is_configured:
            return False

        client = await self._get_client()
        try:
            response = await client.delete(
                self._table_url("transactions"),
                headers=self.headers,
                params={"id": f"eq.{transaction_id}"},
            )
            response.raise_for_status()
            return True
        except Exception as exc:
            logger.error("[STORE] Error deleting transaction %s: %s", transaction_id, exc)
            return False
