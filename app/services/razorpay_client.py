"""
Read-only Razorpay REST client.

Lists payments and subscriptions for the dashboard. Full enumerations are
cached in memory for a short TTL (keyed by the lower-bound timestamp) so
that table page flips and overview widgets don't re-walk the whole payment
history on every request. The cache holds raw upstream data; test-account
filtering is applied by each consumer.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from app.core.cache import TTLCache
from app.core.config import settings
from app.schemas.razorpay import RazorpayCollection, RazorpayPayment, RazorpaySubscription

logger = logging.getLogger(__name__)

# Cache key for enumerations without a lower bound
ALL_TIME_CACHE_KEY = "all"
SUBSCRIPTIONS_CACHE_KEY = "subscriptions"


class RazorpayAPIError(Exception):
    """Any failed call to the Razorpay API (HTTP error status or transport failure)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RazorpayClient:
    """
    Owns the HTTP client and both caches. Construct once at process start
    (see the app lifespan) and share it across requests.
    """

    def __init__(
        self,
        key_id: Optional[str],
        key_secret: Optional[str],
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 30.0,
        cache_ttl_seconds: float = 120,
        batch_size: int = 100,
        max_skip: int = 10000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.batch_size = batch_size
        self.max_skip = max_skip
        self._http = httpx.AsyncClient(
            base_url=base_url,
            auth=httpx.BasicAuth(key_id or "", key_secret or ""),
            timeout=timeout,
            transport=transport,
        )
        self.payments_cache = TTLCache(cache_ttl_seconds, clock=clock)
        self.subscriptions_cache = TTLCache(cache_ttl_seconds, clock=clock)

    @classmethod
    def from_settings(cls, **overrides: Any) -> "RazorpayClient":
        if not settings.RAZORPAY_KEY_ID or not settings.RAZORPAY_KEY_SECRET:
            logger.warning("[RAZORPAY] RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET not set; API calls will fail")
        options = dict(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET,
            base_url=settings.RAZORPAY_API_BASE,
            timeout=settings.RAZORPAY_TIMEOUT_SECONDS,
            cache_ttl_seconds=settings.PAYMENTS_CACHE_TTL_SECONDS,
            batch_size=settings.PAYMENTS_BATCH_SIZE,
            max_skip=settings.PAYMENTS_MAX_SKIP,
        )
        options.update(overrides)
        return cls(**options)

    async def close(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make an authenticated GET request to the Razorpay API"""
        try:
            response = await self._http.get(path, params=params or {})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_text = e.response.text
            try:
                error_json = e.response.json()
                error_text = error_json.get("error", {}).get("description", error_text)
            except (ValueError, AttributeError):
                pass
            logger.error(f"[RAZORPAY] API error on {path}: {error_text} (Status: {e.response.status_code})")
            raise RazorpayAPIError(
                f"Razorpay API error: {error_text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"[RAZORPAY] Request error on {path}: {str(e)}")
            raise RazorpayAPIError(f"Failed to connect to Razorpay API: {str(e)}") from e

        return response.json()

    async def _list(self, path: str, count: int, skip: int, extra: Optional[Dict[str, Any]] = None) -> RazorpayCollection:
        params: Dict[str, Any] = {"count": count, "skip": skip}
        if extra:
            params.update(extra)
        return RazorpayCollection.model_validate(await self._get(path, params))

    async def _enumerate(self, path: str, extra: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Walk a list endpoint in fixed-size batches until a short batch comes
        back or `max_skip` records have been skipped.
        """
        items: List[Dict[str, Any]] = []
        skip = 0
        while True:
            batch = await self._list(path, count=self.batch_size, skip=skip, extra=extra)
            items.extend(batch.items)

            if len(batch.items) < self.batch_size:
                break
            skip += self.batch_size
            if skip >= self.max_skip:
                logger.warning(f"[RAZORPAY] Stopped enumerating {path} at skip={skip} (safety limit)")
                break
        return items

    # Payments

    async def list_payments(self, count: int = 50, skip: int = 0, from_ts: Optional[int] = None) -> List[RazorpayPayment]:
        """One page of payments, newest first, optionally created at or after `from_ts`"""
        extra = {"from": from_ts} if from_ts is not None else None
        collection = await self._list("payments", count=count, skip=skip, extra=extra)
        return [RazorpayPayment.model_validate(item) for item in collection.items]

    async def get_payment(self, payment_id: str) -> RazorpayPayment:
        return RazorpayPayment.model_validate(await self._get(f"payments/{payment_id}"))

    async def fetch_all_payments(self, from_ts: Optional[int] = None, force_refresh: bool = False) -> List[RazorpayPayment]:
        """
        Every payment created at or after `from_ts` (all time when None).

        Served from cache within the TTL unless `force_refresh`; a fetch
        replaces the cache entry for that key.
        """
        cache_key = str(from_ts) if from_ts is not None else ALL_TIME_CACHE_KEY

        if not force_refresh:
            cached = self.payments_cache.get(cache_key)
            if cached is not None:
                logger.debug(f"[PAYMENTS] Cache hit for {cache_key} ({len(cached)} payments)")
                return cached

        extra = {"from": from_ts} if from_ts is not None else None
        raw = await self._enumerate("payments", extra=extra)
        payments = [RazorpayPayment.model_validate(item) for item in raw]

        self.payments_cache.set(cache_key, payments)
        logger.info(f"[PAYMENTS] Fetched {len(payments)} payments for {cache_key} (force_refresh={force_refresh})")
        return payments

    # Subscriptions

    async def list_subscriptions(self, count: int = 100, skip: int = 0) -> List[RazorpaySubscription]:
        collection = await self._list("subscriptions", count=count, skip=skip)
        return [RazorpaySubscription.model_validate(item) for item in collection.items]

    async def fetch_all_subscriptions(self, force_refresh: bool = False) -> List[RazorpaySubscription]:
        """Every subscription on the account, with the same caching rules as payments"""
        if not force_refresh:
            cached = self.subscriptions_cache.get(SUBSCRIPTIONS_CACHE_KEY)
            if cached is not None:
                return cached

        raw = await self._enumerate("subscriptions")
        subscriptions = [RazorpaySubscription.model_validate(item) for item in raw]

        self.subscriptions_cache.set(SUBSCRIPTIONS_CACHE_KEY, subscriptions)
        logger.info(f"[SUBSCRIPTIONS] Fetched {len(subscriptions)} subscriptions (force_refresh={force_refresh})")
        return subscriptions

    def clear_cache(self) -> None:
        """Drop every cached enumeration immediately, regardless of age"""
        self.payments_cache.clear()
        self.subscriptions_cache.clear()
        logger.info("[PAYMENTS] Cache cleared")
