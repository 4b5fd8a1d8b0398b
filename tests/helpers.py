"""Shared test helpers: fixed clock, payment factories, fake Razorpay client, SQLite runner."""
import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.db.session import Base
import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.models.device import Device
from app.models.device_map import DeviceAlias
from app.models.session import Session
from app.models.support_request import SupportRequest
from app.schemas.razorpay import RazorpayPayment, RazorpaySubscription
from app.services.razorpay_client import RazorpayAPIError

# 2024-03-10 12:00 UTC == 17:30 IST
FIXED_NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
# Midnight IST on 2024-03-10
TODAY_START = 1710009000
DAY = 86400


def payment_dict(
    payment_id: str,
    status: str = "captured",
    amount: int = 10000,
    created_at: int = TODAY_START + 3600,
    contact: str = "+910000000000",
    email: str = "user@example.com",
    notes: Any = None,
) -> Dict[str, Any]:
    return {
        "id": payment_id,
        "entity": "payment",
        "amount": amount,
        "currency": "INR",
        "status": status,
        "method": "upi",
        "email": email,
        "contact": contact,
        "notes": notes if notes is not None else [],
        "created_at": created_at,
        "captured": status == "captured",
    }


def make_payment(payment_id: str, device_id: Optional[str] = None, **kwargs: Any) -> RazorpayPayment:
    if device_id is not None:
        kwargs["notes"] = {"device_id": device_id}
    return RazorpayPayment.model_validate(payment_dict(payment_id, **kwargs))


def make_subscription(sub_id: str, device_id: Optional[str], status: str, created_at: int) -> RazorpaySubscription:
    return RazorpaySubscription.model_validate({
        "id": sub_id,
        "entity": "subscription",
        "plan_id": "plan_monthly",
        "status": status,
        "notes": {"device_id": device_id} if device_id else [],
        "created_at": created_at,
    })


class FakeClock:
    """Manually advanced monotonic clock for cache expiry"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeRazorpayClient:
    """In-memory stand-in for RazorpayClient; records every call."""

    def __init__(
        self,
        payments: Iterable[RazorpayPayment] = (),
        subscriptions: Iterable[RazorpaySubscription] = (),
        error: Optional[Exception] = None,
    ):
        self.payments = list(payments)
        self.subscriptions = list(subscriptions)
        self.error = error
        self.payment_calls: List[tuple] = []
        self.subscription_calls: List[bool] = []
        self.cleared = False

    async def fetch_all_payments(self, from_ts: Optional[int] = None, force_refresh: bool = False):
        self.payment_calls.append((from_ts, force_refresh))
        if self.error:
            raise self.error
        if from_ts is None:
            return list(self.payments)
        return [p for p in self.payments if p.created_at >= from_ts]

    async def fetch_all_subscriptions(self, force_refresh: bool = False):
        self.subscription_calls.append(force_refresh)
        if self.error:
            raise self.error
        return list(self.subscriptions)

    async def get_payment(self, payment_id: str):
        for payment in self.payments:
            if payment.id == payment_id:
                return payment
        raise RazorpayAPIError("Razorpay API error: The id provided does not exist", status_code=400)

    def clear_cache(self):
        self.cleared = True


def device(device_id: str, created_at: int, user_type: str = "free_user", images_limit: int = 5) -> Device:
    return Device(
        device_id=device_id,
        created_at=created_at,
        updated_at=created_at,
        images_limit=images_limit,
        user_type=user_type,
    )


def alias(device_id: str, name: str, created_at: int) -> DeviceAlias:
    return DeviceAlias(device_id=device_id, device_name=name, created_at=created_at, updated_at=created_at)


def session_row(session_id: str, device_id: str, created_at: int, generations: Optional[int] = 1, status: str = "completed") -> Session:
    return Session(
        session_id=session_id,
        device_id=device_id,
        total_generations=generations,
        duration_seconds=60,
        status=status,
        created_at=created_at,
        is_listened=0,
    )


def support_row(device_id: str, category: str, message: str, created_at: int, status: str = "open") -> SupportRequest:
    return SupportRequest(
        device_id=device_id,
        category=category,
        message=message,
        status=status,
        created_at=created_at,
        updated_at=created_at,
    )


async def create_test_db(db_path, rows: Iterable[Any] = ()):
    """
    Fresh SQLite file database with the dashboard tables and `rows` inserted.
    NullPool so no connection outlives the event loop that opened it.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    rows = list(rows)
    if rows:
        async with factory() as session:
            session.add_all(rows)
            await session.commit()
    return engine, factory


def run_with_db(db_path, rows: Iterable[Any], body: Callable[[async_sessionmaker], Awaitable[Any]]):
    """Run `body(session_factory)` against a seeded SQLite database on a fresh event loop."""
    async def _main():
        engine, factory = await create_test_db(db_path, rows)
        try:
            return await body(factory)
        finally:
            await engine.dispose()

    return asyncio.run(_main())


def seed_db(db_path, rows: Iterable[Any] = ()) -> async_sessionmaker:
    """Seed a SQLite database and return a session factory usable from any event loop."""
    _engine, factory = asyncio.run(create_test_db(db_path, rows))
    return factory
