"""
Daily chart series: app activity from the database joined with Razorpay
payments, as parallel arrays over the same IST day labels.
"""
import asyncio
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.schemas.stats import DailyStatsResponse
from app.services.dashboard_queries import get_daily_db_stats
from app.services.payments import get_daily_payment_stats
from app.services.razorpay_client import RazorpayClient


async def get_daily_stats(
    session_factory: async_sessionmaker,
    client: RazorpayClient,
    days: int = 14,
    now: Optional[datetime] = None,
) -> DailyStatsResponse:
    """
    Both halves run concurrently. They are handed the same `now`, but the
    payments half may be served from a cache filled up to two minutes
    earlier; that skew is left as is.
    """
    now = now or datetime.now(timezone.utc)

    db_stats, payment_stats = await asyncio.gather(
        get_daily_db_stats(session_factory, days, now=now),
        get_daily_payment_stats(client, days, now=now),
    )

    return DailyStatsResponse(
        dates=db_stats.dates,
        devices=db_stats.devices,
        sessions=db_stats.sessions,
        generations=db_stats.generations,
        payments=payment_stats.captured,
        revenue=payment_stats.revenue,
    )
