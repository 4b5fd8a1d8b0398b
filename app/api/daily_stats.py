import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.api.deps import fetch_failed, get_razorpay_client, get_session_factory
from app.core.config import settings
from app.schemas.stats import DailyStatsResponse
from app.services.daily_stats import get_daily_stats as build_daily_stats
from app.services.razorpay_client import RazorpayClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/daily-stats", response_model=DailyStatsResponse)
async def get_daily_stats(
    days: int = Query(settings.DAILY_STATS_DEFAULT_DAYS, ge=1, le=settings.DAILY_STATS_MAX_DAYS),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    client: RazorpayClient = Depends(get_razorpay_client),
):
    """Per-day chart series for the last `days` IST days, oldest first"""
    try:
        return await build_daily_stats(session_factory, client, days)
    except Exception:
        logger.exception("[DAILY_STATS] Failed to fetch daily stats")
        raise fetch_failed("daily stats")
