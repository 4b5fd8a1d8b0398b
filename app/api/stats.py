"""
Overview stat cards: headline counts from the app database and payment
totals from Razorpay.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.api.deps import fetch_failed, get_razorpay_client, get_session_factory
from app.core.timezone import DateRange
from app.schemas.stats import MetricStat, PaymentStats, StatsSummary
from app.services import dashboard_queries
from app.services.payments import get_payment_stats
from app.services.razorpay_client import RazorpayClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=StatsSummary)
async def get_stats(session_factory: async_sessionmaker = Depends(get_session_factory)):
    """All headline counts in one call"""
    try:
        return await dashboard_queries.get_stats(session_factory)
    except Exception:
        logger.exception("[STATS] Failed to fetch stats")
        raise fetch_failed("stats")


@router.get("/devices", response_model=MetricStat)
async def get_device_stats(session_factory: async_sessionmaker = Depends(get_session_factory)):
    try:
        total, today = await dashboard_queries.get_device_counts(session_factory)
    except Exception:
        logger.exception("[STATS] Failed to fetch device stats")
        raise fetch_failed("device stats")
    return MetricStat(total=total, today=today)


@router.get("/sessions", response_model=MetricStat)
async def get_session_stats(session_factory: async_sessionmaker = Depends(get_session_factory)):
    try:
        total, today = await dashboard_queries.get_session_counts(session_factory)
    except Exception:
        logger.exception("[STATS] Failed to fetch session stats")
        raise fetch_failed("session stats")
    return MetricStat(total=total, today=today)


@router.get("/generations", response_model=MetricStat)
async def get_generation_stats(session_factory: async_sessionmaker = Depends(get_session_factory)):
    try:
        total, today = await dashboard_queries.get_generation_counts(session_factory)
    except Exception:
        logger.exception("[STATS] Failed to fetch generation stats")
        raise fetch_failed("generation stats")
    return MetricStat(total=total, today=today)


@router.get("/premium", response_model=MetricStat)
async def get_premium_stats(session_factory: async_sessionmaker = Depends(get_session_factory)):
    try:
        total = await dashboard_queries.get_premium_count(session_factory)
    except Exception:
        logger.exception("[STATS] Failed to fetch premium stats")
        raise fetch_failed("premium stats")
    return MetricStat(total=total)


@router.get("/payments", response_model=PaymentStats)
async def get_payments_stats(
    date_range: DateRange = Query("all", alias="range"),
    client: RazorpayClient = Depends(get_razorpay_client),
):
    """Payment counts and captured revenue (rupees), test accounts excluded"""
    try:
        return await get_payment_stats(client, date_range)
    except Exception:
        logger.exception("[STATS] Failed to fetch payment stats")
        raise fetch_failed("payment stats")
