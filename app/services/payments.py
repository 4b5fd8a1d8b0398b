"""
Payment statistics built on the cached Razorpay enumeration.

Test accounts (IGNORED_CONTACTS) are excluded from every statistic and from
the paid-but-free list, but not from the raw payments table.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.core.timezone import day_bounds, format_day_label, get_date_range_timestamp, start_of_day_ist
from app.schemas.razorpay import PaymentPage, RazorpayPayment
from app.schemas.stats import DailyPaymentStats, PaymentStats
from app.services.dashboard_queries import get_device_user_types
from app.services.razorpay_client import RazorpayClient
from app.utils.pagination import normalize_page, page_offset, total_pages

logger = logging.getLogger(__name__)


def is_ignored_contact(payment: RazorpayPayment, ignored_contacts: Sequence[str]) -> bool:
    return payment.contact in ignored_contacts or payment.email in ignored_contacts


def exclude_ignored(payments: Iterable[RazorpayPayment], ignored_contacts: Optional[Sequence[str]] = None) -> List[RazorpayPayment]:
    if ignored_contacts is None:
        ignored_contacts = settings.get_ignored_contacts()
    return [p for p in payments if not is_ignored_contact(p, ignored_contacts)]


def paise_to_rupees(amount: int) -> float:
    return amount / 100


def summarize_payments(payments: Sequence[RazorpayPayment]) -> PaymentStats:
    captured = [p for p in payments if p.status == "captured"]
    failed = [p for p in payments if p.status == "failed"]
    return PaymentStats(
        total_payments=len(payments),
        captured_payments=len(captured),
        failed_payments=len(failed),
        total_revenue=paise_to_rupees(sum(p.amount for p in captured)),
    )


async def get_payment_stats(
    client: RazorpayClient,
    date_range: str = "all",
    ignored_contacts: Optional[Sequence[str]] = None,
    now: Optional[datetime] = None,
) -> PaymentStats:
    from_ts = get_date_range_timestamp(date_range, now=now)
    payments = await client.fetch_all_payments(from_ts)
    return summarize_payments(exclude_ignored(payments, ignored_contacts))


def bucket_payments_by_day(payments: Sequence[RazorpayPayment], days: int, now: Optional[datetime] = None) -> DailyPaymentStats:
    """
    Captured/failed counts and captured revenue per IST day for the last
    `days` days, oldest first. Buckets are half-open [start, end).
    """
    results = DailyPaymentStats(dates=[], captured=[], failed=[], revenue=[])

    for days_ago in range(days - 1, -1, -1):
        day_start, day_end = day_bounds(days_ago, now=now)
        results.dates.append(format_day_label(day_start))

        day_payments = [p for p in payments if day_start <= p.created_at < day_end]
        captured = [p for p in day_payments if p.status == "captured"]
        failed = [p for p in day_payments if p.status == "failed"]

        results.captured.append(len(captured))
        results.failed.append(len(failed))
        results.revenue.append(paise_to_rupees(sum(p.amount for p in captured)))

    return results


async def get_daily_payment_stats(
    client: RazorpayClient,
    days: int = 14,
    ignored_contacts: Optional[Sequence[str]] = None,
    now: Optional[datetime] = None,
) -> DailyPaymentStats:
    # Pin "now" so every bucket boundary comes from the same instant
    now = now or datetime.now(timezone.utc)
    payments = await client.fetch_all_payments(start_of_day_ist(days, now=now))
    return bucket_payments_by_day(exclude_ignored(payments, ignored_contacts), days, now=now)


async def get_payments_paginated(
    client: RazorpayClient,
    page: int = 1,
    page_size: int = 100,
    date_range: str = "all",
    status: str = "all",
    now: Optional[datetime] = None,
) -> PaymentPage:
    """
    Payments table. Razorpay can't filter by status, so the whole range is
    materialised (cached), filtered, then sliced in memory.
    """
    page, page_size = normalize_page(page, page_size)
    from_ts = get_date_range_timestamp(date_range, now=now)

    payments = await client.fetch_all_payments(from_ts)
    if status and status != "all":
        payments = [p for p in payments if p.status == status]

    total = len(payments)
    offset = page_offset(page, page_size)
    return PaymentPage(
        items=payments[offset:offset + page_size],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


def filter_paid_free_users(
    payments: Iterable[RazorpayPayment],
    user_types: Dict[str, str],
    ignored_contacts: Optional[Sequence[str]] = None,
    premium_user_type: Optional[str] = None,
) -> List[RazorpayPayment]:
    """
    Captured payments whose device was never upgraded. Payments without a
    device id are kept too so they can be matched up by hand.
    """
    premium_user_type = premium_user_type or settings.PREMIUM_USER_TYPE
    paid_free = []
    for payment in exclude_ignored(payments, ignored_contacts):
        if payment.status != "captured":
            continue
        device_id = payment.device_id
        if not device_id or user_types.get(device_id) != premium_user_type:
            paid_free.append(payment)
    return paid_free


async def get_paid_free_users(
    session_factory: async_sessionmaker,
    client: RazorpayClient,
    force_refresh: bool = False,
    ignored_contacts: Optional[Sequence[str]] = None,
) -> List[RazorpayPayment]:
    payments, user_types = await asyncio.gather(
        client.fetch_all_payments(force_refresh=force_refresh),
        get_device_user_types(session_factory),
    )
    paid_free = filter_paid_free_users(payments, user_types, ignored_contacts)
    logger.info(f"[PAYMENTS] {len(paid_free)} paid-but-free payments out of {len(payments)}")
    return paid_free
