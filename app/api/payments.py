"""
Razorpay-backed endpoints: payments table, paid-but-free users and
subscription status per device.
"""
import logging
from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.api.deps import fetch_failed, get_razorpay_client, get_session_factory
from app.core.timezone import DateRange
from app.schemas.razorpay import CacheClearResponse, PaymentPage, RazorpayPayment
from app.schemas.stats import SubscriptionsResponse
from app.services.payments import get_paid_free_users, get_payments_paginated
from app.services.razorpay_client import RazorpayAPIError, RazorpayClient
from app.services.subscriptions import get_subscription_status_by_device

logger = logging.getLogger(__name__)

router = APIRouter()

PaymentStatusFilter = Literal["all", "created", "authorized", "captured", "failed", "refunded"]


@router.get("/payments", response_model=PaymentPage)
async def list_payments(
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=100),
    date_range: DateRange = Query("all", alias="range"),
    status_filter: PaymentStatusFilter = Query("all", alias="status"),
    client: RazorpayClient = Depends(get_razorpay_client),
):
    """Payments table, filtered by status and paginated in memory"""
    try:
        return await get_payments_paginated(
            client,
            page=page,
            page_size=page_size,
            date_range=date_range,
            status=status_filter,
        )
    except Exception:
        logger.exception("[PAYMENTS] Failed to fetch payments")
        raise fetch_failed("payments")


@router.post("/payments/cache/clear", response_model=CacheClearResponse)
async def clear_payments_cache(client: RazorpayClient = Depends(get_razorpay_client)):
    client.clear_cache()
    return CacheClearResponse(cleared=True)


@router.get("/payments/{payment_id}", response_model=RazorpayPayment)
async def get_payment(payment_id: str, client: RazorpayClient = Depends(get_razorpay_client)):
    try:
        return await client.get_payment(payment_id)
    except RazorpayAPIError as e:
        # Razorpay answers unknown ids with 400 BAD_REQUEST_ERROR
        if e.status_code in (400, 404):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
        logger.exception(f"[PAYMENTS] Failed to fetch payment {payment_id}")
        raise fetch_failed("payment")
    except Exception:
        logger.exception(f"[PAYMENTS] Failed to fetch payment {payment_id}")
        raise fetch_failed("payment")


@router.get("/paid-free-users", response_model=List[RazorpayPayment])
async def list_paid_free_users(
    refresh: bool = Query(False),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    client: RazorpayClient = Depends(get_razorpay_client),
):
    """Captured payments whose device is still on the free tier (or has no device id)"""
    try:
        return await get_paid_free_users(session_factory, client, force_refresh=refresh)
    except Exception:
        logger.exception("[PAYMENTS] Failed to fetch paid free users")
        raise fetch_failed("paid free users")


@router.get("/subscriptions", response_model=SubscriptionsResponse)
async def list_subscriptions(
    response: Response,
    refresh: bool = Query(False),
    client: RazorpayClient = Depends(get_razorpay_client),
):
    """Latest subscription status per device"""
    try:
        subscriptions = await get_subscription_status_by_device(client, force_refresh=refresh)
    except Exception:
        logger.exception("[SUBSCRIPTIONS] Failed to fetch subscriptions")
        raise fetch_failed("subscriptions")

    response.headers["Cache-Control"] = "public, max-age=60"
    return SubscriptionsResponse(subscriptions=subscriptions)
