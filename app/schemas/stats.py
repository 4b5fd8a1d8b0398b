from pydantic import BaseModel
from typing import Dict, List, Optional


class StatsSummary(BaseModel):
    total_devices: int
    total_sessions: int
    new_devices_today: int
    new_sessions_today: int
    premium_users: int
    total_generations: int
    today_generations: int


class MetricStat(BaseModel):
    total: int
    today: Optional[int] = None  # Not reported for premium users


class PaymentStats(BaseModel):
    total_payments: int
    captured_payments: int
    failed_payments: int
    total_revenue: float  # Rupees


class DailyDbStats(BaseModel):
    dates: List[str]
    devices: List[int]
    sessions: List[int]
    generations: List[int]


class DailyPaymentStats(BaseModel):
    dates: List[str]
    captured: List[int]
    failed: List[int]
    revenue: List[float]  # Rupees


class DailyStatsResponse(BaseModel):
    """Parallel per-day arrays, oldest day first"""
    dates: List[str]
    devices: List[int]
    sessions: List[int]
    generations: List[int]
    payments: List[int]  # Captured payments
    revenue: List[float]  # Rupees


class SubscriptionStatus(BaseModel):
    status: str
    created_at: int


class SubscriptionsResponse(BaseModel):
    subscriptions: Dict[str, SubscriptionStatus]  # device_id -> latest subscription
