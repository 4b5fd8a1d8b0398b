from app.schemas.device import Device, DeviceAlias, PremiumUser, DeviceDetail, PromotePremiumRequest
from app.schemas.session import Session
from app.schemas.support import SupportRequest
from app.schemas.stats import StatsSummary, MetricStat, PaymentStats, DailyStatsResponse
from app.schemas.razorpay import RazorpayPayment, RazorpaySubscription

__all__ = [
    "Device", "DeviceAlias", "PremiumUser", "DeviceDetail", "PromotePremiumRequest",
    "Session",
    "SupportRequest",
    "StatsSummary", "MetricStat", "PaymentStats", "DailyStatsResponse",
    "RazorpayPayment", "RazorpaySubscription",
]
