"""
Latest Razorpay subscription per device, used to annotate premium users
with their renewal state.
"""
from typing import Dict, Iterable

from app.schemas.razorpay import RazorpaySubscription
from app.schemas.stats import SubscriptionStatus
from app.services.razorpay_client import RazorpayClient


def latest_subscription_by_device(subscriptions: Iterable[RazorpaySubscription]) -> Dict[str, RazorpaySubscription]:
    """
    Keep the most recently created subscription per linked device.

    On an exact created_at tie the one seen later in enumeration order wins.
    Subscriptions without a device id in their notes are skipped.
    """
    latest: Dict[str, RazorpaySubscription] = {}
    for sub in subscriptions:
        device_id = sub.device_id
        if not device_id:
            continue
        current = latest.get(device_id)
        if current is None or sub.created_at >= current.created_at:
            latest[device_id] = sub
    return latest


async def get_subscription_status_by_device(client: RazorpayClient, force_refresh: bool = False) -> Dict[str, SubscriptionStatus]:
    subscriptions = await client.fetch_all_subscriptions(force_refresh=force_refresh)
    return {
        device_id: SubscriptionStatus(status=sub.status, created_at=sub.created_at)
        for device_id, sub in latest_subscription_by_device(subscriptions).items()
    }
