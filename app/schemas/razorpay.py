from pydantic import BaseModel, BeforeValidator
from typing import Annotated, Any, Dict, List, Optional

from app.schemas.common import PageMeta

PAYMENT_STATUSES = ("created", "authorized", "captured", "failed", "refunded")


def _normalize_notes(v: Any) -> Dict[str, Any]:
    # Razorpay serialises empty notes as [] instead of {}
    if v is None or isinstance(v, list):
        return {}
    return v


Notes = Annotated[Dict[str, Any], BeforeValidator(_normalize_notes)]


class RazorpayPayment(BaseModel):
    id: str
    entity: Optional[str] = "payment"
    amount: int  # Amount in paise
    currency: Optional[str] = "INR"
    status: str  # created, authorized, captured, failed, refunded
    method: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    notes: Notes = {}
    order_id: Optional[str] = None
    invoice_id: Optional[str] = None
    error_code: Optional[str] = None
    error_description: Optional[str] = None
    created_at: int  # Unix timestamp
    captured: Optional[bool] = None
    vpa: Optional[str] = None
    bank: Optional[str] = None
    wallet: Optional[str] = None

    @property
    def device_id(self) -> Optional[str]:
        """Device linked by the app at checkout, if any"""
        value = self.notes.get("device_id")
        return str(value) if value else None

    class Config:
        extra = "allow"


class RazorpaySubscription(BaseModel):
    id: str
    entity: Optional[str] = "subscription"
    plan_id: Optional[str] = None
    customer_id: Optional[str] = None
    status: str  # created, authenticated, active, pending, halted, cancelled, paused, expired, completed
    notes: Notes = {}
    current_start: Optional[int] = None
    current_end: Optional[int] = None
    charge_at: Optional[int] = None
    start_at: Optional[int] = None
    end_at: Optional[int] = None
    ended_at: Optional[int] = None
    paid_count: Optional[int] = None
    total_count: Optional[int] = None
    created_at: int

    @property
    def device_id(self) -> Optional[str]:
        value = self.notes.get("device_id")
        return str(value) if value else None

    class Config:
        extra = "allow"


class RazorpayCollection(BaseModel):
    """Envelope of Razorpay list endpoints"""
    entity: Optional[str] = "collection"
    count: int = 0
    items: List[Dict[str, Any]] = []


class PaymentPage(PageMeta):
    items: List[RazorpayPayment]


class CacheClearResponse(BaseModel):
    cleared: bool
