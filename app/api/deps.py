from fastapi import HTTPException, Request, status

from app.db.session import get_session_factory
from app.services.razorpay_client import RazorpayClient

__all__ = ["get_session_factory", "get_razorpay_client", "fetch_failed"]


def get_razorpay_client(request: Request) -> RazorpayClient:
    """
    The process-wide Razorpay client created in the app lifespan.
    Its caches live as long as the process.
    """
    client = getattr(request.app.state, "razorpay_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Razorpay client not initialised",
        )
    return client


def fetch_failed(what: str) -> HTTPException:
    """Generic 500 for any upstream failure; callers log the cause first"""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to fetch {what}",
    )
