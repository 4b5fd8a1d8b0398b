import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.api.deps import fetch_failed, get_session_factory
from app.core.timezone import DateRange
from app.schemas.session import SessionPage
from app.schemas.support import SupportRequestPage
from app.services import dashboard_queries
from app.services.dashboard_queries import ListParams

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/sessions", response_model=SessionPage)
async def list_sessions(
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=100),
    sort: Optional[str] = Query(None),
    order: str = Query("desc"),
    search: Optional[str] = Query(None),
    date_range: DateRange = Query("all", alias="range"),
    status_filter: Literal["all", "completed", "in_progress", "failed"] = Query("all", alias="status"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Sessions table; search covers device id and session id"""
    params = ListParams(
        page=page,
        page_size=page_size,
        sort=sort,
        order=order,
        search=search,
        date_range=date_range,
        status=status_filter,
    )
    try:
        result = await dashboard_queries.get_sessions_paginated(session_factory, params)
    except Exception:
        logger.exception("[SESSIONS] Failed to fetch sessions")
        raise fetch_failed("sessions")
    return SessionPage.model_validate(result, from_attributes=True)


@router.get("/support-requests", response_model=SupportRequestPage)
async def list_support_requests(
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=100),
    sort: Optional[str] = Query(None),
    order: str = Query("desc"),
    search: Optional[str] = Query(None),
    date_range: DateRange = Query("all", alias="range"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Support tickets; search covers device id, message and category"""
    params = ListParams(page=page, page_size=page_size, sort=sort, order=order, search=search, date_range=date_range)
    try:
        result = await dashboard_queries.get_support_requests_paginated(session_factory, params)
    except Exception:
        logger.exception("[SUPPORT] Failed to fetch support requests")
        raise fetch_failed("support requests")
    return SupportRequestPage.model_validate(result, from_attributes=True)
