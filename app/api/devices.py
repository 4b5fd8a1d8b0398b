"""
Devices, device aliases, premium users and the promote-to-premium action.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.api.deps import fetch_failed, get_session_factory
from app.core.timezone import DateRange
from app.schemas.device import (
    Device,
    DeviceAlias,
    DeviceDetail,
    DevicePage,
    PremiumUserPage,
    PromotePremiumRequest,
    PromotePremiumResponse,
)
from app.schemas.session import Session
from app.services import dashboard_queries
from app.services.dashboard_queries import ListParams

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/devices", response_model=DevicePage)
async def list_devices(
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=100),
    sort: Optional[str] = Query(None),
    order: str = Query("desc"),
    search: Optional[str] = Query(None),
    date_range: DateRange = Query("all", alias="range"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Devices table with search (device id), sort and pagination"""
    params = ListParams(page=page, page_size=page_size, sort=sort, order=order, search=search, date_range=date_range)
    try:
        result = await dashboard_queries.get_devices_paginated(session_factory, params)
    except Exception:
        logger.exception("[DEVICES] Failed to fetch devices")
        raise fetch_failed("devices")
    return DevicePage.model_validate(result, from_attributes=True)


@router.get("/premium-users", response_model=PremiumUserPage)
async def list_premium_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=100),
    sort: Optional[str] = Query(None),
    order: str = Query("desc"),
    search: Optional[str] = Query(None),
    date_range: DateRange = Query("all", alias="range"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Premium devices with their alias; search covers device id and name"""
    params = ListParams(page=page, page_size=page_size, sort=sort, order=order, search=search, date_range=date_range)
    try:
        result = await dashboard_queries.get_premium_users_paginated(session_factory, params)
    except Exception:
        logger.exception("[DEVICES] Failed to fetch premium users")
        raise fetch_failed("premium users")
    return PremiumUserPage.model_validate(result, from_attributes=True)


@router.get("/device-map", response_model=List[DeviceAlias])
async def list_device_aliases(session_factory: async_sessionmaker = Depends(get_session_factory)):
    """Named devices, newest first"""
    try:
        aliases = await dashboard_queries.get_device_map(session_factory)
    except Exception:
        logger.exception("[DEVICES] Failed to fetch device map")
        raise fetch_failed("device map")
    return [DeviceAlias.model_validate(alias) for alias in aliases]


@router.get("/devices/{device_id}", response_model=DeviceDetail)
async def get_device(
    device_id: str,
    session_limit: int = Query(20, ge=1, le=100),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    try:
        found = await dashboard_queries.get_device(session_factory, device_id)
        sessions = await dashboard_queries.get_sessions_for_device(session_factory, device_id, limit=session_limit) if found else []
    except Exception:
        logger.exception(f"[DEVICES] Failed to fetch device {device_id}")
        raise fetch_failed("device")

    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")

    device, device_name = found
    return DeviceDetail(
        device=Device.model_validate(device),
        device_name=device_name,
        recent_sessions=[Session.model_validate(s) for s in sessions],
    )


@router.post("/update-premium", response_model=PromotePremiumResponse)
async def update_premium(
    body: PromotePremiumRequest,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Promote a device to premium (one-way; nothing here demotes)"""
    device_id = (body.device_id or "").strip()
    if not device_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Device ID is required")

    try:
        promoted = await dashboard_queries.promote_to_premium(session_factory, device_id)
    except Exception:
        logger.exception(f"[DEVICES] Failed to update device {device_id} to premium")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update device",
        )

    if not promoted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")

    return PromotePremiumResponse(success=True, device_id=device_id)
