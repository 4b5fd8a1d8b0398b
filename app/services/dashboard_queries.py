"""
Read queries (and the one promotion write) against the app database.

Every function takes the session factory instead of a session: independent
aggregates are issued concurrently with asyncio.gather, and an AsyncSession
can't run two statements at once, so each query opens its own session.
No retries here; failures propagate to the route.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.core.timezone import day_bounds, format_day_label, get_date_range_timestamp, now_ts, start_of_day_ist
from app.models.device import Device
from app.models.device_map import DeviceAlias
from app.models.session import Session
from app.models.support_request import SupportRequest
from app.schemas.stats import DailyDbStats, StatsSummary
from app.utils.pagination import normalize_page, page_offset, total_pages

logger = logging.getLogger(__name__)

DEFAULT_SORT_COLUMN = "created_at"

# Allowed sort columns; anything else falls back to created_at
DEVICE_SORT_COLUMNS = {
    "device_id": Device.device_id,
    "created_at": Device.created_at,
    "updated_at": Device.updated_at,
    "images_limit": Device.images_limit,
    "user_type": Device.user_type,
}
SESSION_SORT_COLUMNS = {
    "session_id": Session.session_id,
    "device_id": Session.device_id,
    "created_at": Session.created_at,
    "total_generations": Session.total_generations,
    "duration_seconds": Session.duration_seconds,
    "status": Session.status,
}
SUPPORT_SORT_COLUMNS = {
    "id": SupportRequest.id,
    "device_id": SupportRequest.device_id,
    "category": SupportRequest.category,
    "status": SupportRequest.status,
    "created_at": SupportRequest.created_at,
}
PREMIUM_SORT_COLUMNS = {
    "device_id": Device.device_id,
    "device_name": DeviceAlias.device_name,
    "created_at": Device.created_at,
    "updated_at": Device.updated_at,
}

SESSION_STATUSES = ("completed", "in_progress", "failed")


@dataclass
class ListParams:
    page: int = 1
    page_size: int = 100
    sort: Optional[str] = None
    order: str = "desc"
    search: Optional[str] = None
    date_range: str = "all"
    status: str = "all"  # sessions only


@dataclass
class PageResult:
    items: List[Any]
    total: int
    page: int
    page_size: int
    total_pages: int


def resolve_sort_column(sort_columns: Dict[str, Any], sort: Optional[str]):
    """Column for `sort` if allow-listed, else the created_at column"""
    return sort_columns.get(sort or "", sort_columns[DEFAULT_SORT_COLUMN])


def _ordering(column, order: str):
    return column.asc() if order == "asc" else column.desc()


def _search_condition(search: Optional[str], columns: Sequence[Any]):
    term = (search or "").strip()
    if not term:
        return None
    return or_(*[column.contains(term, autoescape=True) for column in columns])


def _common_conditions(params: ListParams, search_columns: Sequence[Any], created_column, now: Optional[datetime]) -> List[Any]:
    conditions = []
    search = _search_condition(params.search, search_columns)
    if search is not None:
        conditions.append(search)
    date_ts = get_date_range_timestamp(params.date_range or "all", now=now)
    if date_ts is not None:
        conditions.append(created_column >= date_ts)
    return conditions


async def _paginate(
    session_factory: async_sessionmaker,
    stmt,
    count_stmt,
    conditions: List[Any],
    sort_column,
    tie_breaker,
    params: ListParams,
    scalars: bool = True,
) -> PageResult:
    page, page_size = normalize_page(params.page, params.page_size)
    order = "asc" if params.order == "asc" else "desc"

    async with session_factory() as session:
        total = await session.scalar(count_stmt.where(*conditions)) or 0

        page_stmt = (
            stmt.where(*conditions)
            # Primary key keeps ordering total so pages never overlap
            .order_by(_ordering(sort_column, order), _ordering(tie_breaker, order))
            .limit(page_size)
            .offset(page_offset(page, page_size))
        )
        result = await session.execute(page_stmt)
        items = list(result.scalars().all()) if scalars else list(result.all())

    return PageResult(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


# Paginated listings

async def get_devices_paginated(session_factory: async_sessionmaker, params: ListParams, now: Optional[datetime] = None) -> PageResult:
    conditions = _common_conditions(params, [Device.device_id], Device.created_at, now)
    return await _paginate(
        session_factory,
        select(Device),
        select(func.count()).select_from(Device),
        conditions,
        resolve_sort_column(DEVICE_SORT_COLUMNS, params.sort),
        Device.id,
        params,
    )


async def get_sessions_paginated(session_factory: async_sessionmaker, params: ListParams, now: Optional[datetime] = None) -> PageResult:
    conditions = _common_conditions(params, [Session.device_id, Session.session_id], Session.created_at, now)
    if params.status and params.status != "all":
        conditions.append(Session.status == params.status)
    return await _paginate(
        session_factory,
        select(Session),
        select(func.count()).select_from(Session),
        conditions,
        resolve_sort_column(SESSION_SORT_COLUMNS, params.sort),
        Session.id,
        params,
    )


async def get_support_requests_paginated(session_factory: async_sessionmaker, params: ListParams, now: Optional[datetime] = None) -> PageResult:
    conditions = _common_conditions(
        params,
        [SupportRequest.device_id, SupportRequest.message, SupportRequest.category],
        SupportRequest.created_at,
        now,
    )
    return await _paginate(
        session_factory,
        select(SupportRequest),
        select(func.count()).select_from(SupportRequest),
        conditions,
        resolve_sort_column(SUPPORT_SORT_COLUMNS, params.sort),
        SupportRequest.id,
        params,
    )


async def get_premium_users_paginated(session_factory: async_sessionmaker, params: ListParams, now: Optional[datetime] = None) -> PageResult:
    """Premium devices with their alias (if any). Items are rows with device_id, device_name, created_at, updated_at."""
    conditions = [Device.user_type == settings.PREMIUM_USER_TYPE]
    conditions += _common_conditions(params, [Device.device_id, DeviceAlias.device_name], Device.created_at, now)

    joined = Device.__table__.outerjoin(DeviceAlias.__table__, DeviceAlias.device_id == Device.device_id)
    stmt = select(
        Device.device_id,
        DeviceAlias.device_name,
        Device.created_at,
        Device.updated_at,
    ).select_from(joined)
    count_stmt = select(func.count()).select_from(joined)

    return await _paginate(
        session_factory,
        stmt,
        count_stmt,
        conditions,
        resolve_sort_column(PREMIUM_SORT_COLUMNS, params.sort),
        Device.id,
        params,
        scalars=False,
    )


# Lookups

async def get_device(session_factory: async_sessionmaker, device_id: str) -> Optional[Tuple[Device, Optional[str]]]:
    """Device row and its alias, or None when the device doesn't exist"""
    async with session_factory() as session:
        row = (
            await session.execute(
                select(Device, DeviceAlias.device_name)
                .outerjoin(DeviceAlias, DeviceAlias.device_id == Device.device_id)
                .where(Device.device_id == device_id)
            )
        ).first()
    if row is None:
        return None
    return row[0], row[1]


async def get_sessions_for_device(session_factory: async_sessionmaker, device_id: str, limit: int = 20) -> List[Session]:
    async with session_factory() as session:
        result = await session.scalars(
            select(Session)
            .where(Session.device_id == device_id)
            .order_by(Session.created_at.desc(), Session.id.desc())
            .limit(limit)
        )
        return list(result.all())


async def get_device_map(session_factory: async_sessionmaker) -> List[DeviceAlias]:
    async with session_factory() as session:
        result = await session.scalars(
            select(DeviceAlias).order_by(DeviceAlias.created_at.desc(), DeviceAlias.id.desc())
        )
        return list(result.all())


async def get_device_user_types(session_factory: async_sessionmaker) -> Dict[str, str]:
    """device_id -> user_type for every device"""
    async with session_factory() as session:
        result = await session.execute(select(Device.device_id, Device.user_type))
        return {device_id: user_type for device_id, user_type in result.all()}


# Aggregates

async def _scalar(session_factory: async_sessionmaker, stmt) -> int:
    async with session_factory() as session:
        value = await session.scalar(stmt)
    return int(value or 0)


def _count_devices(since: Optional[int] = None, until: Optional[int] = None):
    stmt = select(func.count()).select_from(Device)
    if since is not None:
        stmt = stmt.where(Device.created_at >= since)
    if until is not None:
        stmt = stmt.where(Device.created_at < until)
    return stmt


def _count_sessions(since: Optional[int] = None, until: Optional[int] = None):
    stmt = select(func.count()).select_from(Session)
    if since is not None:
        stmt = stmt.where(Session.created_at >= since)
    if until is not None:
        stmt = stmt.where(Session.created_at < until)
    return stmt


def _sum_generations(since: Optional[int] = None, until: Optional[int] = None):
    stmt = select(func.coalesce(func.sum(Session.total_generations), 0))
    if since is not None:
        stmt = stmt.where(Session.created_at >= since)
    if until is not None:
        stmt = stmt.where(Session.created_at < until)
    return stmt


def _count_premium():
    return select(func.count()).select_from(Device).where(Device.user_type == settings.PREMIUM_USER_TYPE)


async def get_stats(session_factory: async_sessionmaker, now: Optional[datetime] = None) -> StatsSummary:
    today_start = start_of_day_ist(0, now=now)

    (
        total_devices,
        total_sessions,
        new_devices,
        new_sessions,
        premium,
        total_generations,
        today_generations,
    ) = await asyncio.gather(
        _scalar(session_factory, _count_devices()),
        _scalar(session_factory, _count_sessions()),
        _scalar(session_factory, _count_devices(since=today_start)),
        _scalar(session_factory, _count_sessions(since=today_start)),
        _scalar(session_factory, _count_premium()),
        _scalar(session_factory, _sum_generations()),
        _scalar(session_factory, _sum_generations(since=today_start)),
    )

    return StatsSummary(
        total_devices=total_devices,
        total_sessions=total_sessions,
        new_devices_today=new_devices,
        new_sessions_today=new_sessions,
        premium_users=premium,
        total_generations=total_generations,
        today_generations=today_generations,
    )


async def get_device_counts(session_factory: async_sessionmaker, now: Optional[datetime] = None) -> Tuple[int, int]:
    """(total devices, devices created today IST)"""
    today_start = start_of_day_ist(0, now=now)
    total, today = await asyncio.gather(
        _scalar(session_factory, _count_devices()),
        _scalar(session_factory, _count_devices(since=today_start)),
    )
    return total, today


async def get_session_counts(session_factory: async_sessionmaker, now: Optional[datetime] = None) -> Tuple[int, int]:
    today_start = start_of_day_ist(0, now=now)
    total, today = await asyncio.gather(
        _scalar(session_factory, _count_sessions()),
        _scalar(session_factory, _count_sessions(since=today_start)),
    )
    return total, today


async def get_generation_counts(session_factory: async_sessionmaker, now: Optional[datetime] = None) -> Tuple[int, int]:
    today_start = start_of_day_ist(0, now=now)
    total, today = await asyncio.gather(
        _scalar(session_factory, _sum_generations()),
        _scalar(session_factory, _sum_generations(since=today_start)),
    )
    return total, today


async def get_premium_count(session_factory: async_sessionmaker) -> int:
    return await _scalar(session_factory, _count_premium())


async def get_daily_db_stats(session_factory: async_sessionmaker, days: int = 14, now: Optional[datetime] = None) -> DailyDbStats:
    """Per-day new devices, sessions and generations for the last `days` IST days, oldest first"""
    results = DailyDbStats(dates=[], devices=[], sessions=[], generations=[])

    for days_ago in range(days - 1, -1, -1):
        day_start, day_end = day_bounds(days_ago, now=now)
        results.dates.append(format_day_label(day_start))

        device_count, session_count, generation_count = await asyncio.gather(
            _scalar(session_factory, _count_devices(since=day_start, until=day_end)),
            _scalar(session_factory, _count_sessions(since=day_start, until=day_end)),
            _scalar(session_factory, _sum_generations(since=day_start, until=day_end)),
        )
        results.devices.append(device_count)
        results.sessions.append(session_count)
        results.generations.append(generation_count)

    return results


# Mutations

async def promote_to_premium(session_factory: async_sessionmaker, device_id: str, now: Optional[datetime] = None) -> bool:
    """Set the device's tier to premium. False when no device matched."""
    async with session_factory() as session:
        result = await session.execute(
            update(Device)
            .where(Device.device_id == device_id)
            .values(user_type=settings.PREMIUM_USER_TYPE, updated_at=now_ts(now))
            .execution_options(synchronize_session=False)
        )
        await session.commit()

    promoted = (result.rowcount or 0) > 0
    if promoted:
        logger.info(f"[DEVICES] Promoted {device_id} to {settings.PREMIUM_USER_TYPE}")
    return promoted
