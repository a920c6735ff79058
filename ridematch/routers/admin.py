"""
Admin router — driver moderation and read-only overviews.
"""
import logging
from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.database import get_db
from ridematch.middleware.auth import get_current_admin
from ridematch.redis_client import cache_delete, driver_status_key, get_redis
from ridematch.schemas.schemas import (
    BookingResponse, BookingStatusEnum, DriverResponse, DriverStatusEnum,
    EligibilityUpdateRequest, ReportResponse,
)
from ridematch.services import bookings, eligibility, reports

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/admin", tags=["Admin"], dependencies=[Depends(get_current_admin)])


@router.get("/drivers", response_model=list[DriverResponse])
async def list_drivers(
    status: str = DriverStatusEnum.active.value,
    db: AsyncSession = Depends(get_db),
):
    rows = await eligibility.list_drivers(db, status)
    return [DriverResponse.model_validate(d) for d in rows]


@router.put("/drivers/{driver_id}/status", response_model=DriverResponse)
async def set_driver_status(
    driver_id: str,
    payload: EligibilityUpdateRequest,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    driver = await eligibility.set_eligibility(db, driver_id, payload.status)
    await cache_delete(redis, driver_status_key(driver_id))
    return DriverResponse.model_validate(driver)


@router.put("/drivers/{driver_id}/ban", response_model=DriverResponse)
async def ban_driver(
    driver_id: str,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    driver = await eligibility.ban_driver(db, driver_id)
    await cache_delete(redis, driver_status_key(driver_id))
    return DriverResponse.model_validate(driver)


@router.get("/bookings", response_model=list[BookingResponse])
async def list_bookings(
    status: Optional[BookingStatusEnum] = None,
    db: AsyncSession = Depends(get_db),
):
    rows = await bookings.list_bookings(db, status.value if status else None)
    return [BookingResponse.model_validate(b) for b in rows]


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(
    driver_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    rows = await reports.list_reports(db, driver_id)
    return [ReportResponse.model_validate(r) for r in rows]
