"""
Drivers router — POST /v1/drivers (register), GET /v1/drivers/me/feed,
                 GET /v1/drivers/me/assigned, GET /v1/drivers/{id},
                 GET /v1/drivers/{id}/ratings, POST /v1/drivers/{id}/reports
"""
import logging

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.config import get_settings
from ridematch.database import get_db
from ridematch.middleware.auth import get_current_driver, get_current_passenger, get_current_user
from ridematch.redis_client import cache_get, cache_set, driver_status_key, get_redis
from ridematch.schemas.schemas import (
    BookingResponse, DriverCreateRequest, DriverRatingsResponse, DriverResponse,
    DriverStatusResponse, RatingResponse, ReportCreateRequest, ReportResponse,
)
from ridematch.services import bookings, eligibility, matching, ratings, reports

logger = logging.getLogger(__name__)
settings = get_settings()
router = APIRouter(prefix="/v1/drivers", tags=["Drivers"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DriverResponse)
async def create_driver(
    payload: DriverCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a new driver. No auth required for onboarding; starts pending."""
    driver = await eligibility.register_driver(db, payload.name, payload.phone, payload.vehicle_type.value)
    return DriverResponse.model_validate(driver)


@router.get("/me/feed", response_model=list[BookingResponse])
async def driver_feed(
    db: AsyncSession = Depends(get_db),
    driver_id: str = Depends(get_current_driver),
):
    """Pending bookings this driver has not declined, newest first."""
    rows = await matching.list_assignable(db, driver_id)
    return [BookingResponse.model_validate(b) for b in rows]


@router.get("/me/assigned", response_model=list[BookingResponse])
async def driver_assigned(
    db: AsyncSession = Depends(get_db),
    driver_id: str = Depends(get_current_driver),
):
    rows = await bookings.assigned_bookings(db, driver_id)
    return [BookingResponse.model_validate(b) for b in rows]


@router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(
    driver_id: str,
    db: AsyncSession = Depends(get_db),
    _user: dict = Depends(get_current_user),
):
    driver = await eligibility.get_driver(db, driver_id)
    return DriverResponse.model_validate(driver)


@router.get("/{driver_id}/status", response_model=DriverStatusResponse)
async def get_driver_status(
    driver_id: str,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    _user: dict = Depends(get_current_user),
):
    """
    Display copy of the eligibility state for driver UIs. May lag an admin
    change by up to eligibility_cache_ttl_seconds; accept never reads it.
    """
    key = driver_status_key(driver_id)
    cached = await cache_get(redis, key)
    if cached:
        return DriverStatusResponse(id=driver_id, status=cached)

    driver = await eligibility.get_driver(db, driver_id)
    await cache_set(redis, key, driver.status, ttl=settings.eligibility_cache_ttl_seconds)
    return DriverStatusResponse(id=driver.id, status=driver.status)


@router.get("/{driver_id}/ratings", response_model=DriverRatingsResponse)
async def get_driver_ratings(
    driver_id: str,
    db: AsyncSession = Depends(get_db),
    _user: dict = Depends(get_current_user),
):
    await eligibility.get_driver(db, driver_id)
    rows = await ratings.list_ratings(db, driver_id)
    average = await ratings.average_rating(db, driver_id)
    return DriverRatingsResponse(
        driver_id=driver_id,
        average=average,
        count=len(rows),
        ratings=[RatingResponse.model_validate(r) for r in rows],
    )


@router.post("/{driver_id}/reports", status_code=status.HTTP_201_CREATED, response_model=ReportResponse)
async def report_driver(
    driver_id: str,
    payload: ReportCreateRequest,
    db: AsyncSession = Depends(get_db),
    passenger_id: str = Depends(get_current_passenger),
):
    """Passenger complaint; 429 report_limit_exceeded after two per driver."""
    report = await reports.file_report(
        db,
        driver_id=driver_id,
        passenger_id=passenger_id,
        message=payload.message,
        booking_id=payload.booking_id,
    )
    return ReportResponse.model_validate(report)
