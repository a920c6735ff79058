"""
Bookings router — POST /v1/bookings, GET /v1/bookings/{id},
                  POST /v1/bookings/{id}/accept|decline|rating,
                  PUT /v1/bookings/{id}/status, DELETE /v1/bookings/{id}
"""
import logging
from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Header, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.config import get_settings
from ridematch.database import get_db
from ridematch.middleware.auth import get_current_driver, get_current_passenger, get_current_user
from ridematch.middleware.idempotency import check_idempotency, store_idempotency_result
from ridematch.redis_client import booking_key, cache_delete, cache_get, cache_set, get_redis
from ridematch.schemas.schemas import (
    BookingCreateRequest, BookingResponse, BookingStatusRequest,
    DeclineRequest, DeclineResponse, RatingCreateRequest, RatingResponse,
)
from ridematch.services import bookings, matching, ratings

logger = logging.getLogger(__name__)
settings = get_settings()
router = APIRouter(prefix="/v1/bookings", tags=["Bookings"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BookingResponse)
async def create_booking(
    payload: BookingCreateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    passenger_id: str = Depends(get_current_passenger),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    # 1. Replay a double-submit instead of creating a second booking
    if idempotency_key:
        cached = await check_idempotency(request, redis, scope=passenger_id)
        if cached:
            return cached

    # 2. Create (advisory one-active-booking check inside)
    booking = await bookings.create_booking(db, passenger_id, payload)
    resp = BookingResponse.model_validate(booking)

    # 3. Store idempotency result
    if idempotency_key:
        await store_idempotency_result(
            redis, passenger_id, idempotency_key, status.HTTP_201_CREATED, resp.model_dump(mode="json")
        )
    return resp


@router.get("/me/latest", response_model=Optional[BookingResponse])
async def my_latest_booking(
    db: AsyncSession = Depends(get_db),
    passenger_id: str = Depends(get_current_passenger),
):
    """Passenger's most recent booking, whatever its status (null if none)."""
    booking = await bookings.latest_booking_for_passenger(db, passenger_id)
    return BookingResponse.model_validate(booking) if booking else None


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    _user: dict = Depends(get_current_user),
):
    # Cache-aside: check Redis first
    cached = await cache_get(redis, booking_key(booking_id))
    if cached:
        return BookingResponse.model_validate_json(cached)

    booking = await bookings.get_booking(db, booking_id)
    resp = BookingResponse.model_validate(booking)
    await cache_set(redis, booking_key(booking_id), resp.model_dump_json(), ttl=settings.booking_cache_ttl_seconds)
    return resp


@router.post("/{booking_id}/accept", response_model=BookingResponse)
async def accept_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    driver_id: str = Depends(get_current_driver),
):
    """
    Driver claims a pending booking.
    403 not_eligible if the account is not active, 409 already_taken if
    another driver won the race.
    """
    booking = await matching.accept(db, booking_id, driver_id)
    await cache_delete(redis, booking_key(booking_id))
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/decline", response_model=DeclineResponse)
async def decline_booking(
    booking_id: int,
    payload: Optional[DeclineRequest] = None,
    db: AsyncSession = Depends(get_db),
    driver_id: str = Depends(get_current_driver),
):
    reason = payload.reason if payload else None
    record = await matching.decline(db, booking_id, driver_id, reason)
    return DeclineResponse.model_validate(record)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    payload: BookingStatusRequest,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    driver_id: str = Depends(get_current_driver),
):
    """Driver moves a booking to accepted / completed / cancelled."""
    booking = await bookings.transition_status(db, booking_id, payload.status.value, acting_driver_id=driver_id)
    await cache_delete(redis, booking_key(booking_id))
    return BookingResponse.model_validate(booking)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    passenger_id: str = Depends(get_current_passenger),
):
    """Passenger cancellation permanently deletes their own active booking."""
    await bookings.cancel_and_remove(db, booking_id, passenger_id)
    await cache_delete(redis, booking_key(booking_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{booking_id}/rating", status_code=status.HTTP_201_CREATED, response_model=RatingResponse)
async def rate_booking(
    booking_id: int,
    payload: RatingCreateRequest,
    db: AsyncSession = Depends(get_db),
    passenger_id: str = Depends(get_current_passenger),
):
    rating = await ratings.submit_rating(db, booking_id, passenger_id, payload.score, payload.comment)
    return RatingResponse.model_validate(rating)
