"""Driver ratings: one per completed booking, averaged at read time."""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.models.booking import Booking
from ridematch.models.rating import DriverRating
from ridematch.schemas.schemas import BookingStatusEnum
from ridematch.services.exceptions import (
    AlreadyRated,
    BookingNotFound,
    NotCompleted,
    PolicyViolation,
    ValidationError,
)

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5


async def submit_rating(
    db: AsyncSession,
    booking_id: int,
    passenger_id: str,
    score: int,
    comment: str | None = None,
) -> DriverRating:
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(f"score must be between {MIN_SCORE} and {MAX_SCORE}")

    booking = await db.get(Booking, booking_id, populate_existing=True)
    if booking is None:
        raise BookingNotFound()
    if booking.status != BookingStatusEnum.completed.value or booking.driver_id is None:
        raise NotCompleted(f"Booking {booking_id} is {booking.status}; only completed rides can be rated")
    if booking.passenger_id != passenger_id:
        raise PolicyViolation("Only the passenger of this booking can rate it")

    prior = await db.execute(select(DriverRating.id).where(DriverRating.booking_id == booking_id))
    if prior.scalar_one_or_none() is not None:
        raise AlreadyRated()

    rating = DriverRating(
        booking_id=booking_id,
        driver_id=booking.driver_id,
        passenger_id=passenger_id,
        score=score,
        comment=comment or None,
    )
    db.add(rating)
    try:
        await db.commit()
    except IntegrityError as exc:
        # unique(booking_id) caught a concurrent duplicate
        await db.rollback()
        raise AlreadyRated() from exc

    await db.refresh(rating)
    logger.info("Booking %s rated %d for driver=%s", booking_id, score, rating.driver_id)
    return rating


async def average_rating(db: AsyncSession, driver_id: str) -> float | None:
    """Arithmetic mean of every rating the driver has received, or None."""
    result = await db.execute(
        select(func.avg(DriverRating.score)).where(DriverRating.driver_id == driver_id)
    )
    avg = result.scalar_one_or_none()
    return round(float(avg), 2) if avg is not None else None


async def list_ratings(db: AsyncSession, driver_id: str) -> list[DriverRating]:
    result = await db.execute(
        select(DriverRating)
        .where(DriverRating.driver_id == driver_id)
        .order_by(DriverRating.id.desc())
    )
    return list(result.scalars().all())
