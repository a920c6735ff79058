"""
Driver–booking matching coordinator.

Flow:
  1. A driver polls ``list_assignable`` – every pending booking minus the
     ones that driver has declined, newest first. Reads take no locks.
  2. The driver either declines (a permanent per-driver suppression record)
     or accepts.
  3. Accept = eligibility check against the drivers table, then one
     conditional UPDATE ... WHERE status = 'pending'. The database decides
     the winner; the loser gets AlreadyTaken and must re-poll.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.models.booking import Booking
from ridematch.models.decline import BookingDecline
from ridematch.schemas.schemas import BookingStatusEnum
from ridematch.services import eligibility
from ridematch.services.exceptions import AlreadyTaken, BookingNotFound

logger = logging.getLogger(__name__)

PENDING = BookingStatusEnum.pending.value
ACCEPTED = BookingStatusEnum.accepted.value


async def list_assignable(db: AsyncSession, driver_id: str) -> list[Booking]:
    declined = select(BookingDecline.booking_id).where(BookingDecline.driver_id == driver_id)
    result = await db.execute(
        select(Booking)
        .where(Booking.status == PENDING, Booking.id.not_in(declined))
        .order_by(Booking.id.desc())
    )
    return list(result.scalars().all())


async def accept(db: AsyncSession, booking_id: int, driver_id: str) -> Booking:
    """
    Bind ``driver_id`` to a pending booking.

    Raises DriverNotFound / NotEligible before any write, BookingNotFound if
    the booking does not exist, AlreadyTaken if it is no longer pending.
    """
    await eligibility.require_eligible(db, driver_id)

    # First writer wins at the row level
    result = await db.execute(
        update(Booking)
        .where(Booking.id == booking_id, Booking.status == PENDING)
        .values(status=ACCEPTED, driver_id=driver_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        exists = await db.execute(select(Booking.id).where(Booking.id == booking_id))
        if exists.scalar_one_or_none() is None:
            raise BookingNotFound()
        logger.info("Accept lost: booking=%s driver=%s (already taken)", booking_id, driver_id)
        raise AlreadyTaken("Someone else already took this ride")

    await db.commit()
    logger.info("Matched booking=%s to driver=%s", booking_id, driver_id)
    return await _reload(db, booking_id)


async def decline(
    db: AsyncSession,
    booking_id: int,
    driver_id: str,
    reason: str | None = None,
) -> BookingDecline:
    """
    Hide a booking from one driver's feed for good.

    Repeating a decline is a no-op that returns the original record. The
    booking row itself is never touched.
    """
    exists = await db.execute(select(Booking.id).where(Booking.id == booking_id))
    if exists.scalar_one_or_none() is None:
        raise BookingNotFound()

    existing = await _find_decline(db, booking_id, driver_id)
    if existing is not None:
        return existing

    record = BookingDecline(booking_id=booking_id, driver_id=driver_id, reason=reason or None)
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        # Concurrent duplicate decline landed first
        await db.rollback()
        existing = await _find_decline(db, booking_id, driver_id)
        if existing is None:
            raise
        return existing

    await db.refresh(record)
    logger.info("Driver %s declined booking=%s", driver_id, booking_id)
    return record


async def _find_decline(db: AsyncSession, booking_id: int, driver_id: str) -> BookingDecline | None:
    result = await db.execute(
        select(BookingDecline).where(
            BookingDecline.booking_id == booking_id,
            BookingDecline.driver_id == driver_id,
        )
    )
    return result.scalar_one_or_none()


async def _reload(db: AsyncSession, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id, populate_existing=True)
    if booking is None:
        raise BookingNotFound()
    return booking
