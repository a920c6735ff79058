"""
Booking lifecycle.

    pending ──accept──▶ accepted ──▶ completed
       │                   │
       └──────▶ cancelled ◀┘

``completed`` and ``cancelled`` are terminal. A driver is bound exactly
while the booking is accepted or completed, so cancelling clears it.
Passenger-initiated cancellation is a hard delete (``cancel_and_remove``).
"""
import logging

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.models.booking import Booking
from ridematch.schemas.schemas import BookingCreateRequest, BookingStatusEnum
from ridematch.services import matching
from ridematch.services.exceptions import (
    ActiveBookingExists,
    BookingNotFound,
    InvalidTransition,
    PolicyViolation,
    ValidationError,
)

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"accepted", "cancelled"}),
    "accepted": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

ACCEPTED = BookingStatusEnum.accepted.value
ACTIVE_STATUSES = ("pending", "accepted")


def is_valid_transition(current: str, next_state: str) -> bool:
    return next_state in VALID_TRANSITIONS.get(current, frozenset())


def source_states(target: str) -> list[str]:
    """States from which ``target`` may be reached."""
    return [src for src, targets in VALID_TRANSITIONS.items() if target in targets]


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id, populate_existing=True)
    if booking is None:
        raise BookingNotFound()
    return booking


async def latest_booking_for_passenger(db: AsyncSession, passenger_id: str) -> Booking | None:
    result = await db.execute(
        select(Booking)
        .where(Booking.passenger_id == passenger_id)
        .order_by(Booking.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_booking(
    db: AsyncSession,
    passenger_id: str,
    payload: BookingCreateRequest,
) -> Booking:
    """
    Create a pending booking.

    The one-active-booking rule is an advisory read of the passenger's
    latest booking; two truly simultaneous submissions can both pass it.
    """
    if not passenger_id:
        raise ValidationError("Missing passenger id")

    latest = await latest_booking_for_passenger(db, passenger_id)
    if latest is not None and latest.status in ACTIVE_STATUSES:
        raise ActiveBookingExists(f"Passenger already has booking {latest.id} ({latest.status})")

    booking = Booking(
        passenger_id=passenger_id,
        pickup_area=payload.pickup_area,
        dropoff_area=payload.dropoff_area,
        pickup_address=payload.pickup_address,
        dropoff_address=payload.dropoff_address,
        ride_date=payload.ride_date,
        ride_time=payload.ride_time,
        vehicle_type=payload.vehicle_type.value,
        fare=payload.fare,
        status=BookingStatusEnum.pending.value,
    )
    db.add(booking)
    await db.commit()
    await db.refresh(booking)

    logger.info("Booking %s created by passenger=%s", booking.id, passenger_id)
    return booking


async def transition_status(
    db: AsyncSession,
    booking_id: int,
    new_status: str,
    acting_driver_id: str | None = None,
) -> Booking:
    """
    Move a booking to ``new_status``.

    ``accepted`` goes through the matching coordinator (eligibility check +
    conditional update). ``completed`` / ``cancelled`` are written with a
    status guard so two racing writers cannot leave a terminal state. When
    ``acting_driver_id`` is given, an accepted booking only moves on for the
    driver bound to it.
    """
    if new_status == BookingStatusEnum.accepted.value:
        if not acting_driver_id:
            raise ValidationError("Accepting a booking requires a driver")
        return await matching.accept(db, booking_id, acting_driver_id)

    sources = source_states(new_status)
    if not sources:
        current = await get_booking(db, booking_id)
        raise InvalidTransition(f"Cannot move booking from {current.status} to {new_status}")

    values: dict = {"status": new_status}
    if new_status == BookingStatusEnum.cancelled.value:
        values["driver_id"] = None

    result = await db.execute(
        update(Booking)
        .where(Booking.id == booking_id, _source_guard(sources, acting_driver_id))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        current = await get_booking(db, booking_id)
        if current.status == ACCEPTED and current.status in sources and acting_driver_id:
            raise PolicyViolation(f"Booking {booking_id} is assigned to another driver")
        raise InvalidTransition(f"Cannot move booking from {current.status} to {new_status}")

    await db.commit()
    logger.info("Booking %s -> %s (actor=%s)", booking_id, new_status, acting_driver_id)
    return await get_booking(db, booking_id)


def _source_guard(sources: list[str], acting_driver_id: str | None):
    """Legal source states; a driver may only move an accepted booking bound to them."""
    if not acting_driver_id or ACCEPTED not in sources:
        return Booking.status.in_(sources)
    clauses = [and_(Booking.status == ACCEPTED, Booking.driver_id == acting_driver_id)]
    others = [s for s in sources if s != ACCEPTED]
    if others:
        clauses.append(Booking.status.in_(others))
    return or_(*clauses)


async def cancel_and_remove(db: AsyncSession, booking_id: int, passenger_id: str) -> None:
    """
    Passenger cancellation: the row is deleted, no history survives.

    Only the owning passenger may remove a booking, and only while it is
    still pending or accepted.
    """
    result = await db.execute(
        delete(Booking)
        .where(
            Booking.id == booking_id,
            Booking.passenger_id == passenger_id,
            Booking.status.in_(ACTIVE_STATUSES),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        current = await get_booking(db, booking_id)
        if current.passenger_id != passenger_id:
            raise PolicyViolation(f"Booking {booking_id} belongs to another passenger")
        raise InvalidTransition(f"Cannot cancel a {current.status} booking")
    await db.commit()
    logger.info("Booking %s cancelled and removed by passenger=%s", booking_id, passenger_id)


async def assigned_bookings(db: AsyncSession, driver_id: str) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .where(Booking.driver_id == driver_id, Booking.status == BookingStatusEnum.accepted.value)
        .order_by(Booking.id.desc())
    )
    return list(result.scalars().all())


async def list_bookings(db: AsyncSession, status: str | None = None) -> list[Booking]:
    query = select(Booking).order_by(Booking.id.desc())
    if status:
        query = query.where(Booking.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())
