"""
Driver eligibility gate.

The drivers table is the system of record for moderation status. Only an
``active`` driver may be bound to a booking; the check is always made
against the database, never against a cached or client-supplied value.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.models.driver import Driver
from ridematch.schemas.schemas import DriverStatusEnum
from ridematch.services.exceptions import DriverNotFound, InvalidState, NotEligible

logger = logging.getLogger(__name__)

VALID_STATES = frozenset(s.value for s in DriverStatusEnum)


async def register_driver(db: AsyncSession, name: str, phone: str, vehicle_type: str) -> Driver:
    """New drivers wait in ``pending`` until an admin approves them."""
    driver = Driver(
        name=name,
        phone=phone,
        vehicle_type=vehicle_type,
        status=DriverStatusEnum.pending.value,
        report_count=0,
    )
    db.add(driver)
    await db.commit()
    await db.refresh(driver)
    logger.info("Registered driver=%s (pending approval)", driver.id)
    return driver


async def get_driver(db: AsyncSession, driver_id: str) -> Driver:
    driver = await db.get(Driver, driver_id, populate_existing=True)
    if driver is None:
        raise DriverNotFound()
    return driver


async def driver_status(db: AsyncSession, driver_id: str) -> str | None:
    result = await db.execute(select(Driver.status).where(Driver.id == driver_id))
    return result.scalar_one_or_none()


async def is_eligible_to_accept(db: AsyncSession, driver_id: str) -> bool:
    """True iff the stored status is ``active``. Unknown drivers are not eligible."""
    return await driver_status(db, driver_id) == DriverStatusEnum.active.value


async def require_eligible(db: AsyncSession, driver_id: str) -> None:
    """Raise DriverNotFound or NotEligible unless the driver may accept right now."""
    status = await driver_status(db, driver_id)
    if status is None:
        raise DriverNotFound()
    if status != DriverStatusEnum.active.value:
        logger.info("Eligibility refused: driver=%s status=%s", driver_id, status)
        raise NotEligible(f"Driver account is {status}")


async def set_eligibility(db: AsyncSession, driver_id: str, new_status: str) -> Driver:
    """Admin action: move a driver to any of the four moderation states."""
    if new_status not in VALID_STATES:
        raise InvalidState(f"status must be one of {sorted(VALID_STATES)}")

    result = await db.execute(
        update(Driver).where(Driver.id == driver_id).values(status=new_status)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise DriverNotFound()
    await db.commit()

    logger.info("Driver %s eligibility -> %s", driver_id, new_status)
    return await get_driver(db, driver_id)


async def ban_driver(db: AsyncSession, driver_id: str) -> Driver:
    return await set_eligibility(db, driver_id, DriverStatusEnum.banned.value)


async def list_drivers(db: AsyncSession, status: str = DriverStatusEnum.active.value) -> list[Driver]:
    if status not in VALID_STATES:
        raise InvalidState(f"status must be one of {sorted(VALID_STATES)}")
    result = await db.execute(
        select(Driver).where(Driver.status == status).order_by(Driver.created_at.desc())
    )
    return list(result.scalars().all())
