"""
Passenger complaints against drivers.

Each (driver, passenger) pair may file at most ``report_limit_per_pair``
reports. Reports only accumulate: banning is a separate admin action.
"""
import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ridematch.config import get_settings
from ridematch.models.driver import Driver
from ridematch.models.report import DriverReport
from ridematch.services.exceptions import DriverNotFound, ReportLimitExceeded, ValidationError

logger = logging.getLogger(__name__)
settings = get_settings()


async def count_reports(db: AsyncSession, driver_id: str, passenger_id: str) -> int:
    result = await db.execute(
        select(func.count(DriverReport.id)).where(
            DriverReport.driver_id == driver_id,
            DriverReport.passenger_id == passenger_id,
        )
    )
    return int(result.scalar_one())


async def file_report(
    db: AsyncSession,
    driver_id: str,
    passenger_id: str,
    message: str,
    booking_id: int | None = None,
) -> DriverReport:
    """
    Record a report and bump the driver's report counter.

    The driver row is locked (SELECT ... FOR UPDATE) for the whole
    check-insert-increment sequence, so concurrent reports from the same
    passenger serialise and cannot overrun the limit on PostgreSQL.
    """
    if not message or not message.strip():
        raise ValidationError("Report message is required")

    limit = settings.report_limit_per_pair

    locked = await db.execute(
        select(Driver.id).where(Driver.id == driver_id).with_for_update()
    )
    if locked.scalar_one_or_none() is None:
        await db.rollback()
        raise DriverNotFound()

    existing = await count_reports(db, driver_id, passenger_id)
    if existing >= limit:
        await db.rollback()
        logger.info(
            "Report rejected: passenger=%s driver=%s already filed %d", passenger_id, driver_id, existing
        )
        raise ReportLimitExceeded(
            f"Report limit reached. You can only report the same driver {limit} times."
        )

    report = DriverReport(
        driver_id=driver_id,
        passenger_id=passenger_id,
        booking_id=booking_id,
        message=message.strip(),
    )
    db.add(report)
    await db.execute(
        update(Driver)
        .where(Driver.id == driver_id)
        .values(report_count=Driver.report_count + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(report)
    logger.info("Report %s filed against driver=%s by passenger=%s", report.id, driver_id, passenger_id)
    return report


async def list_reports(db: AsyncSession, driver_id: str | None = None) -> list[DriverReport]:
    query = select(DriverReport).order_by(DriverReport.id.desc())
    if driver_id:
        query = query.where(DriverReport.driver_id == driver_id)
    result = await db.execute(query)
    return list(result.scalars().all())
