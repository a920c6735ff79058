from datetime import datetime
from sqlalchemy import DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
from ridematch.database import Base


class BookingDecline(Base):
    """A driver's permanent opt-out from one booking's feed entry.

    booking_id is deliberately not a foreign key: declines outlive the
    booking when a passenger deletes it.
    """

    __tablename__ = "booking_declines"
    __table_args__ = (UniqueConstraint("booking_id", "driver_id", name="uq_booking_declines_booking_driver"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    driver_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
