from datetime import date, datetime, time
from decimal import Decimal
from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Time, func
from sqlalchemy.orm import Mapped, mapped_column
from ridematch.database import Base


class Booking(Base):
    __tablename__ = "bookings"

    # Integer ids: feeds are ordered newest-first by id
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    passenger_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    driver_id: Mapped[str | None] = mapped_column(String, ForeignKey("drivers.id"), nullable=True, index=True)

    pickup_area: Mapped[str] = mapped_column(String(120), nullable=False)
    dropoff_area: Mapped[str] = mapped_column(String(120), nullable=False)
    pickup_address: Mapped[str] = mapped_column(String(500), nullable=False)
    dropoff_address: Mapped[str] = mapped_column(String(500), nullable=False)
    ride_date: Mapped[date] = mapped_column(Date, nullable=False)
    ride_time: Mapped[time] = mapped_column(Time, nullable=False)

    vehicle_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # Computed by the client, stored as-is
    fare: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # pending | accepted | completed | cancelled
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
