from datetime import datetime
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from ridematch.database import Base


class DriverRating(Base):
    __tablename__ = "driver_ratings"
    __table_args__ = (CheckConstraint("score BETWEEN 1 AND 5", name="ck_driver_ratings_score"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # One rating per booking
    booking_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    driver_id: Mapped[str] = mapped_column(String, ForeignKey("drivers.id"), nullable=False, index=True)
    passenger_id: Mapped[str] = mapped_column(String, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
