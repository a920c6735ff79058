"""Initial schema — drivers, bookings, booking_declines, driver_reports, driver_ratings"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "drivers",
        sa.Column("id", sa.String, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), unique=True, nullable=False),
        sa.Column("vehicle_type", sa.String(20), nullable=False, server_default="4 Seaters"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("report_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_drivers_status", "drivers", ["status"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("passenger_id", sa.String, nullable=False),
        sa.Column("driver_id", sa.String, sa.ForeignKey("drivers.id"), nullable=True),
        sa.Column("pickup_area", sa.String(120), nullable=False),
        sa.Column("dropoff_area", sa.String(120), nullable=False),
        sa.Column("pickup_address", sa.String(500), nullable=False),
        sa.Column("dropoff_address", sa.String(500), nullable=False),
        sa.Column("ride_date", sa.Date, nullable=False),
        sa.Column("ride_time", sa.Time, nullable=False),
        sa.Column("vehicle_type", sa.String(20), nullable=False),
        sa.Column("fare", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_bookings_status", "bookings", ["status"])
    op.create_index("idx_bookings_passenger", "bookings", ["passenger_id"])
    op.create_index("idx_bookings_driver", "bookings", ["driver_id"])
    op.create_index("idx_bookings_created", "bookings", ["created_at"])

    # No FK on booking_id: declines survive a passenger deleting the booking
    op.create_table(
        "booking_declines",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer, nullable=False),
        sa.Column("driver_id", sa.String, nullable=False),
        sa.Column("reason", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("booking_id", "driver_id", name="uq_booking_declines_booking_driver"),
    )
    op.create_index("idx_booking_declines_driver", "booking_declines", ["driver_id"])
    op.create_index("idx_booking_declines_booking", "booking_declines", ["booking_id"])

    op.create_table(
        "driver_reports",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("driver_id", sa.String, sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("passenger_id", sa.String, nullable=False),
        sa.Column("booking_id", sa.Integer, nullable=True),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_driver_reports_pair", "driver_reports", ["driver_id", "passenger_id"])
    op.create_index("idx_driver_reports_created", "driver_reports", ["created_at"])

    op.create_table(
        "driver_ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer, unique=True, nullable=False),
        sa.Column("driver_id", sa.String, sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("passenger_id", sa.String, nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("score BETWEEN 1 AND 5", name="ck_driver_ratings_score"),
    )
    op.create_index("idx_driver_ratings_driver", "driver_ratings", ["driver_id"])


def downgrade() -> None:
    op.drop_table("driver_ratings")
    op.drop_table("driver_reports")
    op.drop_table("booking_declines")
    op.drop_table("bookings")
    op.drop_table("drivers")
