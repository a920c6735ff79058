from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BookingStatusEnum(str, Enum):
    pending = "pending"
    accepted = "accepted"
    completed = "completed"
    cancelled = "cancelled"


class DriverStatusEnum(str, Enum):
    pending = "pending"
    active = "active"
    inactive = "inactive"
    banned = "banned"


class VehicleTypeEnum(str, Enum):
    four_seater = "4 Seaters"
    six_seater = "6 Seaters"


class RoleEnum(str, Enum):
    passenger = "passenger"
    driver = "driver"
    admin = "admin"


class LoginRoleEnum(str, Enum):
    """Roles that may sign in with an emailed code. Admin tokens are never issued here."""
    passenger = "passenger"
    driver = "driver"


# ---------------------------------------------------------------------------
# Booking schemas
# ---------------------------------------------------------------------------

class BookingCreateRequest(BaseModel):
    pickup_area: str = Field(..., min_length=1, max_length=120)
    dropoff_area: str = Field(..., min_length=1, max_length=120)
    pickup_address: str = Field(..., min_length=1, max_length=500)
    dropoff_address: str = Field(..., min_length=1, max_length=500)
    ride_date: date
    ride_time: time
    vehicle_type: VehicleTypeEnum = VehicleTypeEnum.four_seater
    fare: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)

    @field_validator("pickup_area", "dropoff_area", "pickup_address", "dropoff_address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class BookingResponse(BaseModel):
    id: int
    passenger_id: str
    driver_id: Optional[str] = None
    pickup_area: str
    dropoff_area: str
    pickup_address: str
    dropoff_address: str
    ride_date: date
    ride_time: time
    vehicle_type: VehicleTypeEnum
    fare: Decimal
    status: BookingStatusEnum
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingStatusRequest(BaseModel):
    status: BookingStatusEnum


class DeclineRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class DeclineResponse(BaseModel):
    booking_id: int
    driver_id: str
    reason: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Driver schemas
# ---------------------------------------------------------------------------

class DriverCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    phone: str = Field(..., min_length=10, max_length=20)
    vehicle_type: VehicleTypeEnum = VehicleTypeEnum.four_seater


class DriverResponse(BaseModel):
    id: str
    name: str
    phone: str
    vehicle_type: str
    status: DriverStatusEnum
    report_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class DriverStatusResponse(BaseModel):
    id: str
    status: DriverStatusEnum


class EligibilityUpdateRequest(BaseModel):
    # Plain str: unknown values are reported as invalid_state by the service
    status: str


# ---------------------------------------------------------------------------
# Report / rating schemas
# ---------------------------------------------------------------------------

class ReportCreateRequest(BaseModel):
    booking_id: Optional[int] = None
    message: str = Field(..., min_length=1, max_length=2000)


class ReportResponse(BaseModel):
    id: int
    driver_id: str
    passenger_id: str
    booking_id: Optional[int] = None
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RatingCreateRequest(BaseModel):
    score: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class RatingResponse(BaseModel):
    id: int
    booking_id: int
    driver_id: str
    passenger_id: str
    score: int
    comment: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DriverRatingsResponse(BaseModel):
    driver_id: str
    average: Optional[float] = None
    count: int
    ratings: list[RatingResponse]


# ---------------------------------------------------------------------------
# Verification schemas
# ---------------------------------------------------------------------------

class CodeIssueRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    user_id: str = Field(..., min_length=1)
    role: LoginRoleEnum


class CodeResendRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)


class CodeVerifyRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    code: str = Field(..., min_length=6, max_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: RoleEnum
