from ridematch.models.driver import Driver
from ridematch.models.booking import Booking
from ridematch.models.decline import BookingDecline
from ridematch.models.report import DriverReport
from ridematch.models.rating import DriverRating

__all__ = ["Driver", "Booking", "BookingDecline", "DriverReport", "DriverRating"]
