"""
Unit tests for the rating aggregator.
"""
import pytest

from ridematch.services import ratings
from ridematch.services.exceptions import (
    AlreadyRated,
    BookingNotFound,
    NotCompleted,
    PolicyViolation,
    ValidationError,
)


@pytest.mark.asyncio
class TestSubmitRating:
    async def test_rate_completed_booking(self, db, make_driver, make_booking):
        driver = await make_driver()
        b3 = await make_booking(passenger_id="p-1", status="completed", driver_id=driver.id)

        rating = await ratings.submit_rating(db, b3.id, "p-1", 4, "smooth ride")

        assert rating.driver_id == driver.id
        assert rating.score == 4
        assert await ratings.average_rating(db, driver.id) == 4.0

    async def test_second_rating_rejected(self, db, make_driver, make_booking):
        driver = await make_driver()
        b3 = await make_booking(passenger_id="p-1", status="completed", driver_id=driver.id)
        await ratings.submit_rating(db, b3.id, "p-1", 4)

        with pytest.raises(AlreadyRated):
            await ratings.submit_rating(db, b3.id, "p-1", 1)

        assert await ratings.average_rating(db, driver.id) == 4.0

    @pytest.mark.parametrize("status", ["pending", "accepted", "cancelled"])
    async def test_only_completed_bookings(self, db, make_driver, make_booking, status):
        driver = await make_driver()
        bound = driver.id if status == "accepted" else None
        booking = await make_booking(passenger_id="p-1", status=status, driver_id=bound)
        with pytest.raises(NotCompleted):
            await ratings.submit_rating(db, booking.id, "p-1", 5)

    async def test_missing_booking(self, db):
        with pytest.raises(BookingNotFound):
            await ratings.submit_rating(db, 5150, "p-1", 5)

    @pytest.mark.parametrize("score", [0, 6, -1])
    async def test_score_out_of_range(self, db, make_driver, make_booking, score):
        driver = await make_driver()
        booking = await make_booking(passenger_id="p-1", status="completed", driver_id=driver.id)
        with pytest.raises(ValidationError):
            await ratings.submit_rating(db, booking.id, "p-1", score)

    async def test_other_passenger_cannot_rate(self, db, make_driver, make_booking):
        driver = await make_driver()
        booking = await make_booking(passenger_id="p-1", status="completed", driver_id=driver.id)
        with pytest.raises(PolicyViolation):
            await ratings.submit_rating(db, booking.id, "p-2", 1)


@pytest.mark.asyncio
class TestAverageRating:
    async def test_no_ratings(self, db, make_driver):
        driver = await make_driver()
        assert await ratings.average_rating(db, driver.id) is None

    async def test_mean_over_all_bookings(self, db, make_driver, make_booking):
        driver = await make_driver()
        for passenger, score in (("p-1", 5), ("p-2", 4), ("p-3", 2)):
            booking = await make_booking(passenger_id=passenger, status="completed", driver_id=driver.id)
            await ratings.submit_rating(db, booking.id, passenger, score)

        assert await ratings.average_rating(db, driver.id) == pytest.approx(11 / 3, abs=0.01)
        assert len(await ratings.list_ratings(db, driver.id)) == 3

    async def test_average_is_per_driver(self, db, make_driver, make_booking):
        d1 = await make_driver()
        d2 = await make_driver()
        b1 = await make_booking(passenger_id="p-1", status="completed", driver_id=d1.id)
        b2 = await make_booking(passenger_id="p-2", status="completed", driver_id=d2.id)
        await ratings.submit_rating(db, b1.id, "p-1", 5)
        await ratings.submit_rating(db, b2.id, "p-2", 1)

        assert await ratings.average_rating(db, d1.id) == 5.0
        assert await ratings.average_rating(db, d2.id) == 1.0
