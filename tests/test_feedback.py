import datetime
import json

import pytest

from homeservice.models import Booking, BookingStatus, BusinessProfile, Service
from homeservice.services import feedback_service
from homeservice.services.exceptions import DuplicateFeedbackError


@pytest.fixture
def completed_booking(db_session, customer, service, slots, address):
    """Factory for completed bookings of `customer` on successive days."""
    counter = {"n": 0}

    def _completed_booking(slot=None, owner=None, status=BookingStatus.COMPLETED.value):
        counter["n"] += 1
        booking = Booking(
            customer_id=(owner or customer).id,
            business_profile_id=service.business_profile_id,
            service_id=service.id,
            slot_id=(slot or slots[0]).id,
            address_id=address.id,
            booking_date=datetime.date(2030, 1, 1) + datetime.timedelta(days=counter["n"]),
            status=status,
            total_price=service.price,
            slot_hold=None if status == BookingStatus.CANCELLED.value else True,
        )
        db_session.add(booking)
        db_session.commit()
        return booking

    return _completed_booking


@pytest.mark.feedback
class TestAddFeedback:
    def test_feedback_on_completed_booking(self, client, customer, auth_headers, completed_booking):
        booking = completed_booking()
        response = client.post(
            "/api/feedback",
            json={"booking_id": booking.id, "rating": 4.5, "comments": "Quick and tidy"},
            headers=auth_headers(customer),
        )
        data = json.loads(response.data)

        assert response.status_code == 201
        assert data["feedback"]["rating"] == 4.5
        assert data["feedback"]["customer"]["name"] == customer.name
        assert data["service_rating"] == 4.5
        assert data["total_reviews"] == 1

    def test_second_feedback_conflicts(self, client, customer, auth_headers, completed_booking):
        booking = completed_booking()
        payload = {"booking_id": booking.id, "rating": 5}

        assert client.post("/api/feedback", json=payload, headers=auth_headers(customer)).status_code == 201
        second = client.post("/api/feedback", json=payload, headers=auth_headers(customer))
        assert second.status_code == 409

    def test_duplicate_raises_in_service(self, app, customer, completed_booking):
        booking = completed_booking()
        feedback_service.add_feedback(customer.id, booking.id, 3)
        with pytest.raises(DuplicateFeedbackError):
            feedback_service.add_feedback(customer.id, booking.id, 4)

    @pytest.mark.parametrize("status", ["pending", "confirmed", "cancelled"])
    def test_requires_completed_booking(self, client, customer, auth_headers, completed_booking, status):
        booking = completed_booking(status=status)
        response = client.post(
            "/api/feedback", json={"booking_id": booking.id, "rating": 4}, headers=auth_headers(customer)
        )
        assert response.status_code == 409

    def test_other_customers_booking(self, client, other_customer, auth_headers, completed_booking):
        booking = completed_booking()
        response = client.post(
            "/api/feedback", json={"booking_id": booking.id, "rating": 4}, headers=auth_headers(other_customer)
        )
        assert response.status_code == 403

    def test_unknown_booking(self, client, customer, auth_headers):
        response = client.post("/api/feedback", json={"booking_id": 9999, "rating": 4}, headers=auth_headers(customer))
        assert response.status_code == 404

    @pytest.mark.parametrize("rating", [0, 5.5, "great", None, True])
    def test_invalid_rating(self, client, customer, auth_headers, completed_booking, rating):
        booking = completed_booking()
        response = client.post(
            "/api/feedback", json={"booking_id": booking.id, "rating": rating}, headers=auth_headers(customer)
        )
        assert response.status_code == 400

    def test_comments_too_long(self, client, customer, auth_headers, completed_booking):
        booking = completed_booking()
        response = client.post(
            "/api/feedback",
            json={"booking_id": booking.id, "rating": 4, "comments": "x" * 2001},
            headers=auth_headers(customer),
        )
        assert response.status_code == 400

    def test_provider_cannot_leave_feedback(self, client, provider, auth_headers, completed_booking):
        booking = completed_booking()
        response = client.post(
            "/api/feedback", json={"booking_id": booking.id, "rating": 4}, headers=auth_headers(provider)
        )
        assert response.status_code == 403


@pytest.mark.feedback
class TestRatingAggregation:
    def test_service_rating_is_mean_of_feedback(self, app, customer, service, completed_booking, refetch):
        ratings = [5, 4, 2.5]
        for rating in ratings:
            booking = completed_booking()
            feedback_service.add_feedback(customer.id, booking.id, rating)

        reloaded = refetch(Service, service.id)
        assert reloaded.total_reviews == 3
        assert float(reloaded.rating) == pytest.approx(3.83, abs=0.001)

    def test_business_rating_follows_feedback(self, app, customer, business, completed_booking, refetch):
        for rating in (4, 5):
            feedback_service.add_feedback(customer.id, completed_booking().id, rating)

        assert float(refetch(BusinessProfile, business.id).rating) == pytest.approx(4.5)

    def test_one_decimal_rating_stored(self, app, customer, completed_booking):
        feedback = feedback_service.add_feedback(customer.id, completed_booking().id, 4.3)
        assert float(feedback.rating) == pytest.approx(4.3)


@pytest.mark.feedback
class TestFeedbackListing:
    def test_service_and_business_feedback(
        self, client, customer, other_provider, auth_headers, service, business, completed_booking
    ):
        feedback_service.add_feedback(customer.id, completed_booking().id, 4, "Good")
        feedback_service.add_feedback(customer.id, completed_booking().id, 2, "Late")

        response = client.get(f"/api/feedback/service/{service.id}", headers=auth_headers(other_provider))
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["total_reviews"] == 2
        assert data["rating"] == 3.0
        assert {item["comments"] for item in data["feedback"]} == {"Good", "Late"}

        response = client.get(f"/api/feedback/business/{business.id}", headers=auth_headers(customer))
        data = json.loads(response.data)
        assert response.status_code == 200
        assert len(data["feedback"]) == 2
        assert data["feedback"][0]["service_name"] == "Tap repair"

    def test_unknown_targets(self, client, customer, auth_headers):
        assert client.get("/api/feedback/service/9999", headers=auth_headers(customer)).status_code == 404
        assert client.get("/api/feedback/business/9999", headers=auth_headers(customer)).status_code == 404
