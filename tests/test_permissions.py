import datetime
from unittest.mock import MagicMock, patch

import pytest
from flask import Flask

from homeservice import scheduler as scheduler_module
from homeservice.models import PasswordResetCode
from homeservice.permissions import (
    ACCESS_RULES,
    ADMIN_ONLY,
    is_public_endpoint,
    validate_access_rules,
)
from homeservice.services.password_reset_store import PasswordResetStore
from main import create_app


class TestAccessTable:
    def test_every_rule_matches_a_route(self, app):
        assert set(ACCESS_RULES) <= set(app.view_functions)

    def test_every_route_is_public_or_guarded(self, app):
        for endpoint in app.view_functions:
            assert is_public_endpoint(endpoint) or endpoint in ACCESS_RULES, endpoint

    def test_public_endpoints(self):
        assert is_public_endpoint("auth.login_user")
        assert is_public_endpoint("flasgger.apidocs")
        assert not is_public_endpoint("bookings.add_booking")

    def test_unguarded_route_fails_startup(self, app):
        app.add_url_rule("/api/debug", "debug_dump", lambda: "secret")
        with pytest.raises(RuntimeError, match="debug_dump"):
            validate_access_rules(app)

    def test_stale_rule_fails_startup(self, app):
        with patch.dict(ACCESS_RULES, {"bookings.archive_booking": ADMIN_ONLY}):
            with pytest.raises(RuntimeError, match="bookings.archive_booking"):
                validate_access_rules(app)

    def test_bare_app_has_stale_rules(self):
        with pytest.raises(RuntimeError, match="unknown endpoints"):
            validate_access_rules(Flask(__name__))


class TestCreateApp:
    def test_unknown_completion_policy_rejected(self):
        with pytest.raises(ValueError, match="BOOKING_COMPLETION_POLICY"):
            create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://", "BOOKING_COMPLETION_POLICY": "whenever"})

    def test_api_docs_list_booking_responses(self, client):
        paths = client.get("/apispec.json").get_json()["paths"]

        assert set(paths["/api/bookings/{booking_id}"]["get"]["responses"]) == {"200", "403", "404"}
        assert "409" in paths["/api/bookings/{booking_id}/reject"]["put"]["responses"]

    def test_json_404(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.get_json()["status"] == "error"


class TestScheduler:
    def test_disabled_while_testing(self, app):
        assert scheduler_module.init_scheduler(app) is None

    def test_disabled_without_interval(self):
        fake_app = MagicMock()
        fake_app.config = {"TESTING": False, "OTP_SWEEP_MINUTES": 0}
        assert scheduler_module.init_scheduler(fake_app) is None

    def test_registers_purge_job(self):
        fake_app = MagicMock()
        fake_app.config = {"TESTING": False, "OTP_SWEEP_MINUTES": 15}
        with patch.object(scheduler_module, "scheduler") as mock_scheduler:
            mock_scheduler.running = True
            result = scheduler_module.init_scheduler(fake_app)

        assert result is mock_scheduler
        _, kwargs = mock_scheduler.add_job.call_args
        assert kwargs["minutes"] == 15
        assert kwargs["id"] == "purge_expired_codes"
        mock_scheduler.start.assert_not_called()

    def test_purge_expired_codes(self, app, db_session):
        long_ago = datetime.datetime(2000, 1, 1, 12, 0)
        PasswordResetStore(clock=lambda: long_ago).set("stale@example.com", "111111")
        PasswordResetStore().set("fresh@example.com", "222222")

        scheduler_module.purge_expired_codes(app)

        db_session.expire_all()
        assert db_session.get(PasswordResetCode, "stale@example.com") is None
        assert db_session.get(PasswordResetCode, "fresh@example.com") is not None
