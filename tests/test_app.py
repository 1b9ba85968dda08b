"""Tests for app wiring: health check, error envelopes and per-app isolation."""

import unittest

from fastapi.testclient import TestClient

from support import AppTestCase, FakeMediaStorage, make_settings, seed_user

from vidtube.core.errors import ConflictError
from vidtube.main import create_app
from vidtube.models import Base, User


class TestHealth(AppTestCase):
    def test_health_reports_database_and_version(self) -> None:
        resp = self.client.get("/api/v1/health/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["environment"], "test")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["version"], "0.1.0")

    def test_root_route(self) -> None:
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["docs"], "/docs")


class TestErrorEnvelope(AppTestCase):
    """Every failure answers with {statusCode, data, message, success, errors}."""

    def test_unknown_route_uses_error_envelope(self) -> None:
        resp = self.client.get("/api/v1/nothing-here")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(
            resp.json(),
            {
                "statusCode": 404,
                "data": None,
                "message": "Not Found",
                "success": False,
                "errors": [],
            },
        )

    def test_domain_error_keeps_status_and_message(self) -> None:
        @self.app.get("/boom-conflict")
        def boom() -> None:
            raise ConflictError("already there", errors=["username"])

        resp = self.client.get("/boom-conflict")
        self.assertEqual(resp.status_code, 409)
        body = resp.json()
        self.assertEqual(body["message"], "already there")
        self.assertEqual(body["errors"], ["username"])
        self.assertFalse(body["success"])

    def test_unexpected_error_is_generic_500(self) -> None:
        @self.app.get("/boom")
        def boom() -> None:
            raise RuntimeError("secret internals")

        client = TestClient(self.app, raise_server_exceptions=False)
        with self.assertLogs("vidtube.core.errors", level="ERROR"):
            resp = client.get("/boom")
        self.assertEqual(resp.status_code, 500)
        body = resp.json()
        self.assertEqual(body["message"], "Internal server error")
        self.assertEqual(body["statusCode"], 500)
        self.assertNotIn("secret internals", resp.text)

    def test_validation_error_is_bad_request(self) -> None:
        resp = self.client.post("/api/v1/users/login", json={"username": "alice"})
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["message"], "Invalid request input")
        self.assertTrue(body["errors"])

    def test_unauthorized_sets_bearer_challenge(self) -> None:
        resp = self.client.get("/api/v1/users/current-user")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers.get("www-authenticate"), "Bearer")


class TestAppIsolation(unittest.TestCase):
    """Two apps built side by side do not share a database."""

    def test_apps_have_separate_state(self) -> None:
        apps = [create_app(make_settings(), media_storage=FakeMediaStorage()) for _ in range(2)]
        for app in apps:
            Base.metadata.create_all(app.state.engine)
        try:
            with apps[0].state.session_factory() as db:
                seed_user(db, "only_in_first")
            with apps[1].state.session_factory() as db:
                self.assertEqual(db.query(User).count(), 0)
        finally:
            for app in apps:
                Base.metadata.drop_all(app.state.engine)
                app.state.engine.dispose()


if __name__ == "__main__":
    unittest.main()
