from unittest import mock

from tests.helpers import ApiTestCase


class TestRequestContext(ApiTestCase):

    def test_request_id_and_timing_headers(self):
        first = self.client.get("/api/feed")
        second = self.client.get("/api/feed")
        self.assertEqual(len(first.headers["X-Request-ID"]), 36)
        self.assertNotEqual(first.headers["X-Request-ID"], second.headers["X-Request-ID"])
        self.assertTrue(first.headers["X-Response-Time"].endswith("ms"))

    def test_error_responses_are_tagged_too(self):
        response = self.client.get("/api/posts/12345")
        self.assertEqual(response.status_code, 404)
        self.assertIn("X-Request-ID", response.headers)


class TestClientErrorIntake(ApiTestCase):

    def test_log_error_accepts_report(self):
        response = self.client.post(
            "/api/log-error",
            json={"message": "TypeError in Feed", "url": "/feed", "userAgent": "jest", "details": {"line": 3}},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})

    def test_log_error_with_empty_body(self):
        self.assertEqual(self.client.post("/api/log-error", json={}).json(), {"success": True})

    def test_log_error_accepts_string_details(self):
        with mock.patch("picwall.routers.logs.main.log_error") as log_error:
            response = self.client.post(
                "/api/log-error", json={"message": "boom", "details": "TypeError: x\n    at Feed"}
            )
        self.assertEqual(response.status_code, 200)
        logged = log_error.call_args.args[0]
        self.assertEqual(logged.message, "boom")
        self.assertEqual(logged.source.value, "CLIENT")
        self.assertEqual(logged.details["details"], "TypeError: x\n    at Feed")

    def test_log_error_merges_object_details(self):
        with mock.patch("picwall.routers.logs.main.log_error") as log_error:
            self.client.post("/api/log-error", json={"details": {"line": 3}, "url": "/feed"})
        details = log_error.call_args.args[0].details
        self.assertEqual(details["line"], 3)
        self.assertEqual(details["clientUrl"], "/feed")
