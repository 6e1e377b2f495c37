# tests/test_core.py

from django.test import RequestFactory, SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.exceptions import AssignmentConflictException, ScheduleException
from core.views import custom_404, custom_500


class HealthCheckTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_health(self):
        response = self.client.get(reverse("health"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "healthy")
        self.assertEqual(response.data["checks"], {"database": "ok", "cache": "ok"})

    def test_readiness(self):
        response = self.client.get(reverse("readiness"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"status": "ready"})

    def test_liveness(self):
        response = self.client.get(reverse("liveness"))
        self.assertEqual(response.data, {"status": "alive"})


class ErrorResponseTests(TestCase):

    def test_unauthenticated_request(self):
        response = APIClient().get(reverse("users:me"))
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error_code"], "not_authenticated")
        self.assertIn("message", response.data)
        self.assertNotIn("detail", response.data)


class ErrorHandlerTests(SimpleTestCase):

    def test_custom_404(self):
        response = custom_404(RequestFactory().get("/missing/"))
        self.assertEqual(response.status_code, 404)
        self.assertIn(b'"error_code": "not_found"', response.content)

    def test_custom_500(self):
        response = custom_500(RequestFactory().get("/"))
        self.assertEqual(response.status_code, 500)

    def test_exception_codes(self):
        self.assertEqual(AssignmentConflictException.status_code, 409)
        self.assertEqual(AssignmentConflictException.default_code, "assignment_conflict")
        self.assertEqual(ScheduleException.status_code, 400)
        self.assertEqual(ScheduleException.default_code, "schedule_error")
