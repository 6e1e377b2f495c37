# tests/test_dashboard.py

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from dashboard.services.dashboard_service import DashboardService
from programs.services.assignment_service import ProgramAssignmentService
from tests.factories import make_staff, make_user

User = get_user_model()


class DashboardTestCase(TestCase):
    """
    Four week program without a schedule, so every score is the share
    of the program calendar already elapsed.

    pending, invited, active: one user each with no program
    half, late, done: active programs at 50%, 75% and 100%
    closed: completed program at 25%, back to status active
    """

    def setUp(self):
        cache.clear()
        self.today = timezone.localdate()
        self.assignments = ProgramAssignmentService()
        self.template = self.assignments.create_program_template("Knee rehab", weeks=4)

        self.pending = make_user(first_name="Pending")
        self.invited = make_user(first_name="Invited", status=User.Status.INVITED)
        self.active = make_user(first_name="Active", status=User.Status.ACTIVE)

        self.half = self.start_program("Half", days_ago=14)
        self.late = self.start_program("Late", days_ago=21)
        self.done = self.start_program("Done", days_ago=28)
        self.closed = self.start_program("Closed", days_ago=7)
        self.assignments.complete_assignment(self.assignments.active_assignment_for(self.closed.id).id)

    def start_program(self, first_name, days_ago):
        user = make_user(first_name=first_name, status=User.Status.ACTIVE)
        self.assignments.assign_to_user(self.template.id, user.id, self.today - timedelta(days=days_ago))
        return user


# ════════════════════════════════════════════════════════════════════
# SERVICE
# ════════════════════════════════════════════════════════════════════

class DashboardServiceTests(DashboardTestCase):

    def setUp(self):
        super().setUp()
        self.service = DashboardService(today=self.today)

    # ---------- STATUS ----------

    def test_status_counts(self):
        counts = self.service.status_counts()
        self.assertEqual(counts.pending, 1)
        self.assertEqual(counts.invited, 1)
        self.assertEqual(counts.active, 2)
        self.assertEqual(counts.in_program, 3)
        self.assertEqual(counts.no_program, 1)

    def test_status_lists(self):
        self.assertEqual(
            {user.first_name for user in self.service.users_by_status("active")},
            {"Active", "Closed"},
        )
        self.assertEqual(
            {user.first_name for user in self.service.users_in_program()},
            {"Half", "Late", "Done"},
        )
        self.assertEqual(
            {user.first_name for user in self.service.users_with_no_program()},
            {"Pending", "Invited", "Active", "Closed"},
        )

    # ---------- COMPLIANCE ----------

    def test_aggregate_over_active_programs(self):
        aggregate = self.service.aggregate_compliance()
        self.assertEqual(aggregate.compliance, 75)
        self.assertEqual(aggregate.program_completion, 75)

    def test_aggregate_without_programs(self):
        self.assignments.delete_assignment(self.template.id)
        aggregate = self.service.aggregate_compliance()
        self.assertEqual(aggregate.compliance, 0)
        self.assertEqual(aggregate.program_completion, 0)

    def test_users_needing_attention(self):
        result = self.service.users_needing_attention()
        self.assertEqual(result.total, 1)
        self.assertEqual(result.users[0].user_id, self.half.id)
        self.assertEqual(result.users[0].compliance, 50)
        self.assertEqual(result.users[0].program_name, "Knee rehab")

    def test_users_program_completed(self):
        result = self.service.users_program_completed()
        self.assertEqual(result.total, 2)
        self.assertEqual([user.first_name for user in result.users], ["Done", "Closed"])
        self.assertEqual([user.compliance for user in result.users], [100, 25])


class DashboardCacheTests(DashboardTestCase):

    def test_figures_are_cached_until_invalidated(self):
        service = DashboardService()
        self.assertEqual(service.status_counts().pending, 1)

        make_user()
        self.assertEqual(service.status_counts().pending, 1)

        DashboardService.invalidate()
        self.assertEqual(service.status_counts().pending, 2)


# ════════════════════════════════════════════════════════════════════
# API
# ════════════════════════════════════════════════════════════════════

class DashboardApiTests(DashboardTestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(make_staff())

    def test_summary(self):
        response = self.client.get(reverse("dashboard:summary"), {"refresh": "true"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            set(response.data.keys()),
            {"status_counts", "aggregate", "needing_attention", "program_completed"},
        )
        self.assertEqual(response.data["status_counts"]["in_program"], 3)
        self.assertEqual(response.data["needing_attention"]["total"], 1)

    def test_segments(self):
        response = self.client.get(reverse("dashboard:users", args=["in-program"]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 3)

        response = self.client.get(reverse("dashboard:users", args=["program-completed"]))
        self.assertEqual(response.data["total"], 2)

    def test_unknown_segment(self):
        response = self.client.get(reverse("dashboard:users", args=["archived"]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error_code"], "not_found")

    def test_patients_are_refused(self):
        client = APIClient()
        client.force_authenticate(self.pending)
        response = client.get(reverse("dashboard:summary"))
        self.assertEqual(response.status_code, 403)
