# tests/test_programs.py

import uuid
from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import (
    AssignmentConflictException,
    AssignmentException,
    ScheduleException,
    ValidationFailedException,
)
from exercises.services.template_service import ExerciseTemplateService
from programs.models import ExerciseGroup, ProgramAssignment, ProgramTemplate, WorkoutSchedule
from programs.services.assignment_service import ProgramAssignmentService
from programs.services.schedule_service import WorkoutScheduleService
from tests.factories import make_exercise, make_organization, make_staff, make_user

User = get_user_model()


def template_item(template):
    return {"id": str(template.id), "type": "exercise_template"}


def group_item(group):
    return {"id": str(group.id), "type": "group"}


class ProgramTestCase(TestCase):
    """Exercise templates and services shared by the program tests"""

    def setUp(self):
        self.assignments = ProgramAssignmentService()
        self.schedules = WorkoutScheduleService()
        self.squat = ExerciseTemplateService().upsert_template(make_exercise("Squat").id, sets=3, rep=10)
        self.plank = ExerciseTemplateService().upsert_template(make_exercise("Plank").id, sets=2, time=30)
        self.patient = make_user()
        self.today = timezone.localdate()

    def week(self, *days):
        days = list(days) + [[] for _ in range(7 - len(days))]
        return days


# ════════════════════════════════════════════════════════════════════
# SCHEDULES AND GROUPS
# ════════════════════════════════════════════════════════════════════

class WorkoutScheduleServiceTests(ProgramTestCase):

    def test_identical_schedules_share_a_row(self):
        first = self.schedules.upsert_schedule([self.week([template_item(self.squat)])])
        second = self.schedules.upsert_schedule(
            [[{"exercises": [template_item(self.squat)]}]], notes="ignored for existing rows"
        )
        self.assertEqual(first.id, second.id)
        self.assertEqual(WorkoutSchedule.objects.count(), 1)

    def test_unknown_reference_rejected(self):
        with self.assertRaises(ScheduleException):
            self.schedules.upsert_schedule([[[{"id": str(uuid.uuid4()), "type": "exercise_template"}]]])
        with self.assertRaises(ScheduleException):
            self.schedules.upsert_schedule([[[{"id": "not-a-uuid", "type": "group"}]]])

    def test_group_upsert(self):
        first = self.schedules.upsert_group("Core", [self.plank.id, self.squat.id], is_superset=True)
        second = self.schedules.upsert_group(" Core ", [str(self.plank.id), str(self.squat.id)], is_superset=True)
        self.assertEqual(first.id, second.id)
        self.assertEqual(first.exercise_template_ids, [str(self.plank.id), str(self.squat.id)])

        reordered = self.schedules.upsert_group("Core", [self.squat.id, self.plank.id], is_superset=True)
        self.assertNotEqual(first.id, reordered.id)

    def test_group_with_unknown_template(self):
        with self.assertRaises(ValidationFailedException):
            self.schedules.upsert_group("Core", [uuid.uuid4()])

    def test_resolve_schedule(self):
        group = self.schedules.upsert_group("Finisher", [self.plank.id])
        missing_id = str(uuid.uuid4())
        resolved = self.schedules.resolve_schedule([[
            [template_item(self.squat), {"id": missing_id, "type": "exercise_template"}],
            [group_item(group)],
        ]])

        squat, missing = resolved[0][0]
        self.assertEqual(squat["exercise_name"], "Squat")
        self.assertEqual(squat["description"], "3 sets: Set 1 - 10 reps | Set 2 - 10 reps | Set 3 - 10 reps")
        self.assertTrue(missing["missing"])

        finisher = resolved[0][1][0]
        self.assertEqual(finisher["title"], "Finisher")
        self.assertEqual([entry["exercise_name"] for entry in finisher["items"]], ["Plank"])

    def test_attach_only_when_missing(self):
        assignment = self.assignments.create_program_template("Base", weeks=2)
        first = self.schedules.upsert_schedule([self.week([template_item(self.squat)])])
        second = self.schedules.upsert_schedule([self.week([template_item(self.plank)])])

        self.schedules.attach_schedule_if_missing(assignment.id, first.id)
        assignment = self.schedules.attach_schedule_if_missing(assignment.id, second.id)
        self.assertEqual(assignment.workout_schedule_id, first.id)


class TemplateScheduleReplaceTests(ProgramTestCase):

    def setUp(self):
        super().setUp()
        self.template = self.assignments.create_program_template(
            "Knee rehab", weeks=2, schedule=[self.week([template_item(self.squat)])]
        )
        self.patient_assignment = self.assignments.assign_to_user(self.template.id, self.patient.id, self.today)

    def test_replace_moves_derived_assignments(self):
        result = self.schedules.replace_template_schedule(
            self.template.id, [self.week([template_item(self.plank)])], update_derived=True
        )
        self.patient_assignment.refresh_from_db()
        self.assertTrue(result.changed)
        self.assertEqual(result.derived_updated, 1)
        self.assertEqual(self.patient_assignment.workout_schedule_id, result.schedule.id)

    def test_replace_without_propagation(self):
        previous = self.patient_assignment.workout_schedule_id
        result = self.schedules.replace_template_schedule(self.template.id, [self.week([template_item(self.plank)])])
        self.patient_assignment.refresh_from_db()
        self.assertEqual(result.derived_updated, 0)
        self.assertEqual(self.patient_assignment.workout_schedule_id, previous)

    def test_same_content_is_unchanged(self):
        result = self.schedules.replace_template_schedule(
            self.template.id, [self.week([template_item(self.squat)])], update_derived=True
        )
        self.assertFalse(result.changed)
        self.assertEqual(result.derived_updated, 0)

    def test_patient_assignment_cannot_replace_shared_schedule(self):
        with self.assertRaises(AssignmentException):
            self.schedules.replace_template_schedule(self.patient_assignment.id, [])

    def test_patient_override(self):
        assignment = self.schedules.set_patient_override(
            self.patient_assignment.id, [[[], [template_item(self.plank)]]]
        )
        effective = self.schedules.effective_schedule(assignment)
        self.assertEqual(effective[0][0], [template_item(self.squat)])
        self.assertEqual(effective[0][1], [template_item(self.plank)])

        assignment = self.schedules.set_patient_override(self.patient_assignment.id, None)
        self.assertIsNone(assignment.patient_override)

    def test_template_cannot_carry_override(self):
        with self.assertRaises(AssignmentException):
            self.schedules.set_patient_override(self.template.id, [[[template_item(self.plank)]]])


# ════════════════════════════════════════════════════════════════════
# TEMPLATES AND ASSIGNMENTS
# ════════════════════════════════════════════════════════════════════

class ProgramAssignmentServiceTests(ProgramTestCase):

    def test_create_template(self):
        assignment = self.assignments.create_program_template(
            "  Back care ", weeks=4, start_date=date(2024, 1, 1)
        )
        self.assertTrue(assignment.is_template)
        self.assertIsNone(assignment.user)
        self.assertEqual(assignment.program_template.name, "Back care")
        self.assertEqual(assignment.end_date, date(2024, 1, 29))

    def test_template_validation(self):
        with self.assertRaises(ValidationFailedException):
            self.assignments.create_program_template(" ", weeks=4)
        with self.assertRaises(ValidationFailedException):
            self.assignments.create_program_template("Too long", weeks=53)
        with self.assertRaises(ValidationFailedException):
            self.assignments.create_program_template("Too short", weeks=0)

    def test_weeks_change_moves_template_end_date(self):
        assignment = self.assignments.create_program_template("Back care", weeks=4, start_date=date(2024, 1, 1))
        self.assignments.update_program_template(assignment.program_template_id, weeks=2)
        assignment.refresh_from_db()
        self.assertEqual(assignment.end_date, date(2024, 1, 15))

    def test_template_image(self):
        assignment = self.assignments.create_program_template("Back care", weeks=4)
        template = self.assignments.set_template_image(
            assignment.program_template_id, SimpleUploadedFile("cover.png", b"\x89PNG fake")
        )
        self.assertTrue(template.image.name.endswith(".png"))

        template = self.assignments.clear_template_image(template.id)
        self.assertFalse(template.image)

        with self.assertRaises(ValidationFailedException):
            self.assignments.set_template_image(template.id, SimpleUploadedFile("cover.gif", b"GIF89a"))

    def test_assign_to_user(self):
        template = self.assignments.create_program_template("Knee rehab", weeks=3)
        start = self.today + timedelta(days=2)
        assignment = self.assignments.assign_to_user(template.id, self.patient.id, start)

        self.patient.refresh_from_db()
        self.assertEqual(assignment.status, ProgramAssignment.Status.ACTIVE)
        self.assertEqual(assignment.end_date, start + timedelta(days=21))
        self.assertEqual(assignment.completion, [])
        self.assertTrue(self.patient.program_assigned)
        self.assertFalse(self.patient.program_started)
        self.assertEqual(self.patient.program_due_date, assignment.end_date)
        self.assertEqual(self.patient.status, User.Status.ASSIGNED)

    def test_second_active_program_conflicts(self):
        template = self.assignments.create_program_template("Knee rehab", weeks=3)
        self.assignments.assign_to_user(template.id, self.patient.id, self.today)
        with self.assertRaises(AssignmentConflictException):
            self.assignments.assign_to_user(template.id, self.patient.id, self.today)

    def test_assign_requires_template(self):
        template = self.assignments.create_program_template("Knee rehab", weeks=3)
        assignment = self.assignments.assign_to_user(template.id, self.patient.id, self.today)
        with self.assertRaises(AssignmentException):
            self.assignments.assign_to_user(assignment.id, make_user().id, self.today)

    def test_complete_frees_user_for_new_program(self):
        template = self.assignments.create_program_template("Knee rehab", weeks=3)
        assignment = self.assignments.assign_to_user(template.id, self.patient.id, self.today)

        completed = self.assignments.complete_assignment(assignment.id)
        self.patient.refresh_from_db()
        self.assertEqual(completed.status, ProgramAssignment.Status.COMPLETED)
        self.assertFalse(self.patient.program_assigned)
        self.assertEqual(self.patient.status, User.Status.ACTIVE)

        self.assignments.assign_to_user(template.id, self.patient.id, self.today)
        with self.assertRaises(AssignmentException):
            self.assignments.complete_assignment(assignment.id)

    def test_delete_template_cascades(self):
        template = self.assignments.create_program_template("Knee rehab", weeks=3)
        self.assignments.assign_to_user(template.id, self.patient.id, self.today)

        self.assignments.delete_assignment(template.id)
        self.patient.refresh_from_db()
        self.assertFalse(ProgramTemplate.objects.exists())
        self.assertFalse(ProgramAssignment.objects.exists())
        self.assertFalse(self.patient.program_assigned)
        self.assertIsNone(self.patient.program_due_date)

    def test_delete_patient_assignment_keeps_template(self):
        template = self.assignments.create_program_template("Knee rehab", weeks=3)
        assignment = self.assignments.assign_to_user(template.id, self.patient.id, self.today)
        self.assignments.delete_assignment(assignment.id)
        self.assertTrue(ProgramAssignment.objects.filter(id=template.id).exists())

    def test_clone(self):
        source = self.assignments.create_program_template(
            "Knee rehab", weeks=3, schedule=[self.week([template_item(self.squat)])]
        )
        clone = self.assignments.clone_template_assignment(source.id)
        self.assertEqual(clone.program_template.name, "Knee rehab (clone)")
        self.assertNotEqual(clone.program_template_id, source.program_template_id)
        self.assertEqual(clone.workout_schedule_id, source.workout_schedule_id)

    def test_clone_copies_image_file(self):
        source = self.assignments.create_program_template("Back care", weeks=4)
        original = self.assignments.set_template_image(
            source.program_template_id, SimpleUploadedFile("cover.png", b"\x89PNG fake")
        )
        clone = self.assignments.clone_template_assignment(source.id)
        cloned = clone.program_template
        self.assertTrue(cloned.image)
        self.assertNotEqual(cloned.image.name, original.image.name)

        self.assignments.clear_template_image(cloned.id)
        original.refresh_from_db()
        self.assertTrue(original.image.storage.exists(original.image.name))
        with original.image.open("rb") as image:
            self.assertEqual(image.read(), b"\x89PNG fake")

    def test_list_template_assignments(self):
        clinic = make_organization()
        other = make_organization("Other")
        self.assignments.create_program_template("Knee rehab", weeks=4, organization_id=clinic.id)
        self.assignments.create_program_template("Shared basics", weeks=2)
        self.assignments.create_program_template("Other clinic", weeks=4, organization_id=other.id)
        knee = ProgramAssignment.objects.get(program_template__name="Knee rehab")
        self.assignments.assign_to_user(knee.id, self.patient.id, self.today)

        def names(result):
            return sorted(assignment.program_template.name for assignment in result.data)

        self.assertEqual(names(self.assignments.list_template_assignments()), [
            "Knee rehab", "Other clinic", "Shared basics"
        ])
        self.assertEqual(names(self.assignments.list_template_assignments(organization_id=clinic.id)), [
            "Knee rehab", "Shared basics"
        ])
        self.assertEqual(names(self.assignments.list_template_assignments(weeks=2)), ["Shared basics"])
        self.assertEqual(names(self.assignments.list_template_assignments(search="KNEE")), ["Knee rehab"])
        self.assertEqual(self.assignments.list_template_assignments(show_assigned=True).total, 4)

        page = self.assignments.list_template_assignments(page=1, page_size=2)
        self.assertEqual(len(page.data), 2)
        self.assertTrue(page.has_more)


# ════════════════════════════════════════════════════════════════════
# PROGRESS
# ════════════════════════════════════════════════════════════════════

class ProgressTests(ProgramTestCase):

    def setUp(self):
        super().setUp()
        self.start = self.today - timedelta(days=2)
        template = self.assignments.create_program_template(
            "Knee rehab",
            weeks=2,
            schedule=[self.week([template_item(self.squat)], [], [template_item(self.plank)])],
        )
        self.assignment = self.assignments.assign_to_user(template.id, self.patient.id, self.start)
        self.template = template

    def test_record_and_summarize(self):
        self.assignments.record_day_progress(self.assignment.id, 0, 0, 3, 3)
        assignment = self.assignments.record_day_progress(self.assignment.id, 0, 2, 1, 2)

        summary = self.assignments.progress_summary(assignment, today=self.today)
        self.assertEqual((summary.current_week, summary.current_day), (1, 3))
        self.assertEqual(summary.overall_completion, 14)
        self.assertEqual(summary.compliance, 75)
        self.assertEqual(len(summary.days), 2)
        self.assertEqual(summary.days[0][0].status, "complete")
        self.assertEqual(summary.days[0][2].percentage, 50)
        self.assertFalse(summary.days[0][1].scheduled)
        self.assertEqual(summary.days[1][0].date, self.start + timedelta(days=7))

    def test_first_progress_marks_program_started(self):
        User.objects.filter(id=self.patient.id).update(program_started=False)
        self.assignments.record_day_progress(self.assignment.id, 0, 0, 1, 3)
        self.patient.refresh_from_db()
        self.assertTrue(self.patient.program_started)

    def test_progress_bounds(self):
        with self.assertRaises(ValidationFailedException):
            self.assignments.record_day_progress(self.assignment.id, 2, 0, 1, 3)
        with self.assertRaises(ValidationFailedException):
            self.assignments.record_day_progress(self.assignment.id, 0, 7, 1, 3)

    def test_progress_only_on_active(self):
        with self.assertRaises(AssignmentException):
            self.assignments.record_day_progress(self.template.id, 0, 0, 1, 3)

    def test_summary_uses_override(self):
        self.schedules.set_patient_override(self.assignment.id, [[[], [template_item(self.plank)]]])
        self.assignment.refresh_from_db()
        summary = self.assignments.progress_summary(self.assignment, today=self.today)
        self.assertTrue(summary.days[0][1].scheduled)
        self.assertEqual(summary.compliance, 0)


# ════════════════════════════════════════════════════════════════════
# API
# ════════════════════════════════════════════════════════════════════

class ProgramApiTests(ProgramTestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(make_staff())

    def create_template(self, **extra):
        payload = {"name": "Knee rehab", "weeks": 2, "schedule": [[[template_item(self.squat)]]]}
        payload.update(extra)
        response = self.client.post(reverse("programs:template-list"), payload, format="json")
        self.assertEqual(response.status_code, 201)
        return response.data

    def test_create_template(self):
        data = self.create_template()
        self.assertEqual(data["status"], "template")
        self.assertEqual(data["program_template"]["name"], "Knee rehab")
        self.assertIsNone(data["user_email"])
        self.assertIsNone(data["overall_completion"])
        self.assertIsNotNone(data["workout_schedule"])

    def test_invalid_weeks(self):
        response = self.client.post(reverse("programs:template-list"), {"name": "X", "weeks": 60}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_assign_conflict_is_409(self):
        template_id = self.create_template()["id"]
        url = reverse("programs:assignment-assign", args=[template_id])
        payload = {"user_id": str(self.patient.id), "start_date": self.today.isoformat()}

        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["user_email"], self.patient.email)
        self.assertEqual(response.data["overall_completion"], 0)
        self.assertEqual(response.data["progress_color"], "rgb(239, 68, 68)")

        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error_code"], "assignment_conflict")

    def test_resolved_schedule(self):
        template_id = self.create_template()["id"]
        response = self.client.get(reverse("programs:assignment-schedule", args=[template_id]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0][0][0]["exercise_name"], "Squat")

    def test_replace_schedule(self):
        template_id = self.create_template()["id"]
        response = self.client.put(
            reverse("programs:assignment-schedule", args=[template_id]),
            {"schedule": [[[template_item(self.plank)]]], "update_derived": True},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["changed"])

    def test_record_progress(self):
        template_id = self.create_template()["id"]
        assignment = self.assignments.assign_to_user(template_id, self.patient.id, self.today)
        response = self.client.post(
            reverse("programs:assignment-progress", args=[assignment.id]),
            {"week": 0, "day": 0, "current_set": 3, "total_sets": 3},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["compliance"], 100)
        self.assertEqual(response.data["days"][0][0]["status"], "complete")

    def test_list_and_clone(self):
        template_id = self.create_template()["id"]
        response = self.client.post(reverse("programs:assignment-clone", args=[template_id]))
        self.assertEqual(response.status_code, 201)

        response = self.client.get(reverse("programs:assignment-list"), {"search": "clone"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total"], 1)

    def test_delete(self):
        template_id = self.create_template()["id"]
        response = self.client.delete(reverse("programs:assignment-detail", args=[template_id]))
        self.assertEqual(response.status_code, 204)
        self.assertFalse(ProgramTemplate.objects.exists())

    def test_schedule_and_group_endpoints(self):
        response = self.client.post(
            reverse("programs:group-list"),
            {"title": "Core", "exercise_template_ids": [str(self.plank.id)]},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        group = ExerciseGroup.objects.get(id=response.data["id"])

        response = self.client.post(
            reverse("programs:schedule-list"),
            {"schedule": [[[group_item(group)]]]},
            format="json",
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.get(
            reverse("programs:schedule-detail", args=[response.data["id"]]), {"resolve": "true"}
        )
        self.assertEqual(response.data["resolved"][0][0][0]["title"], "Core")
