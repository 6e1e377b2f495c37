# tests/test_exercises.py

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.exceptions import NotFoundException, ValidationFailedException
from exercises.models import Exercise, ExerciseTemplate
from exercises.services.library_service import ExerciseLibraryService
from exercises.services.template_service import ExerciseTemplateService, describe_template
from tests.factories import make_exercise, make_staff, make_user


# ════════════════════════════════════════════════════════════════════
# DESCRIPTION
# ════════════════════════════════════════════════════════════════════

class DescribeTemplateTests(TestCase):

    def test_per_set_overrides(self):
        template = ExerciseTemplate(
            sets=2,
            rep=10,
            rest_time=60,
            rep_override=[-1, 8],
            weight_override=[-1, "20kg"],
        )
        self.assertEqual(
            describe_template(template),
            "2 sets: Set 1 - 10 reps, 60s rest | Set 2 - 8 reps, 20kg, 60s rest",
        )

    def test_no_sets(self):
        self.assertEqual(describe_template(ExerciseTemplate(sets=0)), "No sets configured")

    def test_single_set_without_values(self):
        self.assertEqual(describe_template(ExerciseTemplate(sets=1)), "1 set: Set 1")


# ════════════════════════════════════════════════════════════════════
# LIBRARY
# ════════════════════════════════════════════════════════════════════

class ExerciseLibraryTests(TestCase):

    def setUp(self):
        self.service = ExerciseLibraryService()
        self.squat = make_exercise("Squat", type="strength")
        self.lunge = make_exercise(
            "Lunge",
            type="strength",
            video_type=Exercise.VideoType.FILE,
            video_url="https://cdn.example.com/lunge.mp4",
        )
        self.plank = make_exercise("Plank", type="core")
        make_exercise("Hidden", video_type=Exercise.VideoType.NONE, video_url=None)
        make_exercise("Blank url", video_url="")

    def test_only_playable_videos_are_listed(self):
        result = self.service.list_exercises()
        names = [exercise.exercise_name for exercise in result.data]
        self.assertEqual(names, ["Lunge", "Plank", "Squat"])
        self.assertEqual(result.total, 3)

    def test_filters_and_search(self):
        self.assertEqual(self.service.list_exercises(exercise_type="core").total, 1)
        self.assertEqual(self.service.list_exercises(video_type="file").data, [self.lunge])
        self.assertEqual(self.service.list_exercises(search="qua").data, [self.squat])

    def test_pagination(self):
        result = self.service.list_exercises(page=1, page_size=2)
        self.assertEqual(len(result.data), 2)
        self.assertTrue(result.has_more)
        result = self.service.list_exercises(page=2, page_size=2)
        self.assertEqual(len(result.data), 1)
        self.assertFalse(result.has_more)

    def test_descending_sort(self):
        result = self.service.list_exercises(sort_order="desc")
        self.assertEqual(result.data[0], self.squat)

    def test_invalid_sort(self):
        with self.assertRaises(ValidationFailedException):
            self.service.list_exercises(sort_by="video_url")

    def test_types(self):
        self.assertEqual(self.service.list_types(), ["core", "strength"])

    def test_update_rejects_unknown_field(self):
        with self.assertRaises(ValidationFailedException):
            self.service.update_exercise(self.squat.id, id="x")

    def test_update_requires_name(self):
        with self.assertRaises(ValidationFailedException):
            self.service.update_exercise(self.squat.id, exercise_name="   ")

    def test_update(self):
        exercise = self.service.update_exercise(self.squat.id, library_tip="Keep your back straight")
        self.assertEqual(exercise.library_tip, "Keep your back straight")


# ════════════════════════════════════════════════════════════════════
# TEMPLATES
# ════════════════════════════════════════════════════════════════════

class ExerciseTemplateServiceTests(TestCase):

    def setUp(self):
        self.service = ExerciseTemplateService()
        self.exercise = make_exercise()

    def test_identical_content_returns_stored_template(self):
        first = self.service.upsert_template(self.exercise.id, sets=3, rep=10, notes=" slow ")
        second = self.service.upsert_template(self.exercise.id, sets=3, rep=10, notes="slow")
        self.assertEqual(first.id, second.id)
        self.assertEqual(ExerciseTemplate.objects.count(), 1)
        self.assertEqual(first.notes, "slow")

    def test_equipment_order_does_not_matter(self):
        first = self.service.upsert_template(self.exercise.id, sets=1, equipment_ids=[3, 1])
        second = self.service.upsert_template(self.exercise.id, sets=1, equipment_ids=[1, 3])
        self.assertEqual(first.id, second.id)

    def test_different_content_creates_new_template(self):
        first = self.service.upsert_template(self.exercise.id, sets=3, rep=10)
        second = self.service.upsert_template(self.exercise.id, sets=3, rep=12)
        self.assertNotEqual(first.id, second.id)

    def test_override_longer_than_sets(self):
        with self.assertRaises(ValidationFailedException):
            self.service.upsert_template(self.exercise.id, sets=1, rep_override=[10, 12])

    def test_unknown_exercise(self):
        with self.assertRaises(NotFoundException):
            self.service.upsert_template("7d0b6e8e-7c55-4b4f-9d7b-1d8f0b7d1c11", sets=1)

    def test_unknown_field(self):
        with self.assertRaises(ValidationFailedException):
            self.service.upsert_template(self.exercise.id, sets=1, tempo="3-1-1")

    def test_list_by_exercise_name(self):
        other = make_exercise("Bench press")
        self.service.upsert_template(self.exercise.id, sets=1)
        self.service.upsert_template(other.id, sets=1)
        result = self.service.list_templates(sort_by="exercise_name", sort_order="asc")
        self.assertEqual(
            [template.exercise.exercise_name for template in result.data],
            ["Bench press", "Squat"],
        )
        self.assertEqual(self.service.list_templates(search="bench").total, 1)


class ExerciseApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(make_staff())
        self.exercise = make_exercise()

    def test_library_listing(self):
        response = self.client.get(reverse("exercises:exercise-library"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total"], 1)
        self.assertEqual(response.data["data"][0]["exercise_name"], "Squat")

    def test_template_upsert_is_idempotent(self):
        payload = {"exercise_id": str(self.exercise.id), "sets": 2, "rep": 8, "rep_override": [-1, 6]}
        first = self.client.post(reverse("exercises:template-list"), payload, format="json")
        second = self.client.post(reverse("exercises:template-list"), payload, format="json")
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.data["id"], second.data["id"])
        self.assertEqual(first.data["description"], "2 sets: Set 1 - 8 reps | Set 2 - 6 reps")

    def test_non_admin_is_rejected(self):
        client = APIClient()
        client.force_authenticate(make_user())
        response = client.get(reverse("exercises:exercise-library"))
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error_code"], "permission_denied")

    def test_missing_template_is_404(self):
        response = self.client.get(
            reverse("exercises:template-detail", args=["7d0b6e8e-7c55-4b4f-9d7b-1d8f0b7d1c11"])
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error_code"], "not_found")
