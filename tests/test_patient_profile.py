# tests/test_patient_profile.py

import uuid
from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import NotFoundException
from users.models import (
    Appointment,
    EmpowermentThreshold,
    GateType,
    GateUnlockStep,
    HabitPledge,
    HpLevelThreshold,
    HpTransaction,
    IpTransaction,
    McIntakeOption,
    McIntakeSurvey,
)
from users.services.patient_profile_service import PatientProfileService
from tests.factories import make_staff, make_user


def backdate(record, minutes_ago):
    type(record).objects.filter(pk=record.pk).update(
        created_at=timezone.now() - timedelta(minutes=minutes_ago)
    )


class PatientProfileTestCase(TestCase):

    def setUp(self):
        self.service = PatientProfileService()
        self.patient = make_user(first_name="Pat")

    def earn_hp(self, points):
        return HpTransaction.objects.create(
            user=self.patient,
            transaction_type=HpTransaction.TransactionType.EXERCISE_POST_CHECK,
            points_earned=points,
        )

    def earn_ip(self, amount, **extra):
        return IpTransaction.objects.create(
            user=self.patient,
            transaction_type=extra.pop("transaction_type", IpTransaction.TransactionType.CHECK_IN_QUESTION),
            amount=amount,
            **extra
        )


# ════════════════════════════════════════════════════════════════════
# APPOINTMENTS AND PLEDGE
# ════════════════════════════════════════════════════════════════════

class AppointmentAndPledgeTests(PatientProfileTestCase):

    def test_appointments_newest_first(self):
        screening = Appointment.objects.create(
            user=self.patient, type=Appointment.Type.ONBOARDING_SCREENING, status=Appointment.Status.ATTENDED
        )
        consultation = Appointment.objects.create(user=self.patient, type=Appointment.Type.CONSULTATION)
        Appointment.objects.create(user=make_user(), type=Appointment.Type.OTHER)
        backdate(screening, 60)
        backdate(consultation, 10)

        appointments = self.service.appointments(self.patient.id)
        self.assertEqual([a.id for a in appointments], [consultation.id, screening.id])

    def test_latest_pledge(self):
        old = HabitPledge.objects.create(user=self.patient, pledge="Walk daily")
        new = HabitPledge.objects.create(
            user=self.patient,
            pledge="Stretch every morning",
            photo={"image_url": "https://cdn.example.com/p.jpg", "blur_hash": "LKO2"},
        )
        backdate(old, 60)
        backdate(new, 5)

        pledge = self.service.habit_pledge(self.patient.id)
        self.assertEqual(pledge.pledge, "Stretch every morning")
        self.assertIsNone(self.service.habit_pledge(make_user().id))


# ════════════════════════════════════════════════════════════════════
# VANTA POINTS
# ════════════════════════════════════════════════════════════════════

class HpSummaryTests(PatientProfileTestCase):

    def setUp(self):
        super().setUp()
        HpLevelThreshold.objects.create(level=1, description="Starter", hp_range_min=0, hp_required_for_next_level=100)
        HpLevelThreshold.objects.create(level=2, description="Mover", hp_range_min=100, hp_required_for_next_level=150)
        HpLevelThreshold.objects.create(level=3, description="Champion", hp_range_min=250)

    def test_progress_within_level(self):
        self.earn_hp(60)
        self.earn_hp(70)

        summary = self.service.hp_summary(self.patient.id)
        self.assertEqual(summary.points, 130)
        self.assertEqual(summary.level, 2)
        self.assertEqual(summary.level_description, "Mover")
        self.assertEqual(summary.points_to_next_level, 120)
        self.assertEqual(summary.progress_percentage, 20)
        self.assertFalse(summary.is_max_level)
        self.assertEqual(len(summary.transactions), 2)

    def test_max_level(self):
        self.earn_hp(300)
        summary = self.service.hp_summary(self.patient.id)
        self.assertEqual(summary.level, 3)
        self.assertTrue(summary.is_max_level)
        self.assertIsNone(summary.points_to_next_level)
        self.assertEqual(summary.progress_percentage, 100)

    def test_no_points_yet(self):
        summary = self.service.hp_summary(self.patient.id)
        self.assertEqual(summary.points, 0)
        self.assertEqual(summary.level, 1)
        self.assertEqual(summary.points_to_next_level, 100)
        self.assertEqual(summary.progress_percentage, 0)

    def test_without_level_table(self):
        HpLevelThreshold.objects.all().delete()
        self.earn_hp(40)
        summary = self.service.hp_summary(self.patient.id)
        self.assertEqual(summary.level, 1)
        self.assertEqual(summary.points, 40)
        self.assertIsNone(summary.level_description)


# ════════════════════════════════════════════════════════════════════
# INNER POWER
# ════════════════════════════════════════════════════════════════════

class IpSummaryTests(PatientProfileTestCase):

    def setUp(self):
        super().setUp()
        self.seed = EmpowermentThreshold.objects.create(title="Seed", base_power=0, top_power=49)
        EmpowermentThreshold.objects.create(title="Sprout", base_power=50, top_power=149, effects="Unlocks streaks")
        EmpowermentThreshold.objects.create(title="Bloom", base_power=150, top_power=999)

    def test_tier_and_points_missing(self):
        self.earn_ip(60, metadata={"description": "Welcome bonus"})
        self.earn_ip(-5, transaction_type=IpTransaction.TransactionType.DECAY)

        summary = self.service.ip_summary(self.patient)
        self.assertEqual(summary.empowerment, 55)
        self.assertEqual(summary.title, "Sprout")
        self.assertEqual(summary.effects, "Unlocks streaks")
        self.assertEqual((summary.base_power, summary.top_power), (50, 149))
        self.assertEqual(summary.points_missing_for_next_level, 95)
        self.assertEqual(
            {row.description for row in summary.transactions},
            {"Welcome bonus", None},
        )

    def test_last_tier(self):
        self.earn_ip(200)
        summary = self.service.ip_summary(self.patient)
        self.assertEqual(summary.title, "Bloom")
        self.assertIsNone(summary.points_missing_for_next_level)

    def test_missing_points_without_next_tier(self):
        EmpowermentThreshold.objects.exclude(id=self.seed.id).delete()
        self.earn_ip(20)
        summary = self.service.ip_summary(self.patient)
        self.assertEqual(summary.points_missing_for_next_level, 29)

    def test_no_transactions(self):
        summary = self.service.ip_summary(self.patient)
        self.assertIsNone(summary.empowerment)
        self.assertIsNone(summary.title)
        self.assertEqual(summary.transactions, [])

    def test_current_gate(self):
        GateUnlockStep.objects.create(type=GateType.BOOK_SCREENING, gate=2, title="Book your screening")
        self.patient.max_gate_type = GateType.BOOK_SCREENING
        self.patient.max_gate_unlocked = 2
        self.patient.save()

        summary = self.service.ip_summary(self.patient)
        self.assertEqual(summary.gate_title, "Book your screening")

        self.patient.max_gate_unlocked = 3
        self.assertIsNone(self.service.current_gate(self.patient))


# ════════════════════════════════════════════════════════════════════
# INTAKE SURVEY
# ════════════════════════════════════════════════════════════════════

class IntakeSurveyTests(PatientProfileTestCase):

    def test_option_titles_in_answer_order(self):
        back = McIntakeOption.objects.create(step=McIntakeOption.Step.SYMPTOMS, title="Back pain")
        neck = McIntakeOption.objects.create(step=McIntakeOption.Step.SYMPTOMS, title="Neck pain")
        diabetes = McIntakeOption.objects.create(step=McIntakeOption.Step.HEALTH_CONDITIONS, title="Diabetes")
        active = McIntakeOption.objects.create(step=McIntakeOption.Step.ACTIVITY_LEVEL, title="Moderately active")
        McIntakeSurvey.objects.create(
            user=self.patient,
            occupation="Nurse",
            symptoms=[neck.id, 99999, back.id],
            health_conditions=[diabetes.id],
            activity_level=active.id,
            commitment_days=3,
            preconditions=False,
        )

        survey = self.service.intake_survey(self.patient.id)
        self.assertEqual(survey.symptoms, ["Neck pain", "Back pain"])
        self.assertEqual(survey.health_conditions, ["Diabetes"])
        self.assertEqual(survey.activity_level, "Moderately active")
        self.assertEqual(survey.occupation, "Nurse")
        self.assertEqual(survey.commitment_days, 3)
        self.assertFalse(survey.preconditions)

    def test_malformed_answers(self):
        McIntakeSurvey.objects.create(user=self.patient, symptoms="back", health_conditions={"id": 3})
        survey = self.service.intake_survey(self.patient.id)
        self.assertEqual(survey.symptoms, [])
        self.assertEqual(survey.health_conditions, [])
        self.assertIsNone(survey.activity_level)

    def test_no_survey(self):
        self.assertIsNone(self.service.intake_survey(self.patient.id))


# ════════════════════════════════════════════════════════════════════
# API
# ════════════════════════════════════════════════════════════════════

class PatientProfileApiTests(PatientProfileTestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(make_staff())

    def test_profile(self):
        Appointment.objects.create(user=self.patient, type=Appointment.Type.CONSULTATION)
        self.earn_hp(10)

        response = self.client.get(reverse("users:patient-profile", args=[self.patient.id]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["user"]["first_name"], "Pat")
        self.assertEqual(len(response.data["appointments"]), 1)
        self.assertIsNone(response.data["habit_pledge"])
        self.assertEqual(response.data["hp"]["points"], 10)
        self.assertIsNone(response.data["ip"]["empowerment"])
        self.assertIsNone(response.data["intake_survey"])

    def test_appointments(self):
        Appointment.objects.create(user=self.patient, type=Appointment.Type.ONBOARDING_SCREENING)
        response = self.client.get(reverse("users:patient-appointments", args=[self.patient.id]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]["type"], "onboarding_screening")

    def test_unknown_patient(self):
        response = self.client.get(reverse("users:patient-profile", args=[uuid.uuid4()]))
        self.assertEqual(response.status_code, 404)
        with self.assertRaises(NotFoundException):
            self.service.get_profile(uuid.uuid4())

    def test_patients_are_refused(self):
        client = APIClient()
        client.force_authenticate(self.patient)
        response = client.get(reverse("users:patient-profile", args=[self.patient.id]))
        self.assertEqual(response.status_code, 403)
