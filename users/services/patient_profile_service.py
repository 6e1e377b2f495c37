# FILE: medvanta/backend/users/services/patient_profile_service.py

"""
PATIENT PROFILE SERVICE

Read-only engagement data shown on a patient's profile page:
1. Booked appointments
2. Latest habit pledge
3. Vanta Points (HP): level, points to the next level, history
4. Inner Power (IP): empowerment tier, furthest gate, history
5. Intake survey with option ids resolved to titles

The patient app writes these records; clinic staff only read them.
"""

import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Sum

from core.exceptions import NotFoundException
from users.models import (
    Appointment,
    EmpowermentThreshold,
    GateUnlockStep,
    HabitPledge,
    HpLevelThreshold,
    HpTransaction,
    IpTransaction,
    McIntakeOption,
    McIntakeSurvey,
)

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass
class HpSummary:
    level: int = 1
    points: int = 0
    points_to_next_level: Optional[int] = None
    is_max_level: bool = False
    progress_percentage: int = 0
    level_description: Optional[str] = None
    level_image_url: Optional[str] = None
    transactions: List[HpTransaction] = field(default_factory=list)


@dataclass
class IpTransactionRow:
    created_at: datetime
    amount: int
    transaction_type: str
    description: Optional[str]


@dataclass
class IpSummary:
    empowerment: Optional[int] = None
    title: Optional[str] = None
    effects: Optional[str] = None
    base_power: Optional[int] = None
    top_power: Optional[int] = None
    points_missing_for_next_level: Optional[int] = None
    gate_title: Optional[str] = None
    gate_description: Optional[str] = None
    transactions: List[IpTransactionRow] = field(default_factory=list)


@dataclass
class IntakeSurveySummary:
    occupation: Optional[str]
    symptoms: List[str]
    health_conditions: List[str]
    activity_level: Optional[str]
    commitment_days: Optional[int]
    commitment_minutes: Optional[int]
    preconditions: Optional[bool]
    preconditions_details: Optional[str]


@dataclass
class PatientProfile:
    user: object
    appointments: List[Appointment]
    habit_pledge: Optional[HabitPledge]
    hp: HpSummary
    ip: IpSummary
    intake_survey: Optional[IntakeSurveySummary]


def _option_ids(values) -> List[int]:
    """Integer option ids of a stored answer list, in answer order."""
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, int) and not isinstance(value, bool)]


def _transaction_description(metadata) -> Optional[str]:
    if isinstance(metadata, dict) and metadata.get("description") is not None:
        return str(metadata["description"])
    return None


class PatientProfileService:
    """
    Service for the patient profile page.
    """

    def __init__(self):
        self.config = settings.PATIENT_PROFILE_CONFIG

    def get_user(self, user_id: uuid.UUID):
        try:
            return User.objects.get(id=user_id)
        except User.DoesNotExist:
            raise NotFoundException("User not found.")

    def get_profile(self, user_id: uuid.UUID) -> PatientProfile:
        user = self.get_user(user_id)
        return PatientProfile(
            user=user,
            appointments=self.appointments(user.id),
            habit_pledge=self.habit_pledge(user.id),
            hp=self.hp_summary(user.id),
            ip=self.ip_summary(user),
            intake_survey=self.intake_survey(user.id),
        )

    # =========================================================================
    # APPOINTMENTS AND PLEDGE
    # =========================================================================

    def appointments(self, user_id: uuid.UUID) -> List[Appointment]:
        return list(Appointment.objects.filter(user_id=user_id).order_by("-created_at", "-id"))

    def habit_pledge(self, user_id: uuid.UUID) -> Optional[HabitPledge]:
        """Most recent pledge, if the patient signed one."""
        return HabitPledge.objects.filter(user_id=user_id).order_by("-created_at").first()

    # =========================================================================
    # VANTA POINTS (HP)
    # =========================================================================

    def hp_summary(self, user_id: uuid.UUID) -> HpSummary:
        """
        Current HP level and progress toward the next one.

        Points are the sum of all HP transactions; the level is the highest
        threshold whose range starts at or below them.
        """
        transactions = HpTransaction.objects.filter(user_id=user_id)
        points = transactions.aggregate(total=Sum("points_earned"))["total"] or 0

        summary = HpSummary(
            points=points,
            transactions=list(transactions.order_by("-created_at")[:self.config["MAX_TRANSACTIONS"]]),
        )

        threshold = HpLevelThreshold.objects.filter(hp_range_min__lte=points).order_by("-level").first()
        if threshold is None:
            return summary

        summary.level = threshold.level
        summary.level_description = threshold.description
        summary.level_image_url = threshold.image_url

        required = threshold.hp_required_for_next_level
        if required is None:
            summary.is_max_level = True
            summary.progress_percentage = 100
        elif required <= 0:
            summary.points_to_next_level = 0
            summary.progress_percentage = 100
        else:
            earned = points - threshold.hp_range_min
            summary.points_to_next_level = max(0, required - earned)
            ratio = min(max(earned / required * 100, 0), 100)
            summary.progress_percentage = int(math.floor(ratio + 0.5))
        return summary

    # =========================================================================
    # INNER POWER (IP)
    # =========================================================================

    def ip_summary(self, user) -> IpSummary:
        """
        Empowerment tier, points missing for the next tier and gate progress.

        Empowerment is the sum of IP transactions (decay is negative); a
        patient without transactions has no empowerment yet.
        """
        transactions = IpTransaction.objects.filter(user_id=user.id)
        summary = IpSummary(transactions=[
            IpTransactionRow(
                created_at=transaction.created_at,
                amount=transaction.amount,
                transaction_type=transaction.transaction_type,
                description=_transaction_description(transaction.metadata),
            )
            for transaction in transactions.order_by("-created_at")[:self.config["MAX_TRANSACTIONS"]]
        ])

        gate = self.current_gate(user)
        if gate is not None:
            summary.gate_title = gate.title
            summary.gate_description = gate.description

        if not summary.transactions:
            return summary

        empowerment = transactions.aggregate(total=Sum("amount"))["total"] or 0
        summary.empowerment = empowerment

        tier = EmpowermentThreshold.objects.filter(
            base_power__lte=empowerment,
            top_power__gte=empowerment,
        ).order_by("base_power").first()
        if tier is None:
            return summary

        summary.title = tier.title
        summary.effects = tier.effects
        summary.base_power = tier.base_power
        summary.top_power = tier.top_power

        if tier.top_power >= self.config["MAX_TOP_POWER"]:
            return summary

        next_tier = EmpowermentThreshold.objects.filter(
            base_power__gt=tier.top_power
        ).order_by("base_power").first()
        if next_tier is not None:
            summary.points_missing_for_next_level = max(0, next_tier.base_power - empowerment)
        else:
            summary.points_missing_for_next_level = max(0, tier.top_power - empowerment)
        return summary

    def current_gate(self, user) -> Optional[GateUnlockStep]:
        if not user.max_gate_type or user.max_gate_unlocked is None:
            return None
        return GateUnlockStep.objects.filter(
            type=user.max_gate_type,
            gate=user.max_gate_unlocked,
        ).first()

    # =========================================================================
    # INTAKE SURVEY
    # =========================================================================

    def intake_survey(self, user_id: uuid.UUID) -> Optional[IntakeSurveySummary]:
        """
        Intake answers with option ids replaced by their titles.

        Answer order is kept; ids without a matching option are dropped.
        """
        survey = McIntakeSurvey.objects.filter(user_id=user_id).first()
        if survey is None:
            return None

        symptom_ids = _option_ids(survey.symptoms)
        condition_ids = _option_ids(survey.health_conditions)
        wanted = set(symptom_ids) | set(condition_ids)
        if survey.activity_level is not None:
            wanted.add(survey.activity_level)

        titles: Dict[int, str] = dict(
            McIntakeOption.objects.filter(id__in=wanted).values_list("id", "title")
        ) if wanted else {}

        return IntakeSurveySummary(
            occupation=survey.occupation,
            symptoms=[titles[option_id] for option_id in symptom_ids if option_id in titles],
            health_conditions=[titles[option_id] for option_id in condition_ids if option_id in titles],
            activity_level=titles.get(survey.activity_level) if survey.activity_level is not None else None,
            commitment_days=survey.commitment_days,
            commitment_minutes=survey.commitment_minutes,
            preconditions=survey.preconditions,
            preconditions_details=survey.preconditions_details,
        )
