# FILE: medvanta/backend/dashboard/services/dashboard_service.py

"""
DASHBOARD SERVICE

Home page figures for clinic staff:
- Member status counts and the matching user lists
- Average compliance and program completion over active programs
- Patients needing attention (compliance below threshold)
- Patients who finished their program

Figures are cached briefly; every program or member change shows up
within CACHE_TTL_SECONDS.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone

from programs import completion as completion_utils
from programs.models import ProgramAssignment
from programs.services.schedule_service import WorkoutScheduleService

logger = logging.getLogger(__name__)

User = get_user_model()

MEMBER_STATUSES = ("pending", "invited", "active")
CACHE_PREFIX = "dashboard"


@dataclass
class StatusCounts:
    pending: int = 0
    invited: int = 0
    active: int = 0
    no_program: int = 0
    in_program: int = 0


@dataclass
class DashboardUser:
    user_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    avatar: Optional[str] = None


@dataclass
class UserProgramStat(DashboardUser):
    compliance: int = 0
    program_name: Optional[str] = None


@dataclass
class UserStatList:
    users: List[UserProgramStat] = field(default_factory=list)
    total: int = 0


@dataclass
class AggregateCompliance:
    compliance: float = 0
    program_completion: float = 0


@dataclass
class AssignmentStat:
    """Computed figures for one assignment"""
    user_id: uuid.UUID
    program_name: str
    compliance: Optional[int]
    program_completion: int
    active: bool
    completed: bool


def _dashboard_user(user, cls=DashboardUser, **extra):
    return cls(
        user_id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        avatar=user.avatar.url if user.avatar else None,
        **extra,
    )


class DashboardService:
    """
    Service for dashboard figures.
    """

    def __init__(self, today=None):
        self.config = settings.PROGRAM_CONFIG
        self.ttl = settings.DASHBOARD_CONFIG["CACHE_TTL_SECONDS"]
        self.today = today
        self.schedule_service = WorkoutScheduleService()

    def _cached(self, key: str, compute):
        if self.today is not None:
            return compute()
        return cache.get_or_set(f"{CACHE_PREFIX}:{key}", compute, self.ttl)

    @staticmethod
    def invalidate():
        cache.delete_many([
            f"{CACHE_PREFIX}:{key}"
            for key in ("status_counts", "aggregate", "attention", "completed", "stats")
        ])

    # =========================================================================
    # ASSIGNMENT STATS
    # =========================================================================

    def assignment_stats(self) -> List[AssignmentStat]:
        """Compliance and completion of every active or completed patient assignment."""
        return self._cached("stats", self._compute_assignment_stats)

    def _compute_assignment_stats(self) -> List[AssignmentStat]:
        today = self.today or timezone.localdate()
        assignments = ProgramAssignment.objects.filter(
            status__in=[ProgramAssignment.Status.ACTIVE, ProgramAssignment.Status.COMPLETED],
            user__isnull=False,
        ).select_related("program_template", "workout_schedule")

        stats = []
        for assignment in assignments:
            weeks = assignment.program_template.weeks
            schedule = self.schedule_service.effective_schedule(assignment)
            program_completion = completion_utils.overall_completion(assignment.start_date, weeks, today)
            stats.append(AssignmentStat(
                user_id=assignment.user_id,
                program_name=assignment.program_template.name,
                compliance=completion_utils.compliance(
                    assignment.completion, schedule, assignment.start_date, today
                ),
                program_completion=program_completion,
                active=assignment.status == ProgramAssignment.Status.ACTIVE,
                completed=(
                    assignment.status == ProgramAssignment.Status.COMPLETED
                    or program_completion >= 100
                ),
            ))
        return stats

    # =========================================================================
    # STATUS
    # =========================================================================

    def _in_program_ids(self):
        return set(
            ProgramAssignment.objects.filter(
                status=ProgramAssignment.Status.ACTIVE,
                user__isnull=False,
            ).values_list("user_id", flat=True)
        )

    def status_counts(self) -> StatusCounts:
        return self._cached("status_counts", self._compute_status_counts)

    def _compute_status_counts(self) -> StatusCounts:
        counts = StatusCounts()
        for status in User.objects.filter(status__in=MEMBER_STATUSES).values_list("status", flat=True):
            setattr(counts, status, getattr(counts, status) + 1)

        counts.in_program = len(self._in_program_ids())
        counts.no_program = max(0, counts.pending + counts.invited + counts.active - counts.in_program)
        return counts

    def users_by_status(self, status: str) -> List[DashboardUser]:
        return [_dashboard_user(user) for user in User.objects.filter(status=status)]

    def users_with_no_program(self) -> List[DashboardUser]:
        in_program = self._in_program_ids()
        return [
            _dashboard_user(user)
            for user in User.objects.filter(status__in=MEMBER_STATUSES)
            if user.id not in in_program
        ]

    def users_in_program(self) -> List[DashboardUser]:
        return [_dashboard_user(user) for user in User.objects.filter(id__in=self._in_program_ids())]

    # =========================================================================
    # COMPLIANCE
    # =========================================================================

    def aggregate_compliance(self) -> AggregateCompliance:
        """
        Mean compliance and program completion over active assignments.

        An assignment with nothing due yet counts with its program
        completion in place of compliance.
        """
        return self._cached("aggregate", self._compute_aggregate)

    def _compute_aggregate(self) -> AggregateCompliance:
        stats = [stat for stat in self.assignment_stats() if stat.active]
        if not stats:
            return AggregateCompliance()

        compliance_values = [
            stat.compliance if stat.compliance is not None else stat.program_completion
            for stat in stats
        ]
        return AggregateCompliance(
            compliance=sum(compliance_values) / len(compliance_values),
            program_completion=sum(stat.program_completion for stat in stats) / len(stats),
        )

    def _user_stat_list(self, picked: Dict[uuid.UUID, AssignmentStat], reverse: bool) -> UserStatList:
        users = [
            _dashboard_user(
                user,
                cls=UserProgramStat,
                compliance=self._score(picked[user.id]),
                program_name=picked[user.id].program_name,
            )
            for user in User.objects.filter(id__in=picked.keys())
        ]
        users.sort(key=lambda user: user.compliance, reverse=reverse)
        return UserStatList(users=users, total=len(users))

    @staticmethod
    def _score(stat: AssignmentStat) -> int:
        return stat.compliance if stat.compliance is not None else stat.program_completion

    def users_needing_attention(self) -> UserStatList:
        """
        Patients whose compliance is below the attention threshold.

        A patient with several programs is listed once with the lowest
        score; the list is sorted lowest first.
        """
        return self._cached("attention", self._compute_attention)

    def _compute_attention(self) -> UserStatList:
        threshold = self.config["COMPLIANCE_ATTENTION_THRESHOLD"]
        lowest = {}
        for stat in self.assignment_stats():
            if not stat.active:
                continue
            score = self._score(stat)
            if score >= threshold:
                continue
            if stat.user_id not in lowest or score < self._score(lowest[stat.user_id]):
                lowest[stat.user_id] = stat

        result = self._user_stat_list(lowest, reverse=False)
        logger.info(f"{result.total} user(s) below {threshold}% compliance")
        return result

    def users_program_completed(self) -> UserStatList:
        """Patients with a finished program, highest score first."""
        return self._cached("completed", self._compute_completed)

    def _compute_completed(self) -> UserStatList:
        best = {}
        for stat in self.assignment_stats():
            if not stat.completed:
                continue
            if stat.user_id not in best or self._score(stat) > self._score(best[stat.user_id]):
                best[stat.user_id] = stat
        return self._user_stat_list(best, reverse=True)
