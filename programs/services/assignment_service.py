# FILE: medvanta/backend/programs/services/assignment_service.py

"""
PROGRAM ASSIGNMENT SERVICE

Handles the program lifecycle:
1. Create a program template together with its template assignment
2. Browse, clone and delete template assignments
3. Assign a template to a patient with a start date
4. Record per-day set progress and summarize it for the admin UI
"""

import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from core.exceptions import (
    AssignmentConflictException,
    AssignmentException,
    NotFoundException,
    ValidationFailedException,
)
from core.pagination import PaginatedResult, clamp_page, paginate
from programs import completion as completion_utils
from programs.models import ProgramAssignment, ProgramTemplate
from programs.services.schedule_service import WorkoutScheduleService

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass
class DayProgress:
    """One calendar day of an assignment"""
    week: int
    day: int
    date: date
    scheduled: bool
    status: Optional[str]
    percentage: int


@dataclass
class ProgressSummary:
    """Progress card data for one assignment"""
    assignment_id: uuid.UUID
    program_name: str
    weeks: int
    start_date: date
    end_date: date
    current_week: Optional[int]
    current_day: Optional[int]
    overall_completion: int
    progress_color: str
    compliance: Optional[int]
    days: List[List[DayProgress]] = field(default_factory=list)


class ProgramAssignmentService:
    """
    Service for program templates and their assignments.

    Integrates with:
    - WorkoutScheduleService for schedule storage and overrides
    - programs.completion for progress arithmetic
    """

    TEMPLATE_FIELDS = ("name", "description", "weeks", "goals", "notes", "active")

    def __init__(self):
        self.config = settings.PROGRAM_CONFIG
        self.schedule_service = WorkoutScheduleService()

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_assignment(self, assignment_id: uuid.UUID, for_update: bool = False) -> ProgramAssignment:
        queryset = ProgramAssignment.objects.select_related("program_template", "workout_schedule", "user")
        if for_update:
            queryset = queryset.select_for_update(of=("self",))
        try:
            return queryset.get(id=assignment_id)
        except ProgramAssignment.DoesNotExist:
            raise NotFoundException("Program assignment not found.")

    def get_template(self, template_id: uuid.UUID) -> ProgramTemplate:
        try:
            return ProgramTemplate.objects.get(id=template_id)
        except ProgramTemplate.DoesNotExist:
            raise NotFoundException("Program template not found.")

    def active_assignment_for(self, user_id: uuid.UUID) -> Optional[ProgramAssignment]:
        return ProgramAssignment.objects.select_related(
            "program_template", "workout_schedule"
        ).filter(
            user_id=user_id,
            status=ProgramAssignment.Status.ACTIVE,
        ).first()

    def _validate_weeks(self, weeks):
        if weeks is None or not self.config["MIN_WEEKS"] <= weeks <= self.config["MAX_WEEKS"]:
            raise ValidationFailedException(
                f"Weeks must be between {self.config['MIN_WEEKS']} and {self.config['MAX_WEEKS']}."
            )

    # =========================================================================
    # TEMPLATES
    # =========================================================================

    @transaction.atomic
    def create_program_template(
        self,
        name: str,
        weeks: int,
        description: str = "",
        goals: str = "",
        notes: str = "",
        organization_id: Optional[uuid.UUID] = None,
        start_date: Optional[date] = None,
        schedule=None,
    ) -> ProgramAssignment:
        """
        Create a program template and its template assignment.

        Args:
            name: Program name (trimmed, required)
            weeks: Program length in weeks
            description, goals, notes: Free text
            organization_id: Owning organization, None for shared programs
            start_date: Reference start of the template assignment (today by default)
            schedule: Optional initial workout schedule

        Returns:
            The template ProgramAssignment
        """
        name = (name or "").strip()
        if not name:
            raise ValidationFailedException("Program name is required.")
        self._validate_weeks(weeks)

        template = ProgramTemplate.objects.create(
            name=name,
            description=(description or "").strip(),
            weeks=weeks,
            goals=(goals or "").strip(),
            notes=(notes or "").strip(),
            organization_id=organization_id,
        )

        start_date = start_date or timezone.localdate()
        assignment = ProgramAssignment.objects.create(
            program_template=template,
            organization_id=organization_id,
            user=None,
            status=ProgramAssignment.Status.TEMPLATE,
            start_date=start_date,
            end_date=completion_utils.end_date_for(start_date, weeks),
        )

        if schedule is not None:
            stored = self.schedule_service.upsert_schedule(schedule)
            assignment.workout_schedule = stored
            assignment.save(update_fields=["workout_schedule", "updated_at"])

        logger.info(f"Program template {template.id} created with assignment {assignment.id}")
        return assignment

    @transaction.atomic
    def update_program_template(self, template_id: uuid.UUID, **fields) -> ProgramTemplate:
        template = self.get_template(template_id)
        unknown = set(fields) - set(self.TEMPLATE_FIELDS)
        if unknown:
            raise ValidationFailedException(f"Unknown template fields: {', '.join(sorted(unknown))}")

        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationFailedException("Program name is required.")
        if "weeks" in fields:
            self._validate_weeks(fields["weeks"])

        for key, value in fields.items():
            setattr(template, key, value.strip() if isinstance(value, str) else value)
        template.save()

        if "weeks" in fields:
            # Template assignments follow the template length
            for assignment in template.assignments.filter(status=ProgramAssignment.Status.TEMPLATE):
                assignment.end_date = completion_utils.end_date_for(assignment.start_date, template.weeks)
                assignment.save(update_fields=["end_date", "updated_at"])

        logger.info(f"Program template {template.id} updated: {', '.join(sorted(fields))}")
        return template

    def set_template_image(self, template_id: uuid.UUID, uploaded_file) -> ProgramTemplate:
        template = self.get_template(template_id)

        ext = os.path.splitext(uploaded_file.name)[1].lstrip(".").lower()
        if ext not in self.config["ALLOWED_IMAGE_TYPES"]:
            raise ValidationFailedException(
                f"Image must be one of: {', '.join(self.config['ALLOWED_IMAGE_TYPES'])}."
            )
        if uploaded_file.size > self.config["MAX_IMAGE_SIZE_MB"] * 1024 * 1024:
            raise ValidationFailedException(f"Image is larger than {self.config['MAX_IMAGE_SIZE_MB']} MB.")

        if template.image:
            template.image.delete(save=False)
        template.image = uploaded_file
        template.save(update_fields=["image", "updated_at"])
        logger.info(f"Image uploaded for program template {template.id}")
        return template

    def clear_template_image(self, template_id: uuid.UUID) -> ProgramTemplate:
        template = self.get_template(template_id)
        if template.image:
            template.image.delete(save=False)
            template.image = None
            template.save(update_fields=["image", "updated_at"])
        return template

    # =========================================================================
    # TEMPLATE ASSIGNMENTS
    # =========================================================================

    def list_template_assignments(
        self,
        search: str = "",
        weeks: Optional[int] = None,
        show_assigned: bool = False,
        organization_id: Optional[uuid.UUID] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> PaginatedResult:
        """
        Paginated program list for the builder and the assign-program dialog.

        Args:
            search: Case-insensitive match on program name
            weeks: Only programs of this length
            show_assigned: Include patients' active assignments as well
            organization_id: Only programs of this organization (plus shared ones)
            page, page_size: Page-number pagination

        Returns:
            PaginatedResult of ProgramAssignment rows, newest first
        """
        page, page_size = clamp_page(
            page,
            page_size or self.config["DEFAULT_PAGE_SIZE"],
            default_size=self.config["DEFAULT_PAGE_SIZE"],
            max_size=self.config["MAX_PAGE_SIZE"],
        )

        statuses = [ProgramAssignment.Status.TEMPLATE]
        if show_assigned:
            statuses.append(ProgramAssignment.Status.ACTIVE)

        queryset = ProgramAssignment.objects.select_related(
            "program_template", "workout_schedule", "user"
        ).filter(status__in=statuses)

        search = (search or "").strip()
        if search:
            queryset = queryset.filter(program_template__name__icontains=search)
        if weeks:
            queryset = queryset.filter(program_template__weeks=weeks)
        if organization_id:
            queryset = queryset.filter(Q(organization_id=organization_id) | Q(organization__isnull=True))

        return paginate(queryset.order_by("-created_at", "id"), page, page_size)

    @transaction.atomic
    def clone_template_assignment(self, assignment_id: uuid.UUID) -> ProgramAssignment:
        """Copy a template (and its schedule reference) under '<name> (clone)'."""
        source = self.get_assignment(assignment_id)
        if not source.is_template:
            raise AssignmentException("Only template assignments can be cloned.")

        original = source.program_template
        template = ProgramTemplate.objects.create(
            name=f"{original.name} (clone)",
            description=original.description,
            weeks=original.weeks,
            goals=original.goals,
            notes=original.notes,
            organization_id=original.organization_id,
            active=original.active,
        )
        if original.image and original.image.storage.exists(original.image.name):
            # Each template owns its image file
            with original.image.open("rb") as image:
                template.image.save(os.path.basename(original.image.name), image, save=True)

        start_date = timezone.localdate()
        clone = ProgramAssignment.objects.create(
            program_template=template,
            organization_id=source.organization_id,
            workout_schedule_id=source.workout_schedule_id,
            status=ProgramAssignment.Status.TEMPLATE,
            start_date=start_date,
            end_date=completion_utils.end_date_for(start_date, template.weeks),
        )
        logger.info(f"Template assignment {source.id} cloned to {clone.id}")
        return clone

    @transaction.atomic
    def assign_to_user(
        self,
        template_assignment_id: uuid.UUID,
        user_id: uuid.UUID,
        start_date: date,
    ) -> ProgramAssignment:
        """
        Start a patient on a program.

        Args:
            template_assignment_id: Template assignment to copy from
            user_id: Patient receiving the program
            start_date: First day of week 1

        Returns:
            The new active ProgramAssignment
        """
        source = self.get_assignment(template_assignment_id)
        if not source.is_template:
            raise AssignmentException("Programs can only be assigned from a template.")

        try:
            user = User.objects.select_for_update().get(id=user_id)
        except User.DoesNotExist:
            raise NotFoundException("User not found.")

        if ProgramAssignment.objects.filter(user=user, status=ProgramAssignment.Status.ACTIVE).exists():
            raise AssignmentConflictException()

        end_date = completion_utils.end_date_for(start_date, source.program_template.weeks)
        try:
            with transaction.atomic():
                assignment = ProgramAssignment.objects.create(
                    user=user,
                    organization_id=source.organization_id,
                    program_template_id=source.program_template_id,
                    workout_schedule_id=source.workout_schedule_id,
                    status=ProgramAssignment.Status.ACTIVE,
                    start_date=start_date,
                    end_date=end_date,
                    completion=[],
                )
        except IntegrityError:
            raise AssignmentConflictException()

        user.program_assigned = True
        user.program_started = start_date <= timezone.localdate()
        user.program_due_date = end_date
        user.status = User.Status.ASSIGNED
        user.save(update_fields=[
            "program_assigned", "program_started", "program_due_date", "status", "updated_at"
        ])

        logger.info(f"Program {source.program_template_id} assigned to user {user.id} from {start_date}")
        return assignment

    def _release_users(self, user_ids):
        """Clear program flags of users who no longer follow an active program."""
        user_ids = [uid for uid in set(user_ids) if uid is not None]
        if not user_ids:
            return
        still_active = set(
            ProgramAssignment.objects.filter(
                user_id__in=user_ids,
                status=ProgramAssignment.Status.ACTIVE,
            ).values_list("user_id", flat=True)
        )
        released = [uid for uid in user_ids if uid not in still_active]
        User.objects.filter(id__in=released).update(
            program_assigned=False,
            program_started=False,
            program_due_date=None,
        )
        User.objects.filter(id__in=released, status=User.Status.ASSIGNED).update(status=User.Status.ACTIVE)

    @transaction.atomic
    def delete_assignment(self, assignment_id: uuid.UUID) -> None:
        """
        Delete an assignment.

        Deleting a template assignment deletes the program template and,
        with it, every assignment derived from it.
        """
        assignment = self.get_assignment(assignment_id)

        if assignment.is_template:
            template = assignment.program_template
            template_id = template.id
            affected = list(template.assignments.exclude(user__isnull=True).values_list("user_id", flat=True))
            template.delete()
            self._release_users(affected)
            logger.info(f"Program template {template_id} deleted with its assignments")
            return

        user_id = assignment.user_id
        assignment.delete()
        self._release_users([user_id])
        logger.info(f"Assignment {assignment_id} deleted")

    @transaction.atomic
    def complete_assignment(self, assignment_id: uuid.UUID) -> ProgramAssignment:
        """Close a patient's active assignment so a new program can be assigned."""
        assignment = self.get_assignment(assignment_id, for_update=True)
        if assignment.status != ProgramAssignment.Status.ACTIVE:
            raise AssignmentException("Only active assignments can be completed.")
        assignment.status = ProgramAssignment.Status.COMPLETED
        assignment.save(update_fields=["status", "updated_at"])
        self._release_users([assignment.user_id])
        logger.info(f"Assignment {assignment.id} completed")
        return assignment

    # =========================================================================
    # PROGRESS
    # =========================================================================

    @transaction.atomic
    def record_day_progress(
        self,
        assignment_id: uuid.UUID,
        week_index: int,
        day_index: int,
        current_set: int,
        total_sets: int,
    ) -> ProgramAssignment:
        """
        Store set progress for one day (0-based week and day).
        """
        assignment = self.get_assignment(assignment_id, for_update=True)
        if assignment.status != ProgramAssignment.Status.ACTIVE:
            raise AssignmentException("Progress can only be recorded on active assignments.")
        if not 0 <= week_index < assignment.program_template.weeks:
            raise ValidationFailedException("Week is outside the program.")
        if not 0 <= day_index < completion_utils.DAYS_PER_WEEK:
            raise ValidationFailedException("Day must be between 0 and 6.")
        if total_sets < 0 or current_set < 0:
            raise ValidationFailedException("Set counts cannot be negative.")

        assignment.completion = completion_utils.record_progress(
            assignment.completion, week_index, day_index, current_set, total_sets
        )
        assignment.save(update_fields=["completion", "updated_at"])

        if assignment.user_id:
            User.objects.filter(id=assignment.user_id, program_started=False).update(program_started=True)

        logger.info(
            f"Progress on assignment {assignment.id}: week {week_index + 1} day {day_index + 1} "
            f"{current_set}/{total_sets}"
        )
        return assignment

    def progress_summary(self, assignment: ProgramAssignment, today=None) -> ProgressSummary:
        weeks = assignment.program_template.weeks
        schedule = self.schedule_service.effective_schedule(assignment)
        parsed = completion_utils.parse_completion(assignment.completion)

        current = completion_utils.current_week_day(assignment.start_date, weeks, today)
        overall = completion_utils.overall_completion(assignment.start_date, weeks, today)

        days = []
        for week_index in range(weeks):
            week_days = []
            for day_index in range(completion_utils.DAYS_PER_WEEK):
                completion_day = completion_utils.completion_day(parsed, week_index, day_index)
                items = (
                    schedule[week_index][day_index]
                    if week_index < len(schedule) and day_index < len(schedule[week_index])
                    else []
                )
                week_days.append(DayProgress(
                    week=week_index + 1,
                    day=day_index + 1,
                    date=completion_utils.day_date(assignment.start_date, week_index, day_index),
                    scheduled=bool(items),
                    status=completion_day.status if completion_day else None,
                    percentage=completion_utils.day_completion(completion_day),
                ))
            days.append(week_days)

        return ProgressSummary(
            assignment_id=assignment.id,
            program_name=assignment.program_template.name,
            weeks=weeks,
            start_date=assignment.start_date,
            end_date=assignment.end_date,
            current_week=current[0] if current else None,
            current_day=current[1] if current else None,
            overall_completion=overall,
            progress_color=completion_utils.progress_color(overall),
            compliance=completion_utils.compliance(assignment.completion, schedule, assignment.start_date, today),
            days=days,
        )
