# FILE: medvanta/backend/programs/services/schedule_service.py

"""
WORKOUT SCHEDULE SERVICE

Handles:
1. Content-addressed upsert of schedules and exercise groups
2. Attaching schedules to program assignments
3. Replacing a template's schedule and propagating it to derived
   patient assignments
4. Per-patient schedule overrides
5. Expanding a stored schedule into display data
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from django.db import IntegrityError, transaction

from core.exceptions import (
    AssignmentException,
    NotFoundException,
    ScheduleException,
    ValidationFailedException,
)
from core.hashing import content_hash
from exercises.models import ExerciseTemplate
from exercises.services.template_service import describe_template
from programs import schedule as schedule_utils
from programs.models import ExerciseGroup, ProgramAssignment, WorkoutSchedule

logger = logging.getLogger(__name__)


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


@dataclass
class ScheduleReplaceResult:
    """Result of replacing a template schedule"""
    assignment: ProgramAssignment
    schedule: WorkoutSchedule
    changed: bool
    derived_updated: int = 0


class WorkoutScheduleService:
    """
    Service for workout schedules and exercise groups.
    """

    # =========================================================================
    # UPSERT
    # =========================================================================

    def _check_references(self, schedule):
        template_ids, group_ids = schedule_utils.referenced_ids(schedule)
        if not all(map(_is_uuid, template_ids + group_ids)):
            raise ScheduleException("The schedule references unknown exercises or groups.")
        found_templates = ExerciseTemplate.objects.filter(id__in=template_ids).count()
        found_groups = ExerciseGroup.objects.filter(id__in=group_ids).count()
        if found_templates != len(template_ids) or found_groups != len(group_ids):
            raise ScheduleException("The schedule references unknown exercises or groups.")

    def upsert_schedule(self, raw_schedule, notes: str = "", is_draft: bool = False) -> WorkoutSchedule:
        """
        Store a schedule, or return the stored one with identical content.

        Args:
            raw_schedule: Weeks of days in flat or {"exercises": [...]} form
            notes: Free text stored with a new schedule
            is_draft: Marks a schedule still being edited

        Returns:
            WorkoutSchedule whose schedule_hash matches the normalized content
        """
        normalized = schedule_utils.normalize_schedule(raw_schedule)
        self._check_references(normalized)
        schedule_hash = content_hash(normalized)

        existing = WorkoutSchedule.objects.filter(schedule_hash=schedule_hash).first()
        if existing:
            return existing

        try:
            with transaction.atomic():
                created = WorkoutSchedule.objects.create(
                    schedule=normalized,
                    schedule_hash=schedule_hash,
                    notes=(notes or "").strip(),
                    is_draft=is_draft,
                )
        except IntegrityError:
            return WorkoutSchedule.objects.get(schedule_hash=schedule_hash)

        logger.info(f"Workout schedule {created.id} stored ({len(normalized)} weeks)")
        return created

    def upsert_group(
        self,
        title: str,
        exercise_template_ids: Optional[List] = None,
        is_superset: bool = False,
        note: str = "",
    ) -> ExerciseGroup:
        """Store an exercise group, or return the stored one with identical content."""
        template_ids = [str(template_id) for template_id in (exercise_template_ids or [])]
        if template_ids:
            found = 0
            if all(map(_is_uuid, template_ids)):
                found = ExerciseTemplate.objects.filter(id__in=set(template_ids)).count()
            if found != len(set(template_ids)):
                raise ValidationFailedException("The group references unknown exercise templates.")

        payload = {
            "title": (title or "").strip(),
            "exercise_template_ids": template_ids,
            "is_superset": bool(is_superset),
            "note": (note or "").strip(),
        }
        group_hash = content_hash(payload)

        existing = ExerciseGroup.objects.filter(group_hash=group_hash).first()
        if existing:
            return existing

        try:
            with transaction.atomic():
                group = ExerciseGroup.objects.create(group_hash=group_hash, **payload)
        except IntegrityError:
            return ExerciseGroup.objects.get(group_hash=group_hash)

        logger.info(f"Exercise group {group.id} stored with {len(template_ids)} template(s)")
        return group

    def get_schedule(self, schedule_id: uuid.UUID) -> WorkoutSchedule:
        try:
            return WorkoutSchedule.objects.get(id=schedule_id)
        except WorkoutSchedule.DoesNotExist:
            raise NotFoundException("Workout schedule not found.")

    def get_group(self, group_id: uuid.UUID) -> ExerciseGroup:
        try:
            return ExerciseGroup.objects.get(id=group_id)
        except ExerciseGroup.DoesNotExist:
            raise NotFoundException("Exercise group not found.")

    # =========================================================================
    # ASSIGNMENT SCHEDULES
    # =========================================================================

    def _get_assignment(self, assignment_id, for_update=False) -> ProgramAssignment:
        queryset = ProgramAssignment.objects.select_related("program_template", "workout_schedule")
        if for_update:
            queryset = queryset.select_for_update(of=("self",))
        try:
            return queryset.get(id=assignment_id)
        except ProgramAssignment.DoesNotExist:
            raise NotFoundException("Program assignment not found.")

    @transaction.atomic
    def attach_schedule_if_missing(self, assignment_id: uuid.UUID, schedule_id: uuid.UUID) -> ProgramAssignment:
        """Set the assignment's schedule only when it has none yet."""
        assignment = self._get_assignment(assignment_id, for_update=True)
        if assignment.workout_schedule_id is None:
            assignment.workout_schedule = self.get_schedule(schedule_id)
            assignment.save(update_fields=["workout_schedule", "updated_at"])
            logger.info(f"Schedule {schedule_id} attached to assignment {assignment.id}")
        return assignment

    @transaction.atomic
    def replace_template_schedule(
        self,
        assignment_id: uuid.UUID,
        raw_schedule,
        update_derived: bool = False,
        notes: str = "",
    ) -> ScheduleReplaceResult:
        """
        Save a new schedule for a template assignment.

        Args:
            assignment_id: Template assignment being edited
            raw_schedule: New schedule content
            update_derived: Also move active assignments of the same template
                that still use the previous schedule
            notes: Notes stored with a newly created schedule

        Returns:
            ScheduleReplaceResult with the number of derived assignments moved
        """
        assignment = self._get_assignment(assignment_id, for_update=True)
        if not assignment.is_template:
            raise AssignmentException("Only template assignments can change the shared schedule.")

        schedule = self.upsert_schedule(raw_schedule, notes=notes)
        previous_id = assignment.workout_schedule_id
        changed = previous_id != schedule.id

        derived_updated = 0
        if changed:
            assignment.workout_schedule = schedule
            assignment.save(update_fields=["workout_schedule", "updated_at"])

            if update_derived:
                derived = ProgramAssignment.objects.filter(
                    program_template_id=assignment.program_template_id,
                    status=ProgramAssignment.Status.ACTIVE,
                )
                if previous_id is None:
                    derived = derived.filter(workout_schedule__isnull=True)
                else:
                    derived = derived.filter(workout_schedule_id=previous_id)
                derived_updated = derived.update(workout_schedule=schedule)

            logger.info(
                f"Template assignment {assignment.id} now uses schedule {schedule.id}; "
                f"{derived_updated} derived assignment(s) updated"
            )

        return ScheduleReplaceResult(
            assignment=assignment,
            schedule=schedule,
            changed=changed,
            derived_updated=derived_updated,
        )

    @transaction.atomic
    def set_patient_override(self, assignment_id: uuid.UUID, override) -> ProgramAssignment:
        """Store (or clear, with None/empty) a patient's schedule override."""
        assignment = self._get_assignment(assignment_id, for_update=True)
        if assignment.is_template:
            raise AssignmentException("Template assignments cannot carry a patient override.")

        if override:
            normalized = [
                [schedule_utils.normalize_day(day) for day in (week or [])]
                for week in override
            ]
            self._check_references(normalized)
            assignment.patient_override = normalized
        else:
            assignment.patient_override = None

        assignment.save(update_fields=["patient_override", "updated_at"])
        logger.info(f"Patient override {'set' if override else 'cleared'} on assignment {assignment.id}")
        return assignment

    def effective_schedule(self, assignment: ProgramAssignment) -> list:
        base = assignment.workout_schedule.schedule if assignment.workout_schedule_id else None
        return schedule_utils.merge_with_override(base, assignment.patient_override)

    # =========================================================================
    # DISPLAY
    # =========================================================================

    @staticmethod
    def _template_entry(template: ExerciseTemplate) -> Dict:
        return {
            "exercise_template_id": str(template.id),
            "exercise_id": str(template.exercise_id),
            "exercise_name": template.exercise.exercise_name,
            "video_type": template.exercise.video_type,
            "video_url": template.exercise.video_url,
            "sets": template.sets,
            "notes": template.notes,
            "description": describe_template(template),
        }

    def resolve_schedule(self, schedule) -> List[List[List[Dict]]]:
        """
        Expand item references into display data.

        Unknown references are kept with missing=True so a deleted
        exercise does not shift the rest of the day.
        """
        template_ids, group_ids = schedule_utils.referenced_ids(schedule)
        groups = {
            str(group.id): group
            for group in ExerciseGroup.objects.filter(id__in=[g for g in group_ids if _is_uuid(g)])
        }
        for group in groups.values():
            template_ids.extend(group.exercise_template_ids or [])
        template_ids = {t for t in template_ids if _is_uuid(t)}
        templates = {
            str(template.id): template
            for template in ExerciseTemplate.objects.filter(id__in=template_ids).select_related("exercise")
        }

        resolved = []
        for week in schedule or []:
            resolved_week = []
            for day in week or []:
                resolved_day = []
                for item in schedule_utils.normalize_day(day):
                    entry = {"id": item["id"], "type": item["type"]}
                    if item["type"] == schedule_utils.ITEM_EXERCISE_TEMPLATE:
                        template = templates.get(item["id"])
                        if template is None:
                            entry["missing"] = True
                        else:
                            entry.update(self._template_entry(template))
                    else:
                        group = groups.get(item["id"])
                        if group is None:
                            entry["missing"] = True
                        else:
                            entry.update({
                                "title": group.title,
                                "is_superset": group.is_superset,
                                "note": group.note,
                                "items": [
                                    self._template_entry(templates[template_id])
                                    for template_id in group.exercise_template_ids or []
                                    if template_id in templates
                                ],
                            })
                    resolved_day.append(entry)
                resolved_week.append(resolved_day)
            resolved.append(resolved_week)
        return resolved
