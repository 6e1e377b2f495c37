# FILE: medvanta/backend/exercises/services/template_service.py

"""
EXERCISE TEMPLATE SERVICE

Exercise templates are content-addressed: the SHA-256 of the canonical
prescription is stored as template_hash, so saving the same sets, reps,
times and overrides twice returns the row that already exists.
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models.functions import Lower

from core.exceptions import NotFoundException, ValidationFailedException
from core.hashing import content_hash
from core.pagination import PaginatedResult, clamp_page, paginate
from exercises.models import Exercise, ExerciseTemplate

logger = logging.getLogger(__name__)

USE_BASE_VALUE = -1

PRESCRIPTION_FIELDS = (
    "notes",
    "sets",
    "time",
    "rep",
    "distance",
    "weight",
    "rest_time",
    "equipment_ids",
    "rep_override",
    "time_override",
    "distance_override",
    "weight_override",
    "rest_time_override",
)


# =============================================================================
# DESCRIPTION
# =============================================================================

def _set_value(base, overrides, set_index):
    if overrides and set_index < len(overrides):
        value = overrides[set_index]
        if value == USE_BASE_VALUE or value == str(USE_BASE_VALUE):
            return base
        return value
    return base


def describe_template(template) -> str:
    """
    Human readable prescription, e.g.
    "2 sets: Set 1 - 10 reps, 60s rest | Set 2 - 8 reps, 20kg, 60s rest".
    """
    sets = template.sets or 0
    if sets == 0:
        return "No sets configured"

    descriptions = []
    for i in range(sets):
        reps = _set_value(template.rep, template.rep_override, i)
        time = _set_value(template.time, template.time_override, i)
        distance = _set_value(template.distance, template.distance_override, i)
        weight = _set_value(template.weight, template.weight_override, i)
        rest = _set_value(template.rest_time, template.rest_time_override, i)

        values = []
        if reps is not None:
            values.append(f"{reps} reps")
        if time is not None:
            values.append(f"{time}s")
        if distance not in (None, ""):
            values.append(f"{distance}")
        if weight not in (None, ""):
            values.append(f"{weight}")
        if rest is not None:
            values.append(f"{rest}s rest")

        if values:
            descriptions.append(f"Set {i + 1} - {', '.join(values)}")
        else:
            descriptions.append(f"Set {i + 1}")

    return f"{sets} set{'s' if sets != 1 else ''}: {' | '.join(descriptions)}"


# =============================================================================
# SERVICE
# =============================================================================

class ExerciseTemplateService:
    """
    Service for creating and browsing exercise templates.
    """

    SORT_FIELDS = ("updated_at", "created_at", "exercise_name")

    def __init__(self):
        self.config = settings.EXERCISE_CONFIG

    @staticmethod
    def prescription(exercise_id, data: Dict) -> Dict:
        """Canonical prescription dict the template hash is computed over."""
        payload = {"exercise_id": str(exercise_id)}
        for field_name in PRESCRIPTION_FIELDS:
            value = data.get(field_name)
            if field_name == "equipment_ids":
                value = sorted(value or [])
            if field_name == "notes":
                value = (value or "").strip() or None
            payload[field_name] = value
        return payload

    def _validate(self, data: Dict):
        sets = data.get("sets") or 0
        if sets < 0:
            raise ValidationFailedException("Sets cannot be negative.")
        for field_name in PRESCRIPTION_FIELDS:
            if not field_name.endswith("_override"):
                continue
            overrides = data.get(field_name)
            if overrides is None:
                continue
            if not isinstance(overrides, list):
                raise ValidationFailedException(f"{field_name} must be a list.")
            if len(overrides) > sets:
                raise ValidationFailedException(f"{field_name} has more entries than sets.")

    def upsert_template(self, exercise_id: uuid.UUID, **data) -> ExerciseTemplate:
        """
        Create a template or return the existing one with identical content.

        Args:
            exercise_id: Library exercise being prescribed
            **data: Prescription fields (sets, rep, time, overrides, ...)

        Returns:
            The stored ExerciseTemplate
        """
        if not Exercise.objects.filter(id=exercise_id).exists():
            raise NotFoundException("Exercise not found.")
        unknown = set(data) - set(PRESCRIPTION_FIELDS)
        if unknown:
            raise ValidationFailedException(f"Unknown template fields: {', '.join(sorted(unknown))}")
        self._validate(data)

        payload = self.prescription(exercise_id, data)
        template_hash = content_hash(payload)

        existing = ExerciseTemplate.objects.filter(template_hash=template_hash).first()
        if existing:
            return existing

        fields = {key: value for key, value in payload.items() if key != "exercise_id"}
        try:
            with transaction.atomic():
                template = ExerciseTemplate.objects.create(
                    exercise_id=exercise_id,
                    template_hash=template_hash,
                    **fields
                )
        except IntegrityError:
            # Concurrent insert of the same content
            return ExerciseTemplate.objects.get(template_hash=template_hash)

        logger.info(f"Exercise template {template.id} created for exercise {exercise_id}")
        return template

    def get_template(self, template_id: uuid.UUID) -> ExerciseTemplate:
        try:
            return ExerciseTemplate.objects.select_related("exercise").get(id=template_id)
        except ExerciseTemplate.DoesNotExist:
            raise NotFoundException("Exercise template not found.")

    def get_templates(self, template_ids: Iterable) -> Dict[str, ExerciseTemplate]:
        templates = ExerciseTemplate.objects.filter(id__in=list(template_ids)).select_related("exercise")
        return {str(template.id): template for template in templates}

    def list_templates(
        self,
        search: str = "",
        sort_by: str = "updated_at",
        sort_order: str = "desc",
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> PaginatedResult:
        if sort_by not in self.SORT_FIELDS:
            raise ValidationFailedException(f"Cannot sort by {sort_by!r}.")
        if sort_order not in ("asc", "desc"):
            raise ValidationFailedException("sort_order must be 'asc' or 'desc'.")

        page, page_size = clamp_page(
            page,
            page_size or self.config["DEFAULT_PAGE_SIZE"],
            default_size=self.config["DEFAULT_PAGE_SIZE"],
            max_size=self.config["MAX_PAGE_SIZE"],
        )

        queryset = ExerciseTemplate.objects.select_related("exercise")
        search = (search or "").strip()
        if search:
            queryset = queryset.filter(exercise__exercise_name__icontains=search)

        if sort_by == "exercise_name":
            order = Lower("exercise__exercise_name")
            order = order.desc() if sort_order == "desc" else order.asc()
        else:
            order = f"{'-' if sort_order == 'desc' else ''}{sort_by}"
        queryset = queryset.order_by(order, "id")

        return paginate(queryset, page, page_size)

    def templates_for_exercise(self, exercise_id: uuid.UUID) -> List[ExerciseTemplate]:
        return list(
            ExerciseTemplate.objects.filter(exercise_id=exercise_id).select_related("exercise")
        )
