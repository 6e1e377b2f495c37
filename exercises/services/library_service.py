# FILE: medvanta/backend/exercises/services/library_service.py

"""
EXERCISE LIBRARY SERVICE

Lists exercises that can be shown to patients: only exercises with a
playable video (YouTube link or uploaded file) appear in the library.
"""

import logging
import uuid
from typing import Optional

from django.conf import settings
from django.db.models import Q

from core.exceptions import NotFoundException, ValidationFailedException
from core.pagination import PaginatedResult, clamp_page, paginate
from exercises.models import Exercise

logger = logging.getLogger(__name__)


class ExerciseLibraryService:
    """
    Service for browsing and editing the exercise library.
    """

    SORT_FIELDS = ("exercise_name", "created_at", "updated_at")
    EDITABLE_FIELDS = (
        "exercise_name",
        "type",
        "video_type",
        "video_url",
        "library_tip",
        "library_check_in_question",
    )

    def __init__(self):
        self.config = settings.EXERCISE_CONFIG

    def library_queryset(self):
        return Exercise.objects.filter(
            video_url__isnull=False,
            video_type__in=self.config["LIBRARY_VIDEO_TYPES"],
        ).exclude(video_url="")

    def list_exercises(
        self,
        search: str = "",
        exercise_type: Optional[str] = None,
        video_type: Optional[str] = None,
        sort_by: str = "exercise_name",
        sort_order: str = "asc",
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> PaginatedResult:
        """
        List library exercises.

        Args:
            search: Case-insensitive match on exercise name
            exercise_type: Optional exercise type filter
            video_type: Optional video type filter (youtube or file)
            sort_by: exercise_name, created_at or updated_at
            sort_order: asc or desc
            page: Page number (1-indexed)
            page_size: Rows per page, clamped to MAX_PAGE_SIZE

        Returns:
            PaginatedResult of Exercise rows
        """
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

        queryset = self.library_queryset()

        search = (search or "").strip()
        if search:
            queryset = queryset.filter(exercise_name__icontains=search)
        if exercise_type:
            queryset = queryset.filter(type=exercise_type)
        if video_type:
            queryset = queryset.filter(video_type=video_type)

        prefix = "-" if sort_order == "desc" else ""
        queryset = queryset.order_by(f"{prefix}{sort_by}", "id")

        return paginate(queryset, page, page_size)

    def list_types(self):
        return list(
            self.library_queryset().exclude(type="").order_by("type").values_list("type", flat=True).distinct()
        )

    def get_exercise(self, exercise_id: uuid.UUID) -> Exercise:
        try:
            return Exercise.objects.get(id=exercise_id)
        except Exercise.DoesNotExist:
            raise NotFoundException("Exercise not found.")

    def update_exercise(self, exercise_id: uuid.UUID, **fields) -> Exercise:
        exercise = self.get_exercise(exercise_id)
        for key, value in fields.items():
            if key not in self.EDITABLE_FIELDS:
                raise ValidationFailedException(f"Field {key!r} cannot be edited.")
            setattr(exercise, key, value)

        if "exercise_name" in fields:
            exercise.exercise_name = (exercise.exercise_name or "").strip()
            if not exercise.exercise_name:
                raise ValidationFailedException("Exercise name is required.")

        exercise.save()
        logger.info(f"Exercise {exercise.id} updated: {', '.join(sorted(fields))}")
        return exercise
