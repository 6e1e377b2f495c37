# FILE: medvanta/backend/exercises/models.py

import uuid
from django.db import models
from django.core.validators import MinValueValidator


class Equipment(models.Model):
    """Piece of equipment an exercise template can require"""

    class Meta:
        db_table = 'exercises_equipment'
        ordering = ['name']
        verbose_name_plural = 'Equipment'

    name = models.CharField(max_length=120, unique=True)

    def __str__(self):
        return self.name


class Exercise(models.Model):
    """
    Library exercise with its demonstration video.
    """

    class VideoType(models.TextChoices):
        YOUTUBE = 'youtube', 'YouTube'
        FILE = 'file', 'Uploaded file'
        NONE = 'none', 'No video'

    class Meta:
        db_table = 'exercises_exercise'
        ordering = ['exercise_name']
        indexes = [
            models.Index(fields=['exercise_name']),
            models.Index(fields=['video_type']),
            models.Index(fields=['type']),
            models.Index(fields=['updated_at']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    exercise_name = models.CharField(max_length=255)
    type = models.CharField(max_length=100, blank=True)

    video_type = models.CharField(max_length=20, choices=VideoType.choices, default=VideoType.NONE)
    video_url = models.URLField(max_length=1000, null=True, blank=True)

    library_tip = models.TextField(blank=True)
    library_check_in_question = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.exercise_name

    @property
    def has_video(self):
        return bool(self.video_url) and self.video_type in (self.VideoType.YOUTUBE, self.VideoType.FILE)


class ExerciseTemplate(models.Model):
    """
    Prescription of an exercise: sets plus base values with optional
    per-set overrides.

    Override arrays are indexed by set; an entry of -1 keeps the base value.
    Identical prescriptions share one row through template_hash.
    """

    class Meta:
        db_table = 'exercises_template'
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['exercise', 'updated_at']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    template_hash = models.CharField(max_length=64, unique=True)

    exercise = models.ForeignKey(
        Exercise,
        on_delete=models.CASCADE,
        related_name='templates'
    )

    notes = models.TextField(null=True, blank=True)
    sets = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(0)])
    time = models.PositiveIntegerField(null=True, blank=True, help_text="Seconds")
    rep = models.PositiveIntegerField(null=True, blank=True)
    distance = models.CharField(max_length=50, null=True, blank=True)
    weight = models.CharField(max_length=50, null=True, blank=True)
    rest_time = models.PositiveIntegerField(null=True, blank=True, help_text="Seconds")
    equipment_ids = models.JSONField(default=list, blank=True)

    rep_override = models.JSONField(null=True, blank=True)
    time_override = models.JSONField(null=True, blank=True)
    distance_override = models.JSONField(null=True, blank=True)
    weight_override = models.JSONField(null=True, blank=True)
    rest_time_override = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.exercise.exercise_name} ({self.sets or 0} sets)"
