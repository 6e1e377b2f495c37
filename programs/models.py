# FILE: medvanta/backend/programs/models.py

import uuid
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator, FileExtensionValidator


def program_image_upload_path(instance, filename):
    """Generate upload path for program template images"""
    ext = filename.split('.')[-1].lower()
    new_filename = f"{uuid.uuid4()}.{ext}"
    return f"programs/{instance.id}/images/{new_filename}"


class ProgramTemplate(models.Model):
    """
    Named multi-week workout program definition.

    Patients never follow a template directly: each template has one
    template assignment that holds its schedule, and patient
    assignments are created from it.
    """

    class Meta:
        db_table = 'programs_template'
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['organization', 'active']),
            models.Index(fields=['weeks']),
            models.Index(fields=['updated_at']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='program_templates'
    )

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    weeks = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(52)]
    )
    goals = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    image = models.FileField(
        upload_to=program_image_upload_path,
        null=True,
        blank=True,
        validators=[FileExtensionValidator(allowed_extensions=['jpg', 'jpeg', 'png', 'webp'])]
    )

    active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.weeks} weeks)"


class ExerciseGroup(models.Model):
    """
    Ordered block of exercise templates, optionally run as a superset.
    """

    class Meta:
        db_table = 'programs_exercise_group'
        ordering = ['-updated_at']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group_hash = models.CharField(max_length=64, unique=True)

    title = models.CharField(max_length=255, blank=True)
    is_superset = models.BooleanField(default=False)
    note = models.TextField(blank=True)
    exercise_template_ids = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        kind = "Superset" if self.is_superset else "Group"
        return f"{kind}: {self.title or self.id}"


class WorkoutSchedule(models.Model):
    """
    Week -> day -> item tree, stored normalized and content-hashed.
    """

    class Meta:
        db_table = 'programs_workout_schedule'
        ordering = ['-updated_at']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    schedule_hash = models.CharField(max_length=64, unique=True)

    schedule = models.JSONField(default=list)
    notes = models.TextField(blank=True)
    is_draft = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Schedule {str(self.id)[:8]} ({len(self.schedule or [])} weeks)"


class ProgramAssignment(models.Model):
    """
    Binding of a program template and schedule to a start date.

    Status 'template' rows have no user and act as the editable master
    copy; 'active' rows belong to one patient and carry the completion log
    and optional per-patient schedule override.
    """

    class Status(models.TextChoices):
        TEMPLATE = 'template', 'Template'
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        ARCHIVED = 'archived', 'Archived'

    class Meta:
        db_table = 'programs_assignment'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user'],
                condition=models.Q(status='active'),
                name='unique_active_assignment_per_user'
            )
        ]
        indexes = [
            models.Index(fields=['user', 'status']),
            models.Index(fields=['program_template', 'status']),
            models.Index(fields=['organization', 'status']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='program_assignments'
    )
    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='program_assignments'
    )
    program_template = models.ForeignKey(
        ProgramTemplate,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    workout_schedule = models.ForeignKey(
        WorkoutSchedule,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assignments'
    )

    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.TEMPLATE
    )

    completion = models.JSONField(default=list, blank=True)
    patient_override = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        owner = self.user or "template"
        return f"{self.program_template.name} -> {owner} ({self.status})"

    @property
    def is_template(self):
        return self.status == self.Status.TEMPLATE
