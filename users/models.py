# users/models.py

import uuid

from django.db import models
from django.core.validators import FileExtensionValidator
from django.contrib.auth.models import (
    AbstractBaseUser,
    PermissionsMixin,
    BaseUserManager,
)


# ============================================================
# HELPER FUNCTIONS (Must be at module level for migrations)
# ============================================================

def avatar_upload_path(instance, filename):
    """Generate upload path for profile pictures."""
    ext = filename.split(".")[-1].lower()
    return f"avatars/{instance.id}/{uuid.uuid4().hex}.{ext}"


# ============================================================
# USER MANAGER
# ============================================================

class UserManager(BaseUserManager):
    """Custom manager for User model."""

    def get_by_natural_key(self, email):
        return self.get(email__iexact=email)

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email).strip().lower()
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("status", User.Status.ACTIVE)
        return self.create_user(email, password, **extra_fields)


# ============================================================
# SHARED CHOICES
# ============================================================

class GateType(models.TextChoices):
    COMPLETES_SIGNUP = "completes_signup", "Completes signup"
    INITIAL_ONBOARDING = "initial_onboarding", "Initial onboarding"
    BOOK_SCREENING = "book_screening", "Book screening"
    ATTEND_SCREENING = "attend_screening", "Attend screening"
    BOOK_CONSULTATION = "book_consultation", "Book consultation"
    COMPLETE_INTAKE_SURVEY = "complete_intake_survey", "Complete intake survey"
    ATTEND_VIRTUAL_CONSULTATION = "attend_virtual_consultation", "Attend virtual consultation"


# ============================================================
# USER MODEL
# ============================================================

class User(AbstractBaseUser, PermissionsMixin):
    """
    Clinic member (patient) or staff account, identified by email.

    Onboarding flags drive the journey phase; program flags mirror
    the member's active program assignment.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        INVITED = "invited", "Invited"
        ACTIVE = "active", "Active"
        ASSIGNED = "assigned", "Assigned"

    class JourneyPhase(models.TextChoices):
        DISCOVERY = "discovery", "Discovery"
        ONBOARDING = "onboarding", "Onboarding"
        SCAFFOLDING = "scaffolding", "Scaffolding"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(max_length=254, unique=True, db_index=True)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    description = models.TextField(blank=True)
    timezone = models.CharField(max_length=64, blank=True)
    avatar = models.FileField(
        upload_to=avatar_upload_path,
        null=True,
        blank=True,
        validators=[FileExtensionValidator(allowed_extensions=["jpg", "jpeg", "png", "webp"])],
    )

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    journey_phase = models.CharField(
        max_length=20,
        choices=JourneyPhase.choices,
        null=True,
        blank=True,
    )

    # Onboarding
    screening_completed = models.BooleanField(default=False)
    intro_completed = models.BooleanField(default=False)
    consultation_completed = models.BooleanField(default=False)

    # Program
    program_assigned = models.BooleanField(default=False)
    program_started = models.BooleanField(default=False)
    program_due_date = models.DateField(null=True, blank=True)

    # Furthest onboarding gate reached in the patient app
    max_gate_type = models.CharField(max_length=40, choices=GateType.choices, null=True, blank=True)
    max_gate_unlocked = models.PositiveSmallIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()
    USERNAME_FIELD = "email"

    class Meta:
        db_table = "users_user"
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["-date_joined"]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["journey_phase"]),
        ]

    def __str__(self):
        return f"{self.email} ({self.status})"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_full_name(self):
        return self.full_name

    def get_short_name(self):
        return self.first_name


# ============================================================
# PATIENT ENGAGEMENT
# Written by the patient app and booking webhooks; read here.
# ============================================================

class Appointment(models.Model):
    """Booked call (screening, consultation) synced from the scheduling tool."""

    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        CANCELED = "canceled", "Canceled"
        ATTENDED = "attended", "Attended"

    class Type(models.TextChoices):
        ONBOARDING_SCREENING = "onboarding_screening", "Onboarding screening"
        ONBOARDING_CONSULTATION = "onboarding_consultation", "Onboarding consultation"
        CONSULTATION = "consultation", "Consultation"
        OTHER = "other", "Other"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="appointments")

    calendly_uri = models.CharField(max_length=500, blank=True)
    event_uri = models.CharField(max_length=500, null=True, blank=True)
    event_name = models.CharField(max_length=255, null=True, blank=True)
    invitee_name = models.CharField(max_length=255, null=True, blank=True)
    invitee_email = models.EmailField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SCHEDULED)
    type = models.CharField(max_length=40, choices=Type.choices, default=Type.OTHER)
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    timezone = models.CharField(max_length=64, null=True, blank=True)
    canceled_by = models.CharField(max_length=255, null=True, blank=True)
    cancellation_reason = models.TextField(null=True, blank=True)
    reschedule_url = models.URLField(max_length=500, null=True, blank=True)
    cancel_url = models.URLField(max_length=500, null=True, blank=True)
    location_type = models.CharField(max_length=100, null=True, blank=True)
    location_value = models.CharField(max_length=500, null=True, blank=True)
    raw_payload = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users_appointment"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "created_at"])]

    def __str__(self):
        return f"{self.type} for {self.user_id} ({self.status})"


class HabitPledge(models.Model):
    """
    Signed habit pledge.

    photo and signature hold {"image_url", "blur_hash"} objects.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="habit_pledges")
    pledge = models.TextField()
    photo = models.JSONField(default=dict)
    signature = models.JSONField(default=dict)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users_habit_pledge"
        ordering = ["-created_at"]


class HpLevelThreshold(models.Model):
    """Vanta Points (HP) level ladder."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    level = models.PositiveIntegerField(unique=True)
    description = models.CharField(max_length=255)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    hp_range_min = models.IntegerField(default=0)
    hp_range_max = models.IntegerField(null=True, blank=True)
    # None on the last level
    hp_required_for_next_level = models.IntegerField(null=True, blank=True)
    total_hp_at_level = models.IntegerField(default=0)

    class Meta:
        db_table = "users_hp_level_threshold"
        ordering = ["level"]

    def __str__(self):
        return f"Level {self.level}"


class HpTransaction(models.Model):

    class TransactionType(models.TextChoices):
        FIRST_EXERCISE = "first_exercise", "First exercise"
        EXERCISE_PRE_CHECK = "exercise_pre_check", "Exercise pre check"
        EXERCISE_POST_CHECK = "exercise_post_check", "Exercise post check"
        EXERCISE_SYNC_BONUS = "exercise_sync_bonus", "Exercise sync bonus"
        DAILY_COMPLETION_BONUS = "daily_completion_bonus", "Daily completion bonus"
        LEVEL_BONUS = "level_bonus", "Level bonus"
        STREAK_BONUS = "streak_bonus", "Streak bonus"
        MANUAL_ADJUSTMENT = "manual_adjustment", "Manual adjustment"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="hp_transactions")
    transaction_type = models.CharField(max_length=40, choices=TransactionType.choices)
    description = models.CharField(max_length=255, null=True, blank=True)
    points_earned = models.IntegerField()
    points_before = models.IntegerField(default=0)
    points_after = models.IntegerField(default=0)
    level_before = models.PositiveIntegerField(default=1)
    level_after = models.PositiveIntegerField(default=1)
    level_up_occurred = models.BooleanField(default=False)
    metadata = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "users_hp_transaction"
        ordering = ["-created_at"]


class EmpowermentThreshold(models.Model):
    """Inner Power (IP) tiers; a patient sits in the tier whose range holds their empowerment."""

    title = models.CharField(max_length=255)
    base_power = models.IntegerField()
    top_power = models.IntegerField()
    effects = models.TextField(null=True, blank=True)
    metadata = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "users_empowerment_threshold"
        ordering = ["base_power"]

    def __str__(self):
        return f"{self.title} ({self.base_power}-{self.top_power})"


class GateUnlockStep(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=40, choices=GateType.choices)
    gate = models.PositiveSmallIntegerField(null=True, blank=True)
    title = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    cta = models.CharField(max_length=255, null=True, blank=True)
    video_url = models.URLField(max_length=500, null=True, blank=True)
    energy_points = models.IntegerField(null=True, blank=True)

    class Meta:
        db_table = "users_gate_unlock_step"
        ordering = ["type", "gate"]
        constraints = [
            models.UniqueConstraint(fields=["type", "gate"], name="unique_gate_step"),
        ]


class IpTransaction(models.Model):

    class TransactionType(models.TextChoices):
        MANUAL_ADJUSTMENT = "manual_adjustment", "Manual adjustment"
        INITIAL_ONBOARDING = "initial_onboarding", "Initial onboarding"
        DECAY = "decay", "Decay"
        CHECK_IN_QUESTION = "check_in_question", "Check-in question"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="ip_transactions")
    transaction_type = models.CharField(max_length=40, choices=TransactionType.choices)
    # Negative for decay
    amount = models.IntegerField()
    metadata = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "users_ip_transaction"
        ordering = ["-created_at"]


class McIntakeOption(models.Model):
    """Answer option of the intake survey."""

    class Step(models.TextChoices):
        PRECONDITIONS = "preconditions", "Preconditions"
        PRECONDITIONS_DETAILS = "preconditions_details", "Preconditions details"
        SYMPTOMS = "symptoms", "Symptoms"
        ACTIVITY_LEVEL = "activity_level", "Activity level"
        COMMITMENT_DAYS = "commitment_days", "Commitment days"
        COMMITMENT_MINUTES = "commitment_minutes", "Commitment minutes"
        HEALTH_CONDITIONS = "health_conditions", "Health conditions"

    step = models.CharField(max_length=40, choices=Step.choices)
    title = models.CharField(max_length=255)
    subtitle = models.CharField(max_length=255, null=True, blank=True)
    icon = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = "users_mc_intake_option"
        ordering = ["step", "id"]

    def __str__(self):
        return f"{self.step}: {self.title}"


class McIntakeSurvey(models.Model):
    """
    Intake survey answers.

    symptoms and health_conditions hold McIntakeOption ids in answer order;
    activity_level is a single option id.
    """

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="intake_survey")
    occupation = models.CharField(max_length=255, null=True, blank=True)
    symptoms = models.JSONField(default=list, blank=True)
    health_conditions = models.JSONField(default=list, blank=True)
    activity_level = models.IntegerField(null=True, blank=True)
    commitment_days = models.PositiveSmallIntegerField(null=True, blank=True)
    commitment_minutes = models.PositiveSmallIntegerField(null=True, blank=True)
    preconditions = models.BooleanField(null=True, blank=True)
    preconditions_details = models.TextField(null=True, blank=True)
    user_confirmed = models.BooleanField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users_mc_intake_survey"
