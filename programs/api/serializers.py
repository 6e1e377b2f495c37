# FILE: medvanta/backend/programs/api/serializers.py

from django.conf import settings
from rest_framework import serializers

from programs.models import ExerciseGroup, ProgramAssignment, ProgramTemplate, WorkoutSchedule
from programs import completion as completion_utils


class ProgramTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProgramTemplate
        fields = [
            "id",
            "organization",
            "name",
            "description",
            "weeks",
            "goals",
            "notes",
            "image",
            "active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProgramTemplateCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    weeks = serializers.IntegerField(
        min_value=settings.PROGRAM_CONFIG["MIN_WEEKS"],
        max_value=settings.PROGRAM_CONFIG["MAX_WEEKS"],
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    goals = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    organization_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    schedule = serializers.JSONField(required=False, allow_null=True, default=None)


class ProgramTemplateUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    weeks = serializers.IntegerField(
        required=False,
        min_value=settings.PROGRAM_CONFIG["MIN_WEEKS"],
        max_value=settings.PROGRAM_CONFIG["MAX_WEEKS"],
    )
    description = serializers.CharField(required=False, allow_blank=True)
    goals = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    active = serializers.BooleanField(required=False)


class TemplateImageSerializer(serializers.Serializer):
    image = serializers.FileField()


class WorkoutScheduleSerializer(serializers.ModelSerializer):
    class Meta:
        model = WorkoutSchedule
        fields = ["id", "schedule_hash", "schedule", "notes", "is_draft", "created_at", "updated_at"]
        read_only_fields = fields


class WorkoutScheduleWriteSerializer(serializers.Serializer):
    schedule = serializers.JSONField(allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    is_draft = serializers.BooleanField(required=False, default=False)


class ExerciseGroupSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExerciseGroup
        fields = ["id", "group_hash", "title", "is_superset", "note", "exercise_template_ids", "created_at"]
        read_only_fields = fields


class ExerciseGroupWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    exercise_template_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    is_superset = serializers.BooleanField(required=False, default=False)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class ProgramAssignmentSerializer(serializers.ModelSerializer):
    """Assignment with its template and progress figures"""

    program_template = ProgramTemplateSerializer(read_only=True)
    user_email = serializers.SerializerMethodField()
    overall_completion = serializers.SerializerMethodField()
    progress_color = serializers.SerializerMethodField()

    class Meta:
        model = ProgramAssignment
        fields = [
            "id",
            "user",
            "user_email",
            "organization",
            "program_template",
            "workout_schedule",
            "start_date",
            "end_date",
            "status",
            "completion",
            "patient_override",
            "overall_completion",
            "progress_color",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_user_email(self, obj):
        return obj.user.email if obj.user_id else None

    def get_overall_completion(self, obj):
        if obj.is_template:
            return None
        return completion_utils.overall_completion(obj.start_date, obj.program_template.weeks)

    def get_progress_color(self, obj):
        percentage = self.get_overall_completion(obj)
        return None if percentage is None else completion_utils.progress_color(percentage)


class TemplateAssignmentListRequestSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default="")
    weeks = serializers.IntegerField(required=False, allow_null=True, default=None, min_value=1)
    show_assigned = serializers.BooleanField(required=False, default=False)
    organization_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    page_size = serializers.IntegerField(
        required=False,
        default=settings.PROGRAM_CONFIG["DEFAULT_PAGE_SIZE"],
        min_value=1,
        max_value=settings.PROGRAM_CONFIG["MAX_PAGE_SIZE"],
    )


class PaginatedAssignmentsSerializer(serializers.Serializer):
    data = ProgramAssignmentSerializer(many=True)
    page = serializers.IntegerField()
    page_size = serializers.IntegerField()
    total = serializers.IntegerField()
    has_more = serializers.BooleanField()


class AssignToUserSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    start_date = serializers.DateField()


class ReplaceScheduleSerializer(serializers.Serializer):
    schedule = serializers.JSONField(allow_null=True)
    update_derived = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReplaceScheduleResultSerializer(serializers.Serializer):
    assignment = ProgramAssignmentSerializer()
    schedule = WorkoutScheduleSerializer()
    changed = serializers.BooleanField()
    derived_updated = serializers.IntegerField()


class AttachScheduleSerializer(serializers.Serializer):
    schedule_id = serializers.UUIDField()


class PatientOverrideSerializer(serializers.Serializer):
    override = serializers.JSONField(allow_null=True)

    def validate_override(self, value):
        if value is not None and not isinstance(value, list):
            raise serializers.ValidationError("Override must be a list of weeks or null.")
        return value


class RecordProgressSerializer(serializers.Serializer):
    week = serializers.IntegerField(min_value=0, help_text="0-based week index")
    day = serializers.IntegerField(min_value=0, max_value=6, help_text="0-based day index")
    current_set = serializers.IntegerField(min_value=0)
    total_sets = serializers.IntegerField(min_value=0)


class DayProgressSerializer(serializers.Serializer):
    week = serializers.IntegerField()
    day = serializers.IntegerField()
    date = serializers.DateField()
    scheduled = serializers.BooleanField()
    status = serializers.CharField(allow_null=True)
    percentage = serializers.IntegerField()


class ProgressSummarySerializer(serializers.Serializer):
    assignment_id = serializers.UUIDField()
    program_name = serializers.CharField()
    weeks = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    current_week = serializers.IntegerField(allow_null=True)
    current_day = serializers.IntegerField(allow_null=True)
    overall_completion = serializers.IntegerField()
    progress_color = serializers.CharField()
    compliance = serializers.IntegerField(allow_null=True)
    days = serializers.ListField(child=DayProgressSerializer(many=True))
