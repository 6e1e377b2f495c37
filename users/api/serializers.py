# FILE: medvanta/backend/users/api/serializers.py

from django.contrib.auth import get_user_model
from rest_framework import serializers

from programs import completion as completion_utils
from users.models import Appointment, HabitPledge, HpTransaction
from users.services.onboarding_service import ONBOARDING_TARGETS

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact profile embedded in member, team and chat payloads"""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "full_name", "avatar", "status"]
        read_only_fields = fields


class UserProfileSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "description",
            "timezone",
            "avatar",
            "status",
            "journey_phase",
            "screening_completed",
            "intro_completed",
            "consultation_completed",
            "program_assigned",
            "program_started",
            "program_due_date",
            "is_staff",
            "date_joined",
            "updated_at",
        ]
        read_only_fields = fields


class UserWithStatsSerializer(UserProfileSerializer):
    """Users table row: profile plus active program figures"""

    program_name = serializers.CharField(read_only=True, allow_null=True)
    program_weeks = serializers.IntegerField(read_only=True, allow_null=True)
    active_assignment_id = serializers.UUIDField(read_only=True, allow_null=True)
    completion_percentage = serializers.SerializerMethodField()
    is_super_admin = serializers.BooleanField(read_only=True)

    class Meta(UserProfileSerializer.Meta):
        fields = UserProfileSerializer.Meta.fields + [
            "program_name",
            "program_weeks",
            "active_assignment_id",
            "completion_percentage",
            "is_super_admin",
        ]
        read_only_fields = fields

    def get_completion_percentage(self, obj):
        if not getattr(obj, "program_start_date", None) or not getattr(obj, "program_weeks", None):
            return None
        return completion_utils.overall_completion(obj.program_start_date, obj.program_weeks)


class UserListRequestSerializer(serializers.Serializer):
    organization_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    team_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    journey_phase = serializers.ChoiceField(
        choices=User.JourneyPhase.choices, required=False, allow_blank=True, default=""
    )
    status = serializers.ChoiceField(choices=User.Status.choices, required=False, allow_blank=True, default="")
    search = serializers.CharField(required=False, allow_blank=True, default="")


class UserUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    timezone = serializers.CharField(max_length=64, required=False, allow_blank=True)


class QuickAddSerializer(serializers.Serializer):
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    organization_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    team_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class OnboardingOverrideSerializer(serializers.Serializer):
    user_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    target = serializers.ChoiceField(choices=ONBOARDING_TARGETS)


class OnboardingResultSerializer(serializers.Serializer):
    target = serializers.CharField()
    updated_count = serializers.IntegerField()
    updated_ids = serializers.ListField(child=serializers.CharField())


class ImportUploadSerializer(serializers.Serializer):
    file = serializers.FileField()


class ImportRowSerializer(serializers.Serializer):
    row_number = serializers.IntegerField()
    first_name = serializers.CharField(allow_blank=True)
    last_name = serializers.CharField(allow_blank=True)
    email = serializers.CharField(allow_blank=True)


class RowErrorSerializer(serializers.Serializer):
    row_number = serializers.IntegerField()
    field = serializers.CharField()
    message = serializers.CharField()


class ImportValidationSerializer(serializers.Serializer):
    users_to_add = ImportRowSerializer(many=True)
    existing_users = ImportRowSerializer(many=True)
    failed_users = ImportRowSerializer(many=True)
    errors = RowErrorSerializer(many=True)


class ImportedUserSerializer(serializers.Serializer):
    id = serializers.CharField()
    email = serializers.CharField()
    first_name = serializers.CharField(allow_blank=True)
    last_name = serializers.CharField(allow_blank=True)
    status = serializers.CharField()


class ImportResultSerializer(serializers.Serializer):
    created_users = ImportedUserSerializer(many=True)
    existing_users = ImportedUserSerializer(many=True)
    failed_users = ImportRowSerializer(many=True)
    errors = RowErrorSerializer(many=True)


# ---------- PATIENT PROFILE ----------

class AppointmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Appointment
        fields = [
            "id",
            "type",
            "status",
            "event_name",
            "invitee_name",
            "invitee_email",
            "start_time",
            "end_time",
            "timezone",
            "canceled_by",
            "cancellation_reason",
            "reschedule_url",
            "cancel_url",
            "location_type",
            "location_value",
            "created_at",
        ]
        read_only_fields = fields


class HabitPledgeSerializer(serializers.ModelSerializer):
    class Meta:
        model = HabitPledge
        fields = ["pledge", "photo", "signature", "created_at"]
        read_only_fields = fields


class HpTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = HpTransaction
        fields = ["created_at", "points_earned", "transaction_type", "description"]
        read_only_fields = fields


class HpSummarySerializer(serializers.Serializer):
    level = serializers.IntegerField()
    points = serializers.IntegerField()
    points_to_next_level = serializers.IntegerField(allow_null=True)
    is_max_level = serializers.BooleanField()
    progress_percentage = serializers.IntegerField()
    level_description = serializers.CharField(allow_null=True)
    level_image_url = serializers.CharField(allow_null=True)
    transactions = HpTransactionSerializer(many=True)


class IpTransactionSerializer(serializers.Serializer):
    created_at = serializers.DateTimeField()
    amount = serializers.IntegerField()
    transaction_type = serializers.CharField()
    description = serializers.CharField(allow_null=True)


class IpSummarySerializer(serializers.Serializer):
    empowerment = serializers.IntegerField(allow_null=True)
    title = serializers.CharField(allow_null=True)
    effects = serializers.CharField(allow_null=True)
    base_power = serializers.IntegerField(allow_null=True)
    top_power = serializers.IntegerField(allow_null=True)
    points_missing_for_next_level = serializers.IntegerField(allow_null=True)
    gate_title = serializers.CharField(allow_null=True)
    gate_description = serializers.CharField(allow_null=True)
    transactions = IpTransactionSerializer(many=True)


class IntakeSurveySerializer(serializers.Serializer):
    occupation = serializers.CharField(allow_null=True)
    symptoms = serializers.ListField(child=serializers.CharField())
    health_conditions = serializers.ListField(child=serializers.CharField())
    activity_level = serializers.CharField(allow_null=True)
    commitment_days = serializers.IntegerField(allow_null=True)
    commitment_minutes = serializers.IntegerField(allow_null=True)
    preconditions = serializers.BooleanField(allow_null=True)
    preconditions_details = serializers.CharField(allow_null=True)


class PatientProfileSerializer(serializers.Serializer):
    user = UserProfileSerializer()
    appointments = AppointmentSerializer(many=True)
    habit_pledge = HabitPledgeSerializer(allow_null=True)
    hp = HpSummarySerializer()
    ip = IpSummarySerializer()
    intake_survey = IntakeSurveySerializer(allow_null=True)
