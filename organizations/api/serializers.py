# FILE: medvanta/backend/organizations/api/serializers.py

from rest_framework import serializers

from organizations.models import Organization, OrganizationMember, Team, TeamMembership
from users.api.serializers import UserSummarySerializer


class OrganizationSerializer(serializers.ModelSerializer):
    """Organization with active member count"""

    members_count = serializers.SerializerMethodField()

    class Meta:
        model = Organization
        fields = [
            "id",
            "name",
            "description",
            "picture",
            "is_active",
            "is_super_admin",
            "members_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "is_super_admin", "members_count", "created_at", "updated_at"]

    def get_members_count(self, obj):
        count = getattr(obj, "members_count", None)
        if count is None:
            count = obj.members.filter(is_active=True).count()
        return count

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Organization name is required.")
        return value


class OrganizationMemberSerializer(serializers.ModelSerializer):
    profile = UserSummarySerializer(source="user", read_only=True)

    class Meta:
        model = OrganizationMember
        fields = ["id", "user", "role", "is_active", "profile", "created_at"]
        read_only_fields = fields


class AddOrganizationMembersSerializer(serializers.Serializer):
    user_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    role = serializers.ChoiceField(
        choices=OrganizationMember.Role.choices,
        default=OrganizationMember.Role.PATIENT,
    )


class TeamMemberSerializer(serializers.ModelSerializer):
    """Team member row as shown on the team board"""

    profile = UserSummarySerializer(source="user", read_only=True)

    class Meta:
        model = TeamMembership
        fields = ["id", "user_id", "profile"]
        read_only_fields = fields


class TeamSerializer(serializers.ModelSerializer):
    members = TeamMemberSerializer(source="memberships", many=True, read_only=True)
    member_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Team
        fields = [
            "id",
            "organization",
            "name",
            "description",
            "notes",
            "members",
            "member_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "organization", "members", "member_count", "created_at", "updated_at"]


class TeamWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TeamUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class AddTeamMembersSerializer(serializers.Serializer):
    user_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class AssignToTeamSerializer(serializers.Serializer):
    """Drop of a patient card onto a team column (target null = unassign)"""

    user_id = serializers.UUIDField()
    target_team_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    source_team_id = serializers.UUIDField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs.get("target_team_id") is None and attrs.get("source_team_id") is None:
            raise serializers.ValidationError("A source or target team is required.")
        return attrs


class SuperAdminSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
