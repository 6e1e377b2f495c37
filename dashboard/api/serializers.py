# FILE: medvanta/backend/dashboard/api/serializers.py

from rest_framework import serializers


class StatusCountsSerializer(serializers.Serializer):
    pending = serializers.IntegerField()
    invited = serializers.IntegerField()
    active = serializers.IntegerField()
    no_program = serializers.IntegerField()
    in_program = serializers.IntegerField()


class DashboardUserSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    first_name = serializers.CharField(allow_blank=True)
    last_name = serializers.CharField(allow_blank=True)
    email = serializers.CharField()
    avatar = serializers.CharField(allow_null=True)


class UserProgramStatSerializer(DashboardUserSerializer):
    compliance = serializers.IntegerField()
    program_name = serializers.CharField(allow_null=True)


class UserStatListSerializer(serializers.Serializer):
    users = UserProgramStatSerializer(many=True)
    total = serializers.IntegerField()


class AggregateComplianceSerializer(serializers.Serializer):
    compliance = serializers.FloatField()
    program_completion = serializers.FloatField()


class DashboardSummarySerializer(serializers.Serializer):
    status_counts = StatusCountsSerializer()
    aggregate = AggregateComplianceSerializer()
    needing_attention = UserStatListSerializer()
    program_completed = UserStatListSerializer()
