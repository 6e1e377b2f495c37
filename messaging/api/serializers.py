# FILE: medvanta/backend/messaging/api/serializers.py

from django.conf import settings
from rest_framework import serializers

from messaging.models import Chat, Message
from users.api.serializers import UserSummarySerializer


class ChatSerializer(serializers.ModelSerializer):
    class Meta:
        model = Chat
        fields = ["id", "name", "target_type", "organization", "team", "user", "last_updated_at", "created_at"]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(source="user", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "chat",
            "sender",
            "content",
            "attachments",
            "message_type",
            "metadata",
            "last_seen_at",
            "created_at",
        ]
        read_only_fields = fields


class AttachmentSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=1000)
    type = serializers.ChoiceField(choices=settings.MESSAGING_CONFIG["ATTACHMENT_TYPES"])


class SendMessageSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=True)
    attachment = AttachmentSerializer(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if not attrs.get("content") and not attrs.get("attachment"):
            raise serializers.ValidationError("Message content is required.")
        return attrs


class MessageListRequestSerializer(serializers.Serializer):
    after = serializers.DateTimeField(required=False, allow_null=True, default=None)
    limit = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=500,
        default=settings.MESSAGING_CONFIG["DEFAULT_PAGE_SIZE"],
    )


class ConversationSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    chat_id = serializers.UUIDField(allow_null=True)
    organization_id = serializers.UUIDField()
    organization_name = serializers.CharField()
    first_name = serializers.CharField(allow_blank=True)
    last_name = serializers.CharField(allow_blank=True)
    email = serializers.CharField()
    avatar = serializers.CharField(allow_null=True)
    last_message_content = serializers.CharField(allow_null=True, allow_blank=True)
    last_message_at = serializers.DateTimeField(allow_null=True)
    program_assignment_id = serializers.UUIDField(allow_null=True)
    program_name = serializers.CharField(allow_null=True)
    unread_count = serializers.IntegerField()
