# FILE: medvanta/backend/messaging/models.py

import uuid
from django.db import models
from django.conf import settings


class Chat(models.Model):
    """
    Conversation thread between clinic staff and a patient, team or organization.

    Patient chats (target_type 'user') carry no organization so a patient
    keeps a single thread across organizations.
    """

    class TargetType(models.TextChoices):
        USER = 'user', 'User'
        TEAM = 'team', 'Team'
        ORGANIZATION = 'organization', 'Organization'

    class Meta:
        db_table = 'messaging_chat'
        ordering = ['-last_updated_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user'],
                condition=models.Q(target_type='user', deleted_at__isnull=True),
                name='unique_live_user_chat'
            )
        ]
        indexes = [
            models.Index(fields=['user', 'target_type']),
            models.Index(fields=['last_updated_at']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, blank=True)
    target_type = models.CharField(max_length=20, choices=TargetType.choices, default=TargetType.USER)

    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='chats'
    )
    team = models.ForeignKey(
        'organizations.Team',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='chats'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='chats'
    )

    last_updated_at = models.DateTimeField(null=True, blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name or self.id} ({self.target_type})"


class Message(models.Model):
    """
    Single chat message.

    attachments holds one {"url", "type"} object (or a list of them);
    last_seen_at is stamped once when staff read a patient message.
    """

    class MessageType(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        USER = 'user', 'User'
        SYSTEM = 'system', 'System'

    class Meta:
        db_table = 'messaging_message'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['chat', 'created_at']),
            models.Index(fields=['chat', 'message_type']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name='messages'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='messages'
    )

    content = models.TextField(blank=True)
    attachments = models.JSONField(null=True, blank=True)
    message_type = models.CharField(max_length=20, choices=MessageType.choices, default=MessageType.ADMIN)
    metadata = models.JSONField(default=dict, blank=True)
    last_seen_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.message_type} message in {self.chat_id}"
