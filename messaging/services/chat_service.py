# FILE: medvanta/backend/messaging/services/chat_service.py

"""
CHAT SERVICE

Handles:
1. One chat per patient (created on first contact)
2. Message history with an `after` cursor for client polling
3. Sending admin messages with an optional attachment
4. Read receipts on patient messages
5. The admin inbox: patients of the organizations an admin manages
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import MessagingException, NotFoundException, PermissionDeniedException
from core.permissions import managed_organization_ids
from messaging.models import Chat, Message
from organizations.models import OrganizationMember
from programs.models import ProgramAssignment

logger = logging.getLogger(__name__)

User = get_user_model()

PATIENT_ROLES = (OrganizationMember.Role.PATIENT, OrganizationMember.Role.MEMBER)


@dataclass
class ConversationItem:
    """One row of the admin inbox"""
    user_id: uuid.UUID
    chat_id: Optional[uuid.UUID]
    organization_id: uuid.UUID
    organization_name: str
    first_name: str
    last_name: str
    email: str
    avatar: Optional[str]
    last_message_content: Optional[str]
    last_message_at: Optional[datetime]
    program_assignment_id: Optional[uuid.UUID]
    program_name: Optional[str]
    unread_count: int = 0


def _first_attachment(attachments):
    if isinstance(attachments, list):
        return attachments[0] if attachments else None
    return attachments


def message_preview(message: Message) -> str:
    """Message text for list previews; attachments-only messages get a placeholder."""
    if message.content and message.content.strip():
        return message.content
    attachment = _first_attachment(message.attachments)
    if isinstance(attachment, dict) and attachment.get("type"):
        return f"New {attachment['type']} attachment"
    return ""


class ChatService:
    """
    Service for patient chats.
    """

    def __init__(self):
        self.config = settings.MESSAGING_CONFIG

    # =========================================================================
    # CHATS
    # =========================================================================

    @transaction.atomic
    def get_or_create_user_chat(self, user_id: uuid.UUID, admin=None) -> Chat:
        """
        Return the patient's chat, creating it on first use.

        Soft-deleted chats are ignored, so a deleted thread is replaced
        by a fresh one. When admin is given, the patient must belong to an
        organization they manage.
        """
        try:
            user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            raise NotFoundException("User not found.")
        if admin is not None:
            self.ensure_can_message(admin, user.id)

        chat = Chat.objects.filter(
            user=user,
            target_type=Chat.TargetType.USER,
            deleted_at__isnull=True,
        ).first()
        if chat:
            return chat

        name = f"{user.first_name or 'User'} {user.last_name or ''}".strip()
        try:
            with transaction.atomic():
                chat = Chat.objects.create(
                    user=user,
                    target_type=Chat.TargetType.USER,
                    organization=None,
                    name=name,
                )
        except IntegrityError:
            return Chat.objects.get(
                user=user,
                target_type=Chat.TargetType.USER,
                deleted_at__isnull=True,
            )
        logger.info(f"Chat {chat.id} created for user {user.id}")
        return chat

    def ensure_can_message(self, admin, user_id: uuid.UUID) -> None:
        org_ids = managed_organization_ids(admin)
        if org_ids is None:
            return
        if not OrganizationMember.objects.filter(
            user_id=user_id,
            organization_id__in=org_ids,
            role__in=PATIENT_ROLES,
            is_active=True,
        ).exists():
            logger.warning(f"User {admin.id} refused chat with user {user_id} outside their organizations")
            raise PermissionDeniedException("This patient is not in an organization you manage.")

    def get_chat(self, chat_id: uuid.UUID) -> Chat:
        try:
            return Chat.objects.get(id=chat_id, deleted_at__isnull=True)
        except Chat.DoesNotExist:
            raise NotFoundException("Chat not found.")

    def delete_chat(self, chat_id: uuid.UUID) -> None:
        chat = self.get_chat(chat_id)
        chat.deleted_at = timezone.now()
        chat.save(update_fields=["deleted_at", "updated_at"])
        logger.info(f"Chat {chat.id} deleted")

    # =========================================================================
    # MESSAGES
    # =========================================================================

    def list_messages(self, chat_id: uuid.UUID, after: Optional[datetime] = None, limit: Optional[int] = None):
        """
        Visible messages of a chat, oldest first.

        Args:
            chat_id: Chat to read
            after: Only messages created after this timestamp (polling cursor)
            limit: Maximum number of messages; without a cursor the latest
                messages are returned
        """
        chat = self.get_chat(chat_id)
        queryset = chat.messages.exclude(
            message_type=Message.MessageType.SYSTEM
        ).select_related("user").order_by("created_at", "id")
        if after is not None:
            queryset = queryset.filter(created_at__gt=after)
        elif limit:
            latest = list(queryset.reverse()[:limit])
            return latest[::-1]
        if limit:
            queryset = queryset[:limit]
        return list(queryset)

    def _validate_attachment(self, attachment) -> Optional[Dict]:
        if not attachment:
            return None
        if not isinstance(attachment, dict) or not attachment.get("url"):
            raise MessagingException("Attachment must include a url.")
        if attachment.get("type") not in self.config["ATTACHMENT_TYPES"]:
            raise MessagingException(
                f"Attachment type must be one of: {', '.join(self.config['ATTACHMENT_TYPES'])}."
            )
        return {"url": attachment["url"], "type": attachment["type"]}

    @transaction.atomic
    def send_message(
        self,
        chat_id: uuid.UUID,
        sender,
        content: str = "",
        attachment: Optional[Dict] = None,
        message_type: str = Message.MessageType.ADMIN,
    ) -> Message:
        """
        Post a message to a chat.

        Args:
            chat_id: Target chat
            sender: User sending the message
            content: Text (trimmed); may be empty when an attachment is given
            attachment: Optional {"url", "type"} with type video, image or document
            message_type: admin, user or system

        Returns:
            The created Message
        """
        chat = self.get_chat(chat_id)
        content = (content or "").strip()
        attachment = self._validate_attachment(attachment)

        if not content and not attachment:
            raise MessagingException("Message content is required.")
        if len(content) > self.config["MAX_MESSAGE_LENGTH"]:
            raise MessagingException(
                f"Message is longer than {self.config['MAX_MESSAGE_LENGTH']} characters."
            )

        message = Message.objects.create(
            chat=chat,
            user=sender,
            content=content,
            attachments=attachment,
            message_type=message_type,
        )

        chat.last_updated_at = message.created_at
        chat.save(update_fields=["last_updated_at", "updated_at"])

        logger.info(f"Message {message.id} sent to chat {chat.id} by {getattr(sender, 'id', None)}")
        return message

    def mark_seen(self, chat_id: uuid.UUID) -> bool:
        """
        Stamp last_seen_at on the latest patient message, once.

        Returns:
            True when a message was updated
        """
        chat = self.get_chat(chat_id)
        latest = chat.messages.filter(
            message_type=Message.MessageType.USER
        ).order_by("-created_at").values_list("id", flat=True).first()
        if latest is None:
            return False

        now = timezone.now()
        updated = Message.objects.filter(id=latest, last_seen_at__isnull=True).update(
            last_seen_at=now,
            updated_at=now,
        )
        return updated > 0

    # =========================================================================
    # ADMIN INBOX
    # =========================================================================

    def _unread_counts(self, chat_ids) -> Dict[uuid.UUID, int]:
        """Patient messages newer than the latest patient message already seen."""
        rows = list(Message.objects.filter(
            chat_id__in=chat_ids,
            message_type=Message.MessageType.USER,
        ).values_list("chat_id", "created_at", "last_seen_at"))

        cutoffs = {}
        for chat_id, created_at, last_seen_at in rows:
            if last_seen_at is not None and (chat_id not in cutoffs or created_at > cutoffs[chat_id]):
                cutoffs[chat_id] = created_at

        counts = {}
        for chat_id, created_at, _ in rows:
            cutoff = cutoffs.get(chat_id)
            if cutoff is None or created_at > cutoff:
                counts[chat_id] = counts.get(chat_id, 0) + 1
        return counts

    def conversations_for_admin(self, admin) -> List[ConversationItem]:
        """
        Inbox rows for every patient in the organizations the admin manages.

        Rows are sorted by last message time, newest first, with patients
        who never wrote at the end.
        """
        org_ids = managed_organization_ids(admin)
        memberships = OrganizationMember.objects.filter(
            role__in=PATIENT_ROLES,
            is_active=True,
        ).select_related("organization", "user").order_by("-created_at")
        if org_ids is not None:
            if not org_ids:
                return []
            memberships = memberships.filter(organization_id__in=org_ids)

        # A patient in several organizations is listed once, under the latest membership
        by_user = {}
        for membership in memberships:
            by_user.setdefault(membership.user_id, membership)
        if not by_user:
            return []

        chats = {
            chat.user_id: chat
            for chat in Chat.objects.filter(
                user_id__in=by_user.keys(),
                target_type=Chat.TargetType.USER,
                deleted_at__isnull=True,
            )
        }
        chat_ids = [chat.id for chat in chats.values()]
        unread = self._unread_counts(chat_ids) if chat_ids else {}

        last_messages = {}
        for chat_id in chat_ids:
            message = Message.objects.filter(chat_id=chat_id).exclude(
                message_type=Message.MessageType.SYSTEM
            ).order_by("-created_at").first()
            if message:
                last_messages[chat_id] = message

        assignments = {}
        for assignment in ProgramAssignment.objects.filter(
            user_id__in=by_user.keys(),
            status=ProgramAssignment.Status.ACTIVE,
        ).select_related("program_template"):
            assignments.setdefault(assignment.user_id, assignment)

        items = []
        for user_id, membership in by_user.items():
            user = membership.user
            chat = chats.get(user_id)
            message = last_messages.get(chat.id) if chat else None
            assignment = assignments.get(user_id)
            items.append(ConversationItem(
                user_id=user_id,
                chat_id=chat.id if chat else None,
                organization_id=membership.organization_id,
                organization_name=membership.organization.name,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                avatar=user.avatar.url if user.avatar else None,
                last_message_content=message_preview(message) if message else None,
                last_message_at=message.created_at if message else None,
                program_assignment_id=assignment.id if assignment else None,
                program_name=assignment.program_template.name if assignment else None,
                unread_count=unread.get(chat.id, 0) if chat else 0,
            ))

        with_messages = sorted(
            (item for item in items if item.last_message_at),
            key=lambda item: item.last_message_at,
            reverse=True,
        )
        return with_messages + [item for item in items if not item.last_message_at]
