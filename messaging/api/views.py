# FILE: medvanta/backend/messaging/api/views.py

"""
MESSAGING API VIEWS

Patient chats for clinic staff. Clients poll the message list with the
`after` cursor set to the newest message they hold.
"""

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.permissions import IsClinicAdmin
from messaging.services.chat_service import ChatService
from messaging.api.serializers import (
    ChatSerializer,
    MessageSerializer,
    SendMessageSerializer,
    MessageListRequestSerializer,
    ConversationSerializer,
)


class ConversationListView(APIView):
    """
    GET: Admin inbox
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="List conversations", responses={200: ConversationSerializer(many=True)})
    def get(self, request):
        items = ChatService().conversations_for_admin(request.user)
        return Response(ConversationSerializer(items, many=True).data)


class UserChatView(APIView):
    """
    POST: Get or create the chat of a patient
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Open patient chat", request=None, responses={200: ChatSerializer})
    def post(self, request, user_id):
        chat = ChatService().get_or_create_user_chat(user_id, admin=request.user)
        return Response(ChatSerializer(chat).data)


class ChatDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get chat", responses={200: ChatSerializer})
    def get(self, request, pk):
        chat = ChatService().get_chat(pk)
        return Response(ChatSerializer(chat).data)

    @extend_schema(summary="Delete chat", responses={204: None})
    def delete(self, request, pk):
        ChatService().delete_chat(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ChatMessagesView(APIView):
    """
    GET: Messages, oldest first (poll with ?after=<timestamp>)
    POST: Send a message
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="List messages",
        parameters=[
            OpenApiParameter(name="after", type=str, description="ISO timestamp cursor"),
            OpenApiParameter(name="limit", type=int, description="Maximum messages (default: 50)"),
        ],
        responses={200: MessageSerializer(many=True)}
    )
    def get(self, request, pk):
        serializer = MessageListRequestSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        messages = ChatService().list_messages(
            pk,
            after=serializer.validated_data["after"],
            limit=serializer.validated_data["limit"],
        )
        return Response(MessageSerializer(messages, many=True).data)

    @extend_schema(summary="Send message", request=SendMessageSerializer, responses={201: MessageSerializer})
    def post(self, request, pk):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attachment = serializer.validated_data["attachment"]
        message = ChatService().send_message(
            chat_id=pk,
            sender=request.user,
            content=serializer.validated_data["content"],
            attachment=dict(attachment) if attachment else None,
        )
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class ChatSeenView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Mark chat seen", request=None, responses={200: {"type": "object"}})
    def post(self, request, pk):
        updated = ChatService().mark_seen(pk)
        return Response({"success": True, "updated": updated})
