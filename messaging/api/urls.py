# FILE: medvanta/backend/messaging/api/urls.py

from django.urls import path

from .views import (
    ConversationListView,
    UserChatView,
    ChatDetailView,
    ChatMessagesView,
    ChatSeenView,
)

app_name = "messaging"

urlpatterns = [
    path("conversations/", ConversationListView.as_view(), name="conversation-list"),
    path("users/<uuid:user_id>/chat/", UserChatView.as_view(), name="user-chat"),
    path("chats/<uuid:pk>/", ChatDetailView.as_view(), name="chat-detail"),
    path("chats/<uuid:pk>/messages/", ChatMessagesView.as_view(), name="chat-messages"),
    path("chats/<uuid:pk>/seen/", ChatSeenView.as_view(), name="chat-seen"),
]
