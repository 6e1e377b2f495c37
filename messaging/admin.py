# FILE: medvanta/backend/messaging/admin.py

from django.contrib import admin
from .models import Chat, Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ('message_type', 'user', 'content', 'last_seen_at', 'created_at')
    readonly_fields = ('created_at',)
    raw_id_fields = ('user',)


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ['name', 'target_type', 'user', 'last_updated_at', 'is_deleted']
    list_filter = ['target_type']
    search_fields = ['name', 'user__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    inlines = [MessageInline]

    @admin.display(boolean=True, description='Deleted')
    def is_deleted(self, obj):
        return obj.deleted_at is not None


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['chat', 'message_type', 'user', 'short_content', 'created_at', 'last_seen_at']
    list_filter = ['message_type']
    search_fields = ['content', 'chat__name']
    raw_id_fields = ['chat', 'user']

    @admin.display(description='Content')
    def short_content(self, obj):
        return (obj.content or '')[:60]
