# FILE: medvanta/backend/exercises/admin.py

from django.contrib import admin
from .models import Equipment, Exercise, ExerciseTemplate
from .services.template_service import describe_template


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'name']
    search_fields = ['name']


@admin.register(Exercise)
class ExerciseAdmin(admin.ModelAdmin):
    list_display = ['exercise_name', 'type', 'video_type', 'has_video', 'updated_at']
    list_filter = ['video_type', 'type']
    search_fields = ['exercise_name']
    readonly_fields = ['id', 'created_at', 'updated_at']

    fieldsets = (
        ('Exercise', {
            'fields': ('id', 'exercise_name', 'type')
        }),
        ('Video', {
            'fields': ('video_type', 'video_url')
        }),
        ('Library', {
            'fields': ('library_tip', 'library_check_in_question')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    @admin.display(description='Video', boolean=True)
    def has_video(self, obj):
        return obj.has_video


@admin.register(ExerciseTemplate)
class ExerciseTemplateAdmin(admin.ModelAdmin):
    list_display = ['exercise', 'sets', 'description', 'updated_at']
    search_fields = ['exercise__exercise_name']
    readonly_fields = ['id', 'template_hash', 'created_at', 'updated_at']
    list_select_related = ['exercise']

    @admin.display(description='Prescription')
    def description(self, obj):
        return describe_template(obj)
