# FILE: medvanta/backend/programs/admin.py

from django.contrib import admin
from django.db.models import Count, Q
from .models import ProgramTemplate, ExerciseGroup, WorkoutSchedule, ProgramAssignment
from .completion import overall_completion


@admin.register(ProgramTemplate)
class ProgramTemplateAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'name',
        'weeks',
        'organization',
        'active',
        'active_assignments',
        'updated_at',
    ]
    list_filter = ['active', 'weeks', 'organization']
    search_fields = ['name', 'description']
    readonly_fields = ['id', 'created_at', 'updated_at']
    ordering = ['-updated_at']

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'organization', 'name', 'description', 'image')
        }),
        ('Program', {
            'fields': ('weeks', 'goals', 'notes', 'active')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.annotate(
            active_assignments_count=Count('assignments', filter=Q(assignments__status='active')),
        )

    @admin.display(description='Active Patients', ordering='active_assignments_count')
    def active_assignments(self, obj):
        return obj.active_assignments_count or 0


@admin.register(ExerciseGroup)
class ExerciseGroupAdmin(admin.ModelAdmin):
    list_display = ['id_short', 'title', 'is_superset', 'template_count', 'updated_at']
    list_filter = ['is_superset']
    search_fields = ['title']
    readonly_fields = ['id', 'group_hash', 'created_at', 'updated_at']

    @admin.display(description='ID')
    def id_short(self, obj):
        return str(obj.id)[:8]

    @admin.display(description='Exercises')
    def template_count(self, obj):
        return len(obj.exercise_template_ids or [])


@admin.register(WorkoutSchedule)
class WorkoutScheduleAdmin(admin.ModelAdmin):
    list_display = ['id_short', 'week_count', 'is_draft', 'updated_at']
    list_filter = ['is_draft']
    readonly_fields = ['id', 'schedule_hash', 'created_at', 'updated_at']

    @admin.display(description='ID')
    def id_short(self, obj):
        return str(obj.id)[:8]

    @admin.display(description='Weeks')
    def week_count(self, obj):
        return len(obj.schedule or [])


@admin.register(ProgramAssignment)
class ProgramAssignmentAdmin(admin.ModelAdmin):
    list_display = [
        'id_short',
        'program_template',
        'user',
        'status',
        'start_date',
        'end_date',
        'progress_display',
    ]
    list_filter = ['status', 'start_date']
    search_fields = ['program_template__name', 'user__email', 'user__first_name', 'user__last_name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    list_select_related = ['program_template', 'user']
    raw_id_fields = ['user', 'workout_schedule']
    ordering = ['-created_at']

    fieldsets = (
        ('Assignment', {
            'fields': ('id', 'program_template', 'workout_schedule', 'user', 'organization', 'status')
        }),
        ('Dates', {
            'fields': ('start_date', 'end_date')
        }),
        ('Tracking', {
            'fields': ('completion', 'patient_override')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    @admin.display(description='ID')
    def id_short(self, obj):
        return str(obj.id)[:8]

    @admin.display(description='Calendar Progress')
    def progress_display(self, obj):
        if obj.status != ProgramAssignment.Status.ACTIVE:
            return "-"
        return f"{overall_completion(obj.start_date, obj.program_template.weeks)}%"
