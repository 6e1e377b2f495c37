from django.contrib import admin
from .models import (
    User,
    Appointment,
    HabitPledge,
    HpLevelThreshold,
    HpTransaction,
    EmpowermentThreshold,
    GateUnlockStep,
    IpTransaction,
    McIntakeOption,
    McIntakeSurvey,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "email",
        "full_name",
        "status",
        "journey_phase",
        "program_assigned",
        "is_active",
    )
    search_fields = ("email", "first_name", "last_name")
    list_filter = ("status", "journey_phase", "program_assigned", "is_staff", "is_active")
    readonly_fields = ("id", "date_joined", "updated_at")
    ordering = ("-date_joined",)

    fieldsets = (
        ("Profile", {
            "fields": ("id", "email", "first_name", "last_name", "phone", "description", "timezone", "avatar")
        }),
        ("Onboarding", {
            "fields": ("status", "journey_phase", "screening_completed", "intro_completed", "consultation_completed")
        }),
        ("Program", {
            "fields": ("program_assigned", "program_started", "program_due_date", "max_gate_type", "max_gate_unlocked")
        }),
        ("Access", {
            "fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")
        }),
        ("Timestamps", {
            "fields": ("date_joined", "updated_at")
        }),
    )

    @admin.display(description="Name")
    def full_name(self, obj):
        return obj.full_name or "-"


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "type", "status", "start_time", "created_at")
    list_filter = ("type", "status")
    search_fields = ("user__email", "invitee_email", "event_name")
    raw_id_fields = ("user",)


@admin.register(HabitPledge)
class HabitPledgeAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "created_at")
    search_fields = ("user__email",)
    raw_id_fields = ("user",)


@admin.register(HpLevelThreshold)
class HpLevelThresholdAdmin(admin.ModelAdmin):
    list_display = ("level", "description", "hp_range_min", "hp_required_for_next_level")
    ordering = ("level",)


@admin.register(HpTransaction)
class HpTransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "transaction_type", "points_earned", "created_at")
    list_filter = ("transaction_type",)
    search_fields = ("user__email",)
    raw_id_fields = ("user",)


@admin.register(EmpowermentThreshold)
class EmpowermentThresholdAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "base_power", "top_power")
    ordering = ("base_power",)


@admin.register(GateUnlockStep)
class GateUnlockStepAdmin(admin.ModelAdmin):
    list_display = ("type", "gate", "title")
    list_filter = ("type",)


@admin.register(IpTransaction)
class IpTransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "transaction_type", "amount", "created_at")
    list_filter = ("transaction_type",)
    search_fields = ("user__email",)
    raw_id_fields = ("user",)


@admin.register(McIntakeOption)
class McIntakeOptionAdmin(admin.ModelAdmin):
    list_display = ("id", "step", "title")
    list_filter = ("step",)


@admin.register(McIntakeSurvey)
class McIntakeSurveyAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "activity_level", "commitment_days", "created_at")
    search_fields = ("user__email",)
    raw_id_fields = ("user",)
