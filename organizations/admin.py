# FILE: medvanta/backend/organizations/admin.py

from django.contrib import admin
from .models import Organization, OrganizationMember, Team, TeamMembership


class OrganizationMemberInline(admin.TabularInline):
    model = OrganizationMember
    extra = 0
    fields = ('user', 'role', 'is_active')
    raw_id_fields = ('user',)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'is_active', 'is_super_admin', 'members_count', 'created_at']
    list_filter = ['is_active', 'is_super_admin']
    search_fields = ['name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [OrganizationMemberInline]

    @admin.display(description='Members')
    def members_count(self, obj):
        return obj.members.filter(is_active=True).count()


@admin.register(OrganizationMember)
class OrganizationMemberAdmin(admin.ModelAdmin):
    list_display = ['user', 'organization', 'role', 'is_active', 'created_at']
    list_filter = ['role', 'is_active']
    search_fields = ['user__email', 'organization__name']
    raw_id_fields = ['user']


class TeamMembershipInline(admin.TabularInline):
    model = TeamMembership
    extra = 0
    raw_id_fields = ('user',)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'member_count', 'updated_at']
    list_filter = ['organization']
    search_fields = ['name', 'organization__name']
    inlines = [TeamMembershipInline]

    @admin.display(description='Members')
    def member_count(self, obj):
        return obj.memberships.count()
