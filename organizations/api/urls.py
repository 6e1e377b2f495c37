# FILE: medvanta/backend/organizations/api/urls.py

from django.urls import path
from organizations.api.views import (
    OrganizationListView,
    OrganizationDetailView,
    OrganizationMembersView,
    OrganizationMemberDetailView,
    SuperAdminView,
    SuperAdminDetailView,
    TeamListView,
    TeamDetailView,
    TeamMembersView,
    TeamMemberDetailView,
    AssignToTeamView,
)

app_name = "organizations"

urlpatterns = [
    # Organizations
    path("", OrganizationListView.as_view(), name="organization-list"),
    path("<uuid:pk>/", OrganizationDetailView.as_view(), name="organization-detail"),
    path("<uuid:pk>/members/", OrganizationMembersView.as_view(), name="organization-members"),
    path(
        "<uuid:pk>/members/<uuid:user_id>/",
        OrganizationMemberDetailView.as_view(),
        name="organization-member-detail"
    ),

    # Super admins
    path("super-admins/", SuperAdminView.as_view(), name="super-admin"),
    path("super-admins/<uuid:user_id>/", SuperAdminDetailView.as_view(), name="super-admin-detail"),

    # Teams
    path("<uuid:pk>/teams/", TeamListView.as_view(), name="team-list"),
    path("teams/assign/", AssignToTeamView.as_view(), name="team-assign"),
    path("teams/<uuid:pk>/", TeamDetailView.as_view(), name="team-detail"),
    path("teams/<uuid:pk>/members/", TeamMembersView.as_view(), name="team-members"),
    path(
        "teams/<uuid:pk>/members/<uuid:user_id>/",
        TeamMemberDetailView.as_view(),
        name="team-member-detail"
    ),
]
