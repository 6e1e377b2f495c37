# FILE: medvanta/backend/organizations/api/views.py

"""
ORGANIZATION API VIEWS

Organizations, memberships, teams and the team board move.
"""

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.permissions import IsClinicAdmin, IsSuperAdmin
from organizations.services.organization_service import OrganizationService
from organizations.services.team_service import TeamService
from organizations.api.serializers import (
    OrganizationSerializer,
    OrganizationMemberSerializer,
    AddOrganizationMembersSerializer,
    TeamSerializer,
    TeamWriteSerializer,
    TeamUpdateSerializer,
    AddTeamMembersSerializer,
    AssignToTeamSerializer,
    SuperAdminSerializer,
)


class OrganizationListView(APIView):
    """
    GET: List organizations with member counts
    POST: Create organization (super admins)
    """

    permission_classes = [IsClinicAdmin]

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsSuperAdmin()]
        return super().get_permissions()

    @extend_schema(
        summary="List organizations",
        parameters=[
            OpenApiParameter(name="include_inactive", type=bool, description="Include inactive organizations"),
        ],
        responses={200: OrganizationSerializer(many=True)}
    )
    def get(self, request):
        include_inactive = request.query_params.get("include_inactive", "").lower() == "true"
        organizations = OrganizationService().list_organizations(include_inactive=include_inactive)
        return Response(OrganizationSerializer(organizations, many=True).data)

    @extend_schema(
        summary="Create organization",
        request=OrganizationSerializer,
        responses={201: OrganizationSerializer}
    )
    def post(self, request):
        serializer = OrganizationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        organization = OrganizationService().create_organization(**serializer.validated_data)
        return Response(OrganizationSerializer(organization).data, status=status.HTTP_201_CREATED)


class OrganizationDetailView(APIView):
    """
    GET / PATCH / DELETE a single organization
    """

    permission_classes = [IsClinicAdmin]

    def get_permissions(self):
        if self.request.method == "DELETE":
            return [IsSuperAdmin()]
        return super().get_permissions()

    @extend_schema(summary="Get organization", responses={200: OrganizationSerializer})
    def get(self, request, pk):
        organization = OrganizationService().get_organization(pk)
        return Response(OrganizationSerializer(organization).data)

    @extend_schema(
        summary="Update organization",
        request=OrganizationSerializer,
        responses={200: OrganizationSerializer}
    )
    def patch(self, request, pk):
        service = OrganizationService()
        organization = service.get_organization(pk)
        serializer = OrganizationSerializer(organization, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        organization = service.update_organization(pk, **serializer.validated_data)
        return Response(OrganizationSerializer(organization).data)

    @extend_schema(summary="Delete organization", responses={204: None})
    def delete(self, request, pk):
        OrganizationService().delete_organization(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class OrganizationMembersView(APIView):
    """
    GET: List active members
    POST: Add members with a role
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="List organization members", responses={200: OrganizationMemberSerializer(many=True)})
    def get(self, request, pk):
        members = OrganizationService().list_members(pk)
        return Response(OrganizationMemberSerializer(members, many=True).data)

    @extend_schema(
        summary="Add organization members",
        request=AddOrganizationMembersSerializer,
        responses={201: OrganizationMemberSerializer(many=True)}
    )
    def post(self, request, pk):
        serializer = AddOrganizationMembersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        memberships = OrganizationService().add_members(
            organization_id=pk,
            user_ids=serializer.validated_data["user_ids"],
            role=serializer.validated_data["role"],
        )
        return Response(
            OrganizationMemberSerializer(memberships, many=True).data,
            status=status.HTTP_201_CREATED
        )


class OrganizationMemberDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Remove organization member", responses={204: None})
    def delete(self, request, pk, user_id):
        OrganizationService().remove_member(pk, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SuperAdminView(APIView):
    """
    POST: Make a user super admin
    """

    permission_classes = [IsSuperAdmin]

    @extend_schema(
        summary="Make super admin",
        request=SuperAdminSerializer,
        responses={201: OrganizationMemberSerializer}
    )
    def post(self, request):
        serializer = SuperAdminSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        membership = OrganizationService().make_super_admin(serializer.validated_data["user_id"])
        return Response(OrganizationMemberSerializer(membership).data, status=status.HTTP_201_CREATED)


class SuperAdminDetailView(APIView):
    permission_classes = [IsSuperAdmin]

    @extend_schema(summary="Revoke super admin", responses={204: None})
    def delete(self, request, user_id):
        OrganizationService().revoke_super_admin(user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# TEAMS
# =============================================================================

class TeamListView(APIView):
    """
    GET: Teams of an organization with members
    POST: Create team
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="List teams", responses={200: TeamSerializer(many=True)})
    def get(self, request, pk):
        teams = TeamService().list_teams(pk)
        return Response(TeamSerializer(teams, many=True).data)

    @extend_schema(summary="Create team", request=TeamWriteSerializer, responses={201: TeamSerializer})
    def post(self, request, pk):
        serializer = TeamWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = TeamService().create_team(organization_id=pk, **serializer.validated_data)
        return Response(TeamSerializer(team).data, status=status.HTTP_201_CREATED)


class TeamDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get team", responses={200: TeamSerializer})
    def get(self, request, pk):
        return Response(TeamSerializer(TeamService().get_team(pk)).data)

    @extend_schema(summary="Update team", request=TeamUpdateSerializer, responses={200: TeamSerializer})
    def patch(self, request, pk):
        serializer = TeamUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = TeamService().update_team(pk, **serializer.validated_data)
        return Response(TeamSerializer(team).data)

    @extend_schema(summary="Delete team", responses={204: None})
    def delete(self, request, pk):
        TeamService().delete_team(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TeamMembersView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Add team members", request=AddTeamMembersSerializer, responses={201: TeamSerializer})
    def post(self, request, pk):
        serializer = AddTeamMembersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = TeamService()
        service.add_members(pk, serializer.validated_data["user_ids"])
        return Response(TeamSerializer(service.get_team(pk)).data, status=status.HTTP_201_CREATED)


class TeamMemberDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Remove team member", responses={204: None})
    def delete(self, request, pk, user_id):
        TeamService().remove_member(pk, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AssignToTeamView(APIView):
    """
    POST: Move a patient between teams (board drop target)
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Assign patient to team",
        request=AssignToTeamSerializer,
        responses={200: {"type": "object", "properties": {"success": {"type": "boolean"}}}}
    )
    def post(self, request):
        serializer = AssignToTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        membership = TeamService().assign_patient_to_team(
            user_id=data["user_id"],
            target_team_id=data["target_team_id"],
            source_team_id=data["source_team_id"],
        )
        return Response({
            "success": True,
            "team_id": str(membership.team_id) if membership else None,
        })
