# FILE: medvanta/backend/users/api/views.py

"""
USER API VIEWS

Provides REST API endpoints for:
- Users table listing with program stats
- Profile read / edit / delete and quick add
- Onboarding overrides
- Bulk member import (validate, then import)
- Patient profile page (appointments, pledge, points, intake survey)
"""

from rest_framework import status
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.permissions import IsClinicAdmin
from users.services.profile_service import ProfileService
from users.services.onboarding_service import OnboardingService
from users.services.import_service import MemberImportService
from users.services.patient_profile_service import PatientProfileService
from users.api.serializers import (
    UserProfileSerializer,
    UserWithStatsSerializer,
    UserListRequestSerializer,
    UserUpdateSerializer,
    QuickAddSerializer,
    OnboardingOverrideSerializer,
    OnboardingResultSerializer,
    ImportUploadSerializer,
    ImportValidationSerializer,
    ImportResultSerializer,
    PatientProfileSerializer,
    AppointmentSerializer,
)


class UserListView(APIView):
    """
    GET: Users with program stats
    POST: Quick add a member
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="List users with stats",
        parameters=[
            OpenApiParameter(name="organization_id", type=str, description="Active members of this organization"),
            OpenApiParameter(name="team_id", type=str, description="Members of this team"),
            OpenApiParameter(name="journey_phase", type=str, description="discovery, onboarding, scaffolding"),
            OpenApiParameter(name="status", type=str, description="pending, invited, active, assigned"),
            OpenApiParameter(name="search", type=str, description="Match on name or email"),
        ],
        responses={200: UserWithStatsSerializer(many=True)}
    )
    def get(self, request):
        serializer = UserListRequestSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        users = ProfileService().list_with_stats(
            organization_id=data["organization_id"],
            team_id=data["team_id"],
            journey_phase=data["journey_phase"] or None,
            status=data["status"] or None,
            search=data["search"],
        )
        return Response(UserWithStatsSerializer(users, many=True).data)

    @extend_schema(summary="Quick add user", request=QuickAddSerializer, responses={201: UserProfileSerializer})
    def post(self, request):
        serializer = QuickAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = ProfileService().quick_add(**serializer.validated_data)
        return Response(UserProfileSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get user", responses={200: UserProfileSerializer})
    def get(self, request, pk):
        user = ProfileService().get_user(pk)
        return Response(UserProfileSerializer(user).data)

    @extend_schema(summary="Update user", request=UserUpdateSerializer, responses={200: UserProfileSerializer})
    def patch(self, request, pk):
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = ProfileService().update_user(pk, **serializer.validated_data)
        return Response(UserProfileSerializer(user).data)

    @extend_schema(summary="Delete user", responses={204: None})
    def delete(self, request, pk):
        ProfileService().delete_user(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Current user profile", responses={200: UserProfileSerializer})
    def get(self, request):
        return Response(UserProfileSerializer(request.user).data)


class OnboardingOverrideView(APIView):
    """
    POST: Set onboarding state for one or many users
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Override onboarding state",
        request=OnboardingOverrideSerializer,
        responses={200: OnboardingResultSerializer}
    )
    def post(self, request):
        serializer = OnboardingOverrideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = OnboardingService().set_onboarding_state(
            user_ids=serializer.validated_data["user_ids"],
            target=serializer.validated_data["target"],
        )
        return Response(OnboardingResultSerializer(result).data)


class ImportValidateView(APIView):
    """
    POST: Validate a member spreadsheet without creating anyone
    """

    permission_classes = [IsClinicAdmin]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        summary="Validate member import",
        request={"multipart/form-data": ImportUploadSerializer},
        responses={200: ImportValidationSerializer}
    )
    def post(self, request):
        serializer = ImportUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = MemberImportService().validate_file(serializer.validated_data["file"])
        return Response(ImportValidationSerializer(result).data)


class ImportView(APIView):
    """
    POST: Import a member spreadsheet
    """

    permission_classes = [IsClinicAdmin]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        summary="Import members",
        request={"multipart/form-data": ImportUploadSerializer},
        responses={200: ImportResultSerializer}
    )
    def post(self, request):
        serializer = ImportUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = MemberImportService().import_file(serializer.validated_data["file"])
        return Response(ImportResultSerializer(result).data)


class PatientProfileView(APIView):
    """
    GET: Everything the patient profile page shows besides the program
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Patient profile", responses={200: PatientProfileSerializer})
    def get(self, request, pk):
        profile = PatientProfileService().get_profile(pk)
        return Response(PatientProfileSerializer(profile).data)


class PatientAppointmentsView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Patient appointments", responses={200: AppointmentSerializer(many=True)})
    def get(self, request, pk):
        service = PatientProfileService()
        user = service.get_user(pk)
        return Response(AppointmentSerializer(service.appointments(user.id), many=True).data)
