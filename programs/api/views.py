# FILE: medvanta/backend/programs/api/views.py

"""
PROGRAM API VIEWS

Provides REST API endpoints for:
- Program templates (create, edit, image)
- Template assignments (list, clone, assign to patient, delete)
- Workout schedules and exercise groups
- Patient overrides and progress tracking
"""

from rest_framework import status
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.permissions import IsClinicAdmin
from programs.services.assignment_service import ProgramAssignmentService
from programs.services.schedule_service import WorkoutScheduleService
from programs.api.serializers import (
    ProgramTemplateSerializer,
    ProgramTemplateCreateSerializer,
    ProgramTemplateUpdateSerializer,
    TemplateImageSerializer,
    WorkoutScheduleSerializer,
    WorkoutScheduleWriteSerializer,
    ExerciseGroupSerializer,
    ExerciseGroupWriteSerializer,
    ProgramAssignmentSerializer,
    TemplateAssignmentListRequestSerializer,
    PaginatedAssignmentsSerializer,
    AssignToUserSerializer,
    ReplaceScheduleSerializer,
    ReplaceScheduleResultSerializer,
    AttachScheduleSerializer,
    PatientOverrideSerializer,
    RecordProgressSerializer,
    ProgressSummarySerializer,
)


# =============================================================================
# PROGRAM TEMPLATES
# =============================================================================

class ProgramTemplateListView(APIView):
    """
    POST: Create a program template and its template assignment
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Create program template",
        request=ProgramTemplateCreateSerializer,
        responses={201: ProgramAssignmentSerializer}
    )
    def post(self, request):
        serializer = ProgramTemplateCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = ProgramAssignmentService().create_program_template(**serializer.validated_data)
        return Response(ProgramAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class ProgramTemplateDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get program template", responses={200: ProgramTemplateSerializer})
    def get(self, request, pk):
        template = ProgramAssignmentService().get_template(pk)
        return Response(ProgramTemplateSerializer(template).data)

    @extend_schema(
        summary="Update program template",
        request=ProgramTemplateUpdateSerializer,
        responses={200: ProgramTemplateSerializer}
    )
    def patch(self, request, pk):
        serializer = ProgramTemplateUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        template = ProgramAssignmentService().update_program_template(pk, **serializer.validated_data)
        return Response(ProgramTemplateSerializer(template).data)


class ProgramTemplateImageView(APIView):
    """
    POST: Upload template image (multipart)
    DELETE: Remove template image
    """

    permission_classes = [IsClinicAdmin]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        summary="Upload program image",
        request={"multipart/form-data": TemplateImageSerializer},
        responses={200: ProgramTemplateSerializer}
    )
    def post(self, request, pk):
        serializer = TemplateImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        template = ProgramAssignmentService().set_template_image(pk, serializer.validated_data["image"])
        return Response(ProgramTemplateSerializer(template).data)

    @extend_schema(summary="Remove program image", responses={200: ProgramTemplateSerializer})
    def delete(self, request, pk):
        template = ProgramAssignmentService().clear_template_image(pk)
        return Response(ProgramTemplateSerializer(template).data)


# =============================================================================
# ASSIGNMENTS
# =============================================================================

class AssignmentListView(APIView):
    """
    GET: Paginated template assignments (program builder / assign dialog)
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="List template assignments",
        parameters=[
            OpenApiParameter(name="search", type=str, description="Match on program name"),
            OpenApiParameter(name="weeks", type=int, description="Program length filter"),
            OpenApiParameter(name="show_assigned", type=bool, description="Include patients' active assignments"),
            OpenApiParameter(name="organization_id", type=str, description="Organization filter"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Results per page (default: 16)"),
        ],
        responses={200: PaginatedAssignmentsSerializer}
    )
    def get(self, request):
        serializer = TemplateAssignmentListRequestSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        result = ProgramAssignmentService().list_template_assignments(**serializer.validated_data)
        return Response(PaginatedAssignmentsSerializer(result).data)


class AssignmentDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get assignment", responses={200: ProgramAssignmentSerializer})
    def get(self, request, pk):
        assignment = ProgramAssignmentService().get_assignment(pk)
        return Response(ProgramAssignmentSerializer(assignment).data)

    @extend_schema(summary="Delete assignment", responses={204: None})
    def delete(self, request, pk):
        ProgramAssignmentService().delete_assignment(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AssignmentCloneView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Clone template assignment", request=None, responses={201: ProgramAssignmentSerializer})
    def post(self, request, pk):
        clone = ProgramAssignmentService().clone_template_assignment(pk)
        return Response(ProgramAssignmentSerializer(clone).data, status=status.HTTP_201_CREATED)


class AssignToUserView(APIView):
    """
    POST: Start a patient on the program of a template assignment
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Assign program to patient",
        request=AssignToUserSerializer,
        responses={201: ProgramAssignmentSerializer, 409: None}
    )
    def post(self, request, pk):
        serializer = AssignToUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = ProgramAssignmentService().assign_to_user(
            template_assignment_id=pk,
            user_id=serializer.validated_data["user_id"],
            start_date=serializer.validated_data["start_date"],
        )
        return Response(ProgramAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class AssignmentCompleteView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Complete assignment", request=None, responses={200: ProgramAssignmentSerializer})
    def post(self, request, pk):
        assignment = ProgramAssignmentService().complete_assignment(pk)
        return Response(ProgramAssignmentSerializer(assignment).data)


class AssignmentScheduleView(APIView):
    """
    GET: Effective schedule of an assignment, resolved for display
    PUT: Replace the schedule of a template assignment
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get resolved assignment schedule", responses={200: {"type": "array"}})
    def get(self, request, pk):
        assignment = ProgramAssignmentService().get_assignment(pk)
        service = WorkoutScheduleService()
        return Response(service.resolve_schedule(service.effective_schedule(assignment)))

    @extend_schema(
        summary="Replace template schedule",
        request=ReplaceScheduleSerializer,
        responses={200: ReplaceScheduleResultSerializer}
    )
    def put(self, request, pk):
        serializer = ReplaceScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = WorkoutScheduleService().replace_template_schedule(
            assignment_id=pk,
            raw_schedule=serializer.validated_data["schedule"],
            update_derived=serializer.validated_data["update_derived"],
            notes=serializer.validated_data["notes"],
        )
        return Response(ReplaceScheduleResultSerializer(result).data)


class AttachScheduleView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Attach schedule when missing",
        request=AttachScheduleSerializer,
        responses={200: ProgramAssignmentSerializer}
    )
    def post(self, request, pk):
        serializer = AttachScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = WorkoutScheduleService().attach_schedule_if_missing(
            pk, serializer.validated_data["schedule_id"]
        )
        return Response(ProgramAssignmentSerializer(assignment).data)


class PatientOverrideView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Set or clear patient override",
        request=PatientOverrideSerializer,
        responses={200: ProgramAssignmentSerializer}
    )
    def put(self, request, pk):
        serializer = PatientOverrideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = WorkoutScheduleService().set_patient_override(pk, serializer.validated_data["override"])
        return Response(ProgramAssignmentSerializer(assignment).data)


class AssignmentProgressView(APIView):
    """
    GET: Progress summary (current day, completion, compliance, calendar)
    POST: Record set progress for one day
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get assignment progress", responses={200: ProgressSummarySerializer})
    def get(self, request, pk):
        service = ProgramAssignmentService()
        summary = service.progress_summary(service.get_assignment(pk))
        return Response(ProgressSummarySerializer(summary).data)

    @extend_schema(
        summary="Record day progress",
        request=RecordProgressSerializer,
        responses={200: ProgressSummarySerializer}
    )
    def post(self, request, pk):
        serializer = RecordProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = ProgramAssignmentService()
        assignment = service.record_day_progress(
            assignment_id=pk,
            week_index=serializer.validated_data["week"],
            day_index=serializer.validated_data["day"],
            current_set=serializer.validated_data["current_set"],
            total_sets=serializer.validated_data["total_sets"],
        )
        return Response(ProgressSummarySerializer(service.progress_summary(assignment)).data)


# =============================================================================
# SCHEDULES AND GROUPS
# =============================================================================

class WorkoutScheduleListView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Upsert workout schedule",
        request=WorkoutScheduleWriteSerializer,
        responses={200: WorkoutScheduleSerializer}
    )
    def post(self, request):
        serializer = WorkoutScheduleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        schedule = WorkoutScheduleService().upsert_schedule(
            serializer.validated_data["schedule"],
            notes=serializer.validated_data["notes"],
            is_draft=serializer.validated_data["is_draft"],
        )
        return Response(WorkoutScheduleSerializer(schedule).data)


class WorkoutScheduleDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Get workout schedule",
        parameters=[
            OpenApiParameter(name="resolve", type=bool, description="Expand items into display data"),
        ],
        responses={200: WorkoutScheduleSerializer}
    )
    def get(self, request, pk):
        service = WorkoutScheduleService()
        schedule = service.get_schedule(pk)
        data = WorkoutScheduleSerializer(schedule).data
        if request.query_params.get("resolve", "").lower() == "true":
            data["resolved"] = service.resolve_schedule(schedule.schedule)
        return Response(data)


class ExerciseGroupListView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Upsert exercise group",
        request=ExerciseGroupWriteSerializer,
        responses={200: ExerciseGroupSerializer}
    )
    def post(self, request):
        serializer = ExerciseGroupWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = WorkoutScheduleService().upsert_group(**serializer.validated_data)
        return Response(ExerciseGroupSerializer(group).data)


class ExerciseGroupDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get exercise group", responses={200: ExerciseGroupSerializer})
    def get(self, request, pk):
        group = WorkoutScheduleService().get_group(pk)
        return Response(ExerciseGroupSerializer(group).data)
