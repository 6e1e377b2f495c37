# FILE: medvanta/backend/exercises/api/views.py

"""
EXERCISE API VIEWS

Provides REST API endpoints for:
- Exercise library browsing (video exercises only)
- Exercise editing
- Exercise template upsert and listing
"""

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.permissions import IsClinicAdmin
from exercises.models import Equipment
from exercises.services.library_service import ExerciseLibraryService
from exercises.services.template_service import ExerciseTemplateService
from exercises.api.serializers import (
    EquipmentSerializer,
    ExerciseSerializer,
    ExerciseUpdateSerializer,
    LibraryRequestSerializer,
    TemplateListRequestSerializer,
    ExerciseTemplateSerializer,
    ExerciseTemplateWriteSerializer,
    PaginatedExercisesSerializer,
    PaginatedTemplatesSerializer,
)


class ExerciseLibraryView(APIView):
    """
    GET: Paginated exercise library
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="List library exercises",
        parameters=[
            OpenApiParameter(name="search", type=str, description="Match on exercise name"),
            OpenApiParameter(name="type", type=str, description="Exercise type"),
            OpenApiParameter(name="video_type", type=str, description="youtube or file"),
            OpenApiParameter(name="sort_by", type=str, description="exercise_name, created_at, updated_at"),
            OpenApiParameter(name="sort_order", type=str, description="asc or desc"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Results per page (default: 20, max: 100)"),
        ],
        responses={200: PaginatedExercisesSerializer}
    )
    def get(self, request):
        serializer = LibraryRequestSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ExerciseLibraryService().list_exercises(
            search=data["search"],
            exercise_type=data["type"] or None,
            video_type=data["video_type"] or None,
            sort_by=data["sort_by"],
            sort_order=data["sort_order"],
            page=data["page"],
            page_size=data["page_size"],
        )
        return Response(PaginatedExercisesSerializer(result).data)


class ExerciseTypesView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="List exercise types", responses={200: {"type": "array", "items": {"type": "string"}}})
    def get(self, request):
        return Response(ExerciseLibraryService().list_types())


class ExerciseDetailView(APIView):
    """
    GET / PATCH a library exercise
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get exercise", responses={200: ExerciseSerializer})
    def get(self, request, pk):
        exercise = ExerciseLibraryService().get_exercise(pk)
        return Response(ExerciseSerializer(exercise).data)

    @extend_schema(summary="Update exercise", request=ExerciseUpdateSerializer, responses={200: ExerciseSerializer})
    def patch(self, request, pk):
        serializer = ExerciseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exercise = ExerciseLibraryService().update_exercise(pk, **serializer.validated_data)
        return Response(ExerciseSerializer(exercise).data)


class EquipmentListView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="List equipment", responses={200: EquipmentSerializer(many=True)})
    def get(self, request):
        return Response(EquipmentSerializer(Equipment.objects.all(), many=True).data)


class ExerciseTemplateListView(APIView):
    """
    GET: Paginated exercise templates
    POST: Upsert an exercise template (identical content returns the stored row)
    """

    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="List exercise templates",
        parameters=[
            OpenApiParameter(name="search", type=str, description="Match on exercise name"),
            OpenApiParameter(name="sort_by", type=str, description="updated_at, created_at, exercise_name"),
            OpenApiParameter(name="sort_order", type=str, description="asc or desc"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Results per page (default: 20, max: 100)"),
        ],
        responses={200: PaginatedTemplatesSerializer}
    )
    def get(self, request):
        serializer = TemplateListRequestSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        result = ExerciseTemplateService().list_templates(**serializer.validated_data)
        return Response(PaginatedTemplatesSerializer(result).data)

    @extend_schema(
        summary="Upsert exercise template",
        request=ExerciseTemplateWriteSerializer,
        responses={200: ExerciseTemplateSerializer}
    )
    def post(self, request):
        serializer = ExerciseTemplateWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        exercise_id = data.pop("exercise_id")

        template = ExerciseTemplateService().upsert_template(exercise_id, **data)
        return Response(ExerciseTemplateSerializer(template).data, status=status.HTTP_200_OK)


class ExerciseTemplateDetailView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(summary="Get exercise template", responses={200: ExerciseTemplateSerializer})
    def get(self, request, pk):
        template = ExerciseTemplateService().get_template(pk)
        return Response(ExerciseTemplateSerializer(template).data)
