# FILE: medvanta/backend/dashboard/api/views.py

"""
DASHBOARD API VIEWS

Provides REST API endpoints for:
- Dashboard summary (status counts, compliance, attention list)
- User lists behind each dashboard card
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from core.exceptions import NotFoundException
from core.permissions import IsClinicAdmin
from dashboard.services.dashboard_service import DashboardService
from dashboard.api.serializers import (
    DashboardSummarySerializer,
    DashboardUserSerializer,
    UserStatListSerializer,
)


class DashboardSummaryView(APIView):
    permission_classes = [IsClinicAdmin]

    @extend_schema(
        summary="Dashboard summary",
        parameters=[
            OpenApiParameter(name="refresh", type=bool, description="Recompute instead of using cached figures"),
        ],
        responses={200: DashboardSummarySerializer}
    )
    def get(self, request):
        if request.query_params.get("refresh", "").lower() == "true":
            DashboardService.invalidate()

        service = DashboardService()
        summary = {
            "status_counts": service.status_counts(),
            "aggregate": service.aggregate_compliance(),
            "needing_attention": service.users_needing_attention(),
            "program_completed": service.users_program_completed(),
        }
        return Response(DashboardSummarySerializer(summary).data)


class DashboardUsersView(APIView):
    """
    GET: Users behind a dashboard card

    Segments: pending, invited, active, no-program, in-program,
    needing-attention, program-completed
    """

    permission_classes = [IsClinicAdmin]

    STATUS_SEGMENTS = ("pending", "invited", "active")

    @extend_schema(summary="Dashboard user list", responses={200: DashboardUserSerializer(many=True)})
    def get(self, request, segment):
        service = DashboardService()

        if segment in self.STATUS_SEGMENTS:
            return Response(DashboardUserSerializer(service.users_by_status(segment), many=True).data)
        if segment == "no-program":
            return Response(DashboardUserSerializer(service.users_with_no_program(), many=True).data)
        if segment == "in-program":
            return Response(DashboardUserSerializer(service.users_in_program(), many=True).data)
        if segment == "needing-attention":
            return Response(UserStatListSerializer(service.users_needing_attention()).data)
        if segment == "program-completed":
            return Response(UserStatListSerializer(service.users_program_completed()).data)

        raise NotFoundException(f"Unknown dashboard segment '{segment}'.")
