# FILE: medvanta/backend/dashboard/api/urls.py

from django.urls import path

from .views import DashboardSummaryView, DashboardUsersView

app_name = "dashboard"

urlpatterns = [
    path("", DashboardSummaryView.as_view(), name="summary"),
    path("users/<str:segment>/", DashboardUsersView.as_view(), name="users"),
]
