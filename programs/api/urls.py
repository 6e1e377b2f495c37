# FILE: medvanta/backend/programs/api/urls.py

from django.urls import path

from .views import (
    ProgramTemplateListView,
    ProgramTemplateDetailView,
    ProgramTemplateImageView,
    AssignmentListView,
    AssignmentDetailView,
    AssignmentCloneView,
    AssignToUserView,
    AssignmentCompleteView,
    AssignmentScheduleView,
    AttachScheduleView,
    PatientOverrideView,
    AssignmentProgressView,
    WorkoutScheduleListView,
    WorkoutScheduleDetailView,
    ExerciseGroupListView,
    ExerciseGroupDetailView,
)

app_name = "programs"

urlpatterns = [
    # Templates
    path("templates/", ProgramTemplateListView.as_view(), name="template-list"),
    path("templates/<uuid:pk>/", ProgramTemplateDetailView.as_view(), name="template-detail"),
    path("templates/<uuid:pk>/image/", ProgramTemplateImageView.as_view(), name="template-image"),

    # Assignments
    path("assignments/", AssignmentListView.as_view(), name="assignment-list"),
    path("assignments/<uuid:pk>/", AssignmentDetailView.as_view(), name="assignment-detail"),
    path("assignments/<uuid:pk>/clone/", AssignmentCloneView.as_view(), name="assignment-clone"),
    path("assignments/<uuid:pk>/assign/", AssignToUserView.as_view(), name="assignment-assign"),
    path("assignments/<uuid:pk>/complete/", AssignmentCompleteView.as_view(), name="assignment-complete"),
    path("assignments/<uuid:pk>/schedule/", AssignmentScheduleView.as_view(), name="assignment-schedule"),
    path("assignments/<uuid:pk>/schedule/attach/", AttachScheduleView.as_view(), name="assignment-attach-schedule"),
    path("assignments/<uuid:pk>/override/", PatientOverrideView.as_view(), name="assignment-override"),
    path("assignments/<uuid:pk>/progress/", AssignmentProgressView.as_view(), name="assignment-progress"),

    # Schedules and groups
    path("schedules/", WorkoutScheduleListView.as_view(), name="schedule-list"),
    path("schedules/<uuid:pk>/", WorkoutScheduleDetailView.as_view(), name="schedule-detail"),
    path("groups/", ExerciseGroupListView.as_view(), name="group-list"),
    path("groups/<uuid:pk>/", ExerciseGroupDetailView.as_view(), name="group-detail"),
]
