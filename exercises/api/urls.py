# FILE: medvanta/backend/exercises/api/urls.py

from django.urls import path
from exercises.api.views import (
    ExerciseLibraryView,
    ExerciseTypesView,
    ExerciseDetailView,
    EquipmentListView,
    ExerciseTemplateListView,
    ExerciseTemplateDetailView,
)

app_name = "exercises"

urlpatterns = [
    # Library
    path("", ExerciseLibraryView.as_view(), name="exercise-library"),
    path("types/", ExerciseTypesView.as_view(), name="exercise-types"),
    path("equipment/", EquipmentListView.as_view(), name="equipment-list"),
    path("<uuid:pk>/", ExerciseDetailView.as_view(), name="exercise-detail"),

    # Templates
    path("templates/", ExerciseTemplateListView.as_view(), name="template-list"),
    path("templates/<uuid:pk>/", ExerciseTemplateDetailView.as_view(), name="template-detail"),
]
