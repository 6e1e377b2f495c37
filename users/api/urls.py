# FILE: medvanta/backend/users/api/urls.py

from django.urls import path

from .views import (
    UserListView,
    UserDetailView,
    MeView,
    OnboardingOverrideView,
    ImportValidateView,
    ImportView,
    PatientProfileView,
    PatientAppointmentsView,
)

app_name = "users"

urlpatterns = [
    path("", UserListView.as_view(), name="user-list"),
    path("me/", MeView.as_view(), name="me"),
    path("onboarding/", OnboardingOverrideView.as_view(), name="onboarding"),
    path("import/validate/", ImportValidateView.as_view(), name="import-validate"),
    path("import/", ImportView.as_view(), name="import"),
    path("<uuid:pk>/", UserDetailView.as_view(), name="user-detail"),
    path("<uuid:pk>/profile/", PatientProfileView.as_view(), name="patient-profile"),
    path("<uuid:pk>/appointments/", PatientAppointmentsView.as_view(), name="patient-appointments"),
]
