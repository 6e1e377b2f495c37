# FILE: medvanta/backend/core/urls.py

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

urlpatterns = [
    path("admin/", admin.site.urls),

    # Authentication
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Members, onboarding and import
    path("api/users/", include("users.api.urls")),

    # Organizations and teams
    path("api/organizations/", include("organizations.api.urls")),

    # Exercise library and templates
    path("api/exercises/", include("exercises.api.urls")),

    # Program templates, schedules and assignments
    path("api/programs/", include("programs.api.urls")),

    # Patient chat
    path("api/messaging/", include("messaging.api.urls")),

    # Admin dashboard
    path("api/dashboard/", include("dashboard.api.urls")),

    # API Documentation (Swagger/ReDoc)
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    # Health checks
    path("health/", include("core.health_urls")),
]

handler404 = "core.views.custom_404"
handler500 = "core.views.custom_500"

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
