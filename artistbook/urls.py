"""ArtistBook project, main URL configuration."""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from django.views.generic.base import RedirectView


def health(request):
    """Minimal health-check endpoint used by load-balancers / uptime checks."""
    return JsonResponse({"status": "ok"})


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),
    # Application API (versioned)
    path("api/v1/", include("api.v1.urls")),
    # Health check endpoint
    path("health/", health, name="health_check"),
    # Redirect home "/" to Swagger UI
    path(
        "",
        RedirectView.as_view(url="/api/v1/docs/swagger/", permanent=False),
        name="home",
    ),
]
