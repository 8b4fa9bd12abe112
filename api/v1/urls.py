# api/v1/urls.py
from django.urls import include, path

from api.documentation.swagger import swagger_urlpatterns

# API URLs
urlpatterns = [
    path("", include("apps.availabilityapp.urls")),
    # Documentation
    path("docs/", include(swagger_urlpatterns)),
]
