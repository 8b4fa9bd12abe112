from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ArtistsAppConfig(AppConfig):
    name = "apps.artistsapp"
    verbose_name = _("Artists")
    default_auto_field = "django.db.models.BigAutoField"
