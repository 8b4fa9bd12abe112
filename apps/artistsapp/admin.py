from django.contrib import admin

from apps.artistsapp.models import Artist


@admin.register(Artist)
class ArtistAdmin(admin.ModelAdmin):
    """Admin configuration for artists"""

    list_display = [
        "stage_name",
        "hourly_rate",
        "minimum_hours",
        "weekend_multiplier",
        "holiday_multiplier",
        "is_active",
    ]
    list_filter = ["is_active"]
    search_fields = ["stage_name", "user__username", "user__email"]
    readonly_fields = ["created_at", "updated_at"]
