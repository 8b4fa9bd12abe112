# apps/availabilityapp/admin.py
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.availabilityapp.models import (
    Availability,
    BlackoutDate,
    Holiday,
    RecurringPattern,
    TimeSlotTemplate,
)


@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ["artist", "date", "start_time", "end_time", "status", "is_booked"]
    list_filter = ["status", "is_booked", "date"]
    search_fields = ["artist__stage_name", "notes"]
    date_hierarchy = "date"
    raw_id_fields = ["artist", "booking", "recurring_pattern", "source_template"]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = (
        (None, {"fields": ("artist", "date", "start_time", "end_time", "status")}),
        (_("Booking"), {"fields": ("is_booked", "booking")}),
        (
            _("Pricing & Buffers"),
            {"fields": ("price_multiplier", "minimum_hours", "buffer_before", "buffer_after")},
        ),
        (_("Origin"), {"fields": ("recurring_pattern", "source_template")}),
        (_("Notes"), {"fields": ("notes", "requirements")}),
        (_("Timestamps"), {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )


@admin.register(RecurringPattern)
class RecurringPatternAdmin(admin.ModelAdmin):
    list_display = ["name", "artist", "frequency", "start_time", "end_time", "is_active"]
    list_filter = ["frequency", "is_active"]
    search_fields = ["name", "artist__stage_name"]
    raw_id_fields = ["artist"]


@admin.register(BlackoutDate)
class BlackoutDateAdmin(admin.ModelAdmin):
    list_display = ["title", "artist", "start_date", "end_date", "blackout_type"]
    list_filter = ["blackout_type", "is_recurring"]
    search_fields = ["title", "artist__stage_name"]
    raw_id_fields = ["artist"]


@admin.register(TimeSlotTemplate)
class TimeSlotTemplateAdmin(admin.ModelAdmin):
    list_display = ["name", "artist", "duration_minutes", "price_multiplier", "is_default", "is_active"]
    list_filter = ["is_default", "is_active"]
    search_fields = ["name", "artist__stage_name"]
    raw_id_fields = ["artist"]


@admin.register(Holiday)
class HolidayAdmin(admin.ModelAdmin):
    list_display = ["name", "date", "is_active"]
    list_filter = ["is_active"]
    date_hierarchy = "date"
