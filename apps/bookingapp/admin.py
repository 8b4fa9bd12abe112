# apps/bookingapp/admin.py
from django.contrib import admin

from apps.bookingapp.models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Admin configuration for bookings"""

    list_display = [
        "booking_number",
        "artist",
        "event_date",
        "start_time",
        "end_time",
        "status",
    ]
    list_filter = ["status", "event_date"]
    search_fields = ["booking_number", "artist__stage_name", "event_type"]
    date_hierarchy = "event_date"
    raw_id_fields = ["artist"]
    readonly_fields = ["created_at", "updated_at"]
