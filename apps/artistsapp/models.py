import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Artist(models.Model):
    """Artist profile holding the pricing and booking-window rules of a calendar"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="artist_profile",
        verbose_name=_("User"),
        null=True,
        blank=True,
    )
    stage_name = models.CharField(_("Stage Name"), max_length=255)
    hourly_rate = models.DecimalField(
        _("Hourly Rate"),
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    minimum_hours = models.DecimalField(
        _("Minimum Hours"),
        max_digits=4,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(0)],
    )
    default_buffer_minutes = models.PositiveIntegerField(
        _("Default Buffer (minutes)"), default=0
    )
    min_advance_booking_hours = models.PositiveIntegerField(
        _("Minimum Advance Booking (hours)"), default=24
    )
    max_advance_booking_days = models.PositiveIntegerField(
        _("Maximum Advance Booking (days)"), default=365
    )
    weekend_multiplier = models.DecimalField(
        _("Weekend Price Multiplier"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(Decimal("0.10")), MaxValueValidator(10)],
    )
    holiday_multiplier = models.DecimalField(
        _("Holiday Price Multiplier"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(Decimal("0.10")), MaxValueValidator(10)],
    )
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Artist")
        verbose_name_plural = _("Artists")
        ordering = ["stage_name"]

    def __str__(self):
        return self.stage_name

    def is_owned_by(self, user):
        """Whether ``user`` manages this artist's calendar"""
        if user is None or not user.is_authenticated:
            return False
        return user.is_staff or self.user_id == user.pk
