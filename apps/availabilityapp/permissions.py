# apps/availabilityapp/permissions.py
from rest_framework import permissions


class IsArtistOwner(permissions.BasePermission):
    """
    Permission for managing an artist's calendar.

    - The user linked to the artist profile can manage its calendar
    - Staff can manage every calendar
    """

    message = "You do not manage this artist's calendar."

    def has_permission(self, request, view):
        return view.get_artist().is_owned_by(request.user)

    def has_object_permission(self, request, view, obj):
        return obj.artist_id == view.get_artist().id and obj.artist.is_owned_by(request.user)
