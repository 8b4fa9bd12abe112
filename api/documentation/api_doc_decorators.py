"""
API Documentation Decorators

Decorators documenting the ArtistBook API with drf-yasg.
"""

import functools
from typing import Any, Dict, List

from django.utils.translation import gettext_lazy as _
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status

from api.documentation.utils import build_parameters, dedupe_manual_parameters

DEFAULT_RESPONSES = {
    status.HTTP_200_OK: "Success",
    status.HTTP_400_BAD_REQUEST: "Bad Request",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "Not Found",
}


def document_api_endpoint(
    summary: str = None,
    description: str = None,
    request_body: Any = None,
    responses: Dict = None,
    tags: List[str] = None,
    query_params: List[Dict] = None,
    path_params: List[Dict] = None,
    operation_id: str = None,
):
    """
    Decorator for documenting API endpoints.

    Args:
        summary: Short summary of what the operation does
        description: Verbose explanation of the operation behavior
        request_body: Request body serializer or schema
        responses: Response descriptions keyed by HTTP status code
        tags: A list of tags for API documentation control
        query_params: Query parameters as dicts (name, description, required, type)
        path_params: Path parameters as dicts (name, description, type)
        operation_id: Unique string used to identify the operation

    Returns:
        Decorated function with Swagger documentation
    """
    manual_parameters = dedupe_manual_parameters(
        build_parameters(query_params, openapi.IN_QUERY)
        + build_parameters(path_params, openapi.IN_PATH)
    )

    def decorator(view_func):
        # Skip decorating classes directly
        if isinstance(view_func, type):
            return view_func

        @functools.wraps(view_func)
        def wrapped_view(*args, **kwargs):
            return view_func(*args, **kwargs)

        return swagger_auto_schema(
            operation_summary=summary,
            operation_description=description,
            request_body=request_body,
            responses=responses or DEFAULT_RESPONSES,
            tags=tags,
            manual_parameters=manual_parameters or None,
            operation_id=operation_id,
        )(wrapped_view)

    return decorator


def document_api_viewset(summary: str = None, description: str = None, tags: List[str] = None):
    """
    Class decorator documenting the standard actions of a ModelViewSet.

    Args:
        summary: A short summary for the ViewSet
        description: General description for all operations in this ViewSet
        tags: A list of tags for API documentation control

    Returns:
        Decorated ViewSet class with Swagger documentation
    """
    action_descriptions = {
        "list": _("List all objects"),
        "create": _("Create a new object"),
        "retrieve": _("Get a specific object by ID"),
        "update": _("Update an object (full update)"),
        "partial_update": _("Update an object (partial update)"),
        "destroy": _("Delete an object"),
    }

    def decorator(cls):
        if not isinstance(cls, type):
            return cls

        if description:
            cls.__doc__ = f"{cls.__doc__}\n\n{description}" if cls.__doc__ else description

        for action_name, action_description in action_descriptions.items():
            action_method = getattr(cls, action_name, None)
            # Avoid decorating twice
            if action_method is None or hasattr(action_method, "_swagger_auto_schema"):
                continue

            action_summary = f"{summary} - {action_description}" if summary else action_description

            # Inherited methods are shared by every viewset
            @functools.wraps(action_method)
            def documented(self, *args, _method=action_method, **kwargs):
                return _method(self, *args, **kwargs)

            setattr(
                cls,
                action_name,
                swagger_auto_schema(
                    operation_summary=action_summary,
                    operation_description=description,
                    tags=tags,
                )(documented),
            )

        return cls

    return decorator
