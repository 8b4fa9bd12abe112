# api/v1/utils.py
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from utils.exceptions import ArtistBookError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Wrap DRF's default exception handler so that
    * ArtistBook errors render as {"error", "detail", "status_code"}
    * every error response carries its HTTP status code
    """
    view = context.get("view")

    if isinstance(exc, ArtistBookError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.message}", extra={"view": view})
        else:
            logger.warning(f"{exc.error_code}: {exc.message}", extra={"view": view})
        return Response(
            {
                "error": str(exc.message),
                "code": exc.error_code,
                "detail": exc.detail,
                "status_code": exc.status_code,
            },
            status=exc.status_code,
        )

    response = drf_exception_handler(exc, context)

    if response is not None and isinstance(response.data, dict):
        response.data["status_code"] = response.status_code
    elif response is None:
        logger.exception("Unhandled API exception", exc_info=exc, extra={"view": view})

    return response
