"""
API Documentation Utilities
Helpers for building drf-yasg parameters.
"""

import logging
from typing import List

from drf_yasg import openapi

logger = logging.getLogger(__name__)


def dedupe_manual_parameters(params: List[openapi.Parameter]) -> List[openapi.Parameter]:
    """
    Remove duplicate openapi.Parameters by (name, in_) tuple.
    This avoids the "duplicate Parameters found" error in drf_yasg.

    Args:
        params: List of openapi.Parameter objects

    Returns:
        Deduplicated list of parameters
    """
    if not params:
        return []

    seen = set()
    deduped = []
    for param in params:
        key = (getattr(param, "name", None), getattr(param, "in_", None))
        if key in seen:
            logger.debug(f"Removed duplicate parameter: {key}")
            continue
        if None not in key:
            deduped.append(param)
            seen.add(key)
    return deduped


def build_parameters(specs: List[dict], location: str) -> List[openapi.Parameter]:
    """
    Build openapi parameters from plain dicts.

    Each dict carries ``name`` and optionally ``description``, ``type`` and
    ``required``; path parameters are always required.
    """
    return [
        openapi.Parameter(
            spec["name"],
            location,
            description=spec.get("description", ""),
            type=spec.get("type", openapi.TYPE_STRING),
            required=True if location == openapi.IN_PATH else spec.get("required", False),
        )
        for spec in specs or []
    ]
