"""
Web ID generation and availability resolution.

A web ID is the URL-safe slug the Buildez platform uses as the project key
(e.g. "joe-s-pizza" for "Joe's Pizza"). IDs are derived from the business
name and then checked against the API, adding a numeric suffix when the
plain ID is already taken.
"""

import logging
import re
import time

from buildez_mcp.adapters import BuildezAPI
from buildez_mcp.errors import BuildezAPIError

logger = logging.getLogger(__name__)

MAX_WEB_ID_LENGTH = 50
"""Maximum length of a generated web ID."""

FIRST_SUFFIX = 2
LAST_SUFFIX = 99

_SEPARATOR_RUN = re.compile(r"[^a-z0-9]+")


def generate_clean_web_id(business_name: str) -> str:
    """
    Normalize a business name into a web ID candidate.

    Lower-cases the name, collapses every run of characters outside
    [a-z0-9] into a single "-", trims separators from both ends and caps
    the length at MAX_WEB_ID_LENGTH.

    Args:
        business_name: Free-text business name

    Returns:
        Web ID candidate; empty if the name has no ASCII letters or digits
    """
    web_id = _SEPARATOR_RUN.sub("-", business_name.lower()).strip("-")
    return web_id[:MAX_WEB_ID_LENGTH].rstrip("-")


def _now_ms() -> int:
    return int(time.time() * 1000)


def timestamp_web_id(base_web_id: str) -> str:
    """Append the last six digits of the current epoch milliseconds."""
    return f"{base_web_id}-{str(_now_ms())[-6:]}"


async def get_available_web_id(api: BuildezAPI, base_web_id: str) -> str:
    """
    Resolve a web ID that is free at call time.

    Tries the base ID, then "<base>-2" through "<base>-99" in order. When
    every candidate is taken, or any check fails, falls back to a
    timestamp suffix without verifying it.

    Args:
        api: Buildez API client
        base_web_id: Candidate from generate_clean_web_id()

    Returns:
        The first available candidate, or the timestamp fallback
    """
    try:
        if await api.check_web_id(base_web_id):
            return base_web_id

        for suffix in range(FIRST_SUFFIX, LAST_SUFFIX + 1):
            numbered_web_id = f"{base_web_id}-{suffix}"
            if await api.check_web_id(numbered_web_id):
                return numbered_web_id
    except BuildezAPIError as e:
        logger.warning("Web ID check failed, using timestamp fallback: %s", e)
        return timestamp_web_id(base_web_id)

    logger.warning(
        "Web IDs %s through %s-%d are taken, using timestamp fallback",
        base_web_id, base_web_id, LAST_SUFFIX,
    )
    return timestamp_web_id(base_web_id)
