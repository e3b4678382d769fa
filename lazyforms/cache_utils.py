import logging

from .constants import ENTRIES_VERSION_KEY
from .extensions import cache

logger = logging.getLogger(__name__)


def get_version(key, default=1):
    """Gets a version number for a cache key from the cache.

    Args:
        key (str): The cache key for the version number.
        default (int): The default version number to return if the key is not found.

    Returns:
        int: The version number.
    """
    version = cache.get(key)
    return default if version is None else version


def make_entries_cache_key(*args, **kwargs):
    """Creates a cache key for the entry list view, incorporating a version.

    Args:
        *args: Additional arguments (unused).
        **kwargs: Additional keyword arguments (unused).

    Returns:
        str: The generated cache key.
    """
    version = get_version(ENTRIES_VERSION_KEY)
    return f"view/entries/v{version}"


def invalidate_entries_cache():
    """Invalidates the entry list view by incrementing its version."""
    new_version = get_version(ENTRIES_VERSION_KEY) + 1
    cache.set(ENTRIES_VERSION_KEY, new_version)
    logger.info("Invalidated entries cache. New version: %s", new_version)
    return new_version
