"""Shared naming helpers used by every app type and service strategy.

All helpers are pure functions. ``normalize_name`` is idempotent, so
passing an already normalized name through it again is always safe.

Example:
    >>> normalize_name("My Shop!!")
    'my-shop'
    >>> app_namespace("my-shop")
    'MyShop'
    >>> package_name("My Shop")
    'phphive/my-shop'
"""

from __future__ import annotations

import re

VENDOR_PREFIX = "phphive"

BUCKET_MIN_LENGTH = 3
BUCKET_MAX_LENGTH = 63
BUCKET_FALLBACK_PREFIX = "bucket-"

_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-{2,}")
_INVALID_DB_CHARS = re.compile(r"[^a-z0-9_]")
_UNDERSCORE_RUNS = re.compile(r"_{2,}")
_SEGMENT_SEPARATORS = re.compile(r"[-_]+")
APP_NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def normalize_name(name: str) -> str:
    """Normalize free text into a lowercase, hyphenated identifier."""
    normalized = _INVALID_NAME_CHARS.sub("-", name.lower())
    normalized = _HYPHEN_RUNS.sub("-", normalized)
    return normalized.strip("-")


def is_valid_app_name(name: str) -> bool:
    """Return True if ``name`` is already in normalized form."""
    return APP_NAME_PATTERN.match(name) is not None


def database_name(name: str) -> str:
    """Derive a database-safe identifier (underscores instead of hyphens)."""
    normalized = _INVALID_DB_CHARS.sub("_", name.lower())
    normalized = _UNDERSCORE_RUNS.sub("_", normalized)
    return normalized.strip("_")


def app_namespace(name: str) -> str:
    """Convert a name into a PascalCase namespace segment."""
    segments = _SEGMENT_SEPARATORS.split(name)
    return "".join(segment[:1].upper() + segment[1:] for segment in segments if segment)


def package_name(name: str) -> str:
    """Fully qualified Composer package identifier for an app."""
    return f"{VENDOR_PREFIX}/{normalize_name(name)}"


def container_prefix(name: str) -> str:
    """Prefix shared by container, volume and network names of an app."""
    return f"{VENDOR_PREFIX}-{normalize_name(name)}"


def validate_bucket_name(name: str) -> str:
    """Coerce any input into a valid S3-style bucket name.

    Rules:
        - lowercase, characters outside ``[a-z0-9-]`` become hyphens
        - repeated hyphens collapse, leading/trailing hyphens are removed
        - shorter than 3 characters: prefixed with ``bucket-``
        - longer than 63 characters: truncated, trailing hyphen removed

    Returns:
        A name whose length is always between 3 and 63.

    Example:
        >>> validate_bucket_name("ab")
        'bucket-ab'
    """
    bucket = normalize_name(name)

    if len(bucket) < BUCKET_MIN_LENGTH:
        bucket = (BUCKET_FALLBACK_PREFIX + bucket).rstrip("-")

    if len(bucket) > BUCKET_MAX_LENGTH:
        bucket = bucket[:BUCKET_MAX_LENGTH].rstrip("-")

    return bucket
