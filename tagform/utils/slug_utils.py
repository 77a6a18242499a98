import re
from typing import Callable

_INVALID_CHARS = re.compile(r"[^a-z0-9\s_-]")
_SEPARATOR_RUNS = re.compile(r"[\s_-]+")

FALLBACK_SLUG = "untitled"


def slugify(text: str) -> str:
    """Turn a display name into a URL slug.

    >>> slugify("Q1 Survey!!")
    'q1-survey'
    """
    value = _INVALID_CHARS.sub("", (text or "").lower())
    value = _SEPARATOR_RUNS.sub("-", value)
    return value.strip("-")


def ensure_unique_slug(slug_exists: Callable[[str], bool], base: str) -> str:
    """Return ``base`` or the first free ``base-N`` according to ``slug_exists``.

    ``slug_exists`` probes one candidate inside the caller's scope (all
    workspaces, or the forms of one workspace). The probe and the later insert
    are not atomic, so callers still rely on the unique index and retry.
    """
    base = base or FALLBACK_SLUG
    candidate = base
    counter = 1
    while slug_exists(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate
