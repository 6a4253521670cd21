"""Category predicates and post-aggregation filters.

The helpers here are pure.  :func:`build_category_filter` turns the raw
``categories`` query string into the ``metadata[keyvalues]`` predicate the
upstream understands, and :func:`take` / :func:`images_only` post-process an
already aggregated list.

The upstream applies the category predicate server-side but does not
guarantee how many items come back, so the front door always applies
:func:`take` again after aggregation.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import TypeVar

from pinworks.core.models import RemoteFile

T = TypeVar("T")


def parse_categories(raw: str | None) -> list[str]:
    """Split a comma-separated category string.

    Whitespace around each name is trimmed and empty names are dropped, so
    ``None``, ``""`` and ``" , "`` all mean "no category filter".

    Args:
        raw: Raw query string value, e.g. ``"cat, dog"``.

    Returns:
        The category names in their original order.
    """
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def build_category_filter(categories: Sequence[str]) -> dict | None:
    """Build the upstream key-value predicate for *categories*.

    Args:
        categories: Parsed category names.

    Returns:
        ``None`` when *categories* is empty, an ``eq`` predicate for a
        single category, and an ``in`` predicate otherwise.

    Examples:
        >>> build_category_filter(["cat"])
        {'category': {'value': 'cat', 'op': 'eq'}}
        >>> build_category_filter(["cat", "dog"])
        {'category': {'value': ['cat', 'dog'], 'op': 'in'}}
    """
    if not categories:
        return None
    if len(categories) == 1:
        return {"category": {"value": categories[0], "op": "eq"}}
    return {"category": {"value": list(categories), "op": "in"}}


def encode_filter(predicate: dict | None) -> str | None:
    """JSON-encode a predicate for the ``metadata[keyvalues]`` query param."""
    if predicate is None:
        return None
    return json.dumps(predicate, separators=(",", ":"))


def take(items: Iterable[T], limit: int | None) -> list[T]:
    """Return at most *limit* items (all of them when *limit* is ``None``)."""
    items = list(items)
    if limit is None:
        return items
    return items[: max(limit, 0)]


def images_only(files: Iterable[RemoteFile]) -> list[RemoteFile]:
    """Keep only files whose MIME type is ``image/*``."""
    return [f for f in files if f.is_image]
