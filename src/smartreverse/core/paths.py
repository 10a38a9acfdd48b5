"""Segment normalisation and URL combination.

``join_segments`` turns the root-first list of segments collected by the
mount-tree walk into one canonical path:

- empty (or ``None``) segments are dropped;
- exactly one leading and one trailing ``/`` is stripped from each segment;
- segments left empty by the stripping are dropped;
- survivors are joined with a single ``/``.

The result never starts with ``/``: it is a relative reference, combined with
a base URL by ``combine_url`` (RFC 3986 reference resolution via
``urllib.parse.urljoin``). A built path is always kept below the base: leading
slashes left by absent optional parameters are dropped and the path is
anchored with ``./``, so values such as ``javascript:x`` or ``//other.host``
cannot become absolute or network-path references.
"""

from __future__ import annotations

from typing import Iterable, Optional
from urllib.parse import urljoin

__all__ = ["normalize_segment", "join_segments", "combine_url"]


def normalize_segment(segment: str) -> str:
    if segment.startswith("/"):
        segment = segment[1:]
    if segment.endswith("/"):
        segment = segment[:-1]
    return segment


def join_segments(segments: Iterable[Optional[str]]) -> str:
    """Join segments root-first into a path without leading slash.

    >>> join_segments(["/api", "/v1/", "/users/:id"])
    'api/v1/users/:id'
    """
    parts = (normalize_segment(segment) for segment in segments if segment)
    return "/".join(part for part in parts if part)


def combine_url(base: str, path: str) -> str:
    """Resolve ``path`` against ``base`` (``http://host/`` + ``a/b`` -> ``http://host/a/b``)."""
    return urljoin(base, "./" + path.lstrip("/"))
