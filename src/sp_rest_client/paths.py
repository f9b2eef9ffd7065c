"""
Resource path composition.

Derives a resource url and its logical parent url from a base (a string or
an existing queryable) and an optional path suffix. Pure string work; no
network access.
"""

from __future__ import annotations
import re
from typing import NamedTuple, Optional, Any


_ABSOLUTE_URL = re.compile(r"^https?://|^//", re.IGNORECASE)
_LEADING_SEPARATOR = re.compile(r"^[\\/]")
_TRAILING_SEPARATOR = re.compile(r"[\\/]$")


class ResolvedPath(NamedTuple):
    """Url of a resource and the url of its parent resource."""
    url: str
    parent_url: str


def is_url_absolute(url: str) -> bool:
    """Check whether the url carries a scheme and host (or is protocol relative)."""
    return bool(_ABSOLUTE_URL.match(url))


def combine_paths(*paths: Optional[str]) -> str:
    """
    Join path segments with exactly one '/' between them.

    Empty and None segments are ignored; one leading and one trailing
    separator is stripped from every segment and backslashes become '/'.
    """
    parts = []
    for path in paths:
        if not path:
            continue
        path = _LEADING_SEPARATOR.sub("", path)
        path = _TRAILING_SEPARATOR.sub("", path)
        parts.append(path)
    return "/".join(parts).replace("\\", "/")


def resolve_path(base: Any, path: Optional[str] = None) -> ResolvedPath:
    """
    Compute the url and parent url for a new resource.

    Args:
        base: Base url string, or an object exposing ``url`` (a queryable)
        path: Optional path appended to the base

    Returns:
        ResolvedPath(url, parent_url)
    """
    if not isinstance(base, str):
        return ResolvedPath(combine_paths(base.url, path), base.url)

    last_slash = base.rfind("/")

    if is_url_absolute(base) or last_slash < 0:
        return ResolvedPath(combine_paths(base, path), base)

    last_paren = base.rfind("(")

    if last_slash > last_paren:
        # .../items(19)/fields
        parent_url = base[:last_slash]
        child_path = combine_paths(base[last_slash:], path)
        return ResolvedPath(combine_paths(parent_url, child_path), parent_url)

    # .../items(19)
    return ResolvedPath(combine_paths(base, path), base[:last_paren])
