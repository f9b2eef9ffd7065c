"""
Request context for dispatching a queryable.

A RequestContext is the dispatch-ready description of one request: verb,
absolute url, merged options, the parser for the response, the pipeline that
processes it, and its batch and caching linkage. Contexts are frozen; the
pipeline produces updated copies instead of mutating them.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CachingOptions(BaseModel):
    """
    Caching directive attached to a queryable.

    Carried through to the request context untouched; only the caching
    pipeline step reads it.
    """

    key: Optional[str] = Field(default=None, description="Cache key; defaults to the request url")

    model_config = ConfigDict(frozen=True)


class RequestContext(BaseModel):
    """Dispatch-ready request descriptor."""

    batch: Optional[Any] = Field(default=None, description="Batch this request is deferred into")
    batch_dependency: Callable[[], None] = Field(description="Releases the batch dependency")
    caching_options: Optional[Any] = Field(default=None, description="Opaque caching directive")
    client_factory: Callable[[], Any] = Field(description="Creates a transport client")
    is_batched: bool = False
    is_cached: bool = False
    options: Dict[str, Any] = Field(default_factory=dict)
    parser: Any = Field(description="Parses the raw response")
    pipeline: List[Callable[..., Any]] = Field(default_factory=list)
    request_absolute_url: str
    request_id: str
    verb: str

    # set while the pipeline runs
    has_result: bool = False
    result: Any = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def with_result(self, result: Any) -> "RequestContext":
        """Copy of this context carrying ``result``."""
        return self.model_copy(update={"result": result, "has_result": True})


def merge_options(target: Dict[str, Any], source: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Overlay ``source`` onto ``target`` in place.

    Top level keys from ``source`` replace those in ``target`` except
    ``headers``, which are merged key by key with ``source`` winning.

    Returns:
        ``target``
    """
    if source is None:
        return target
    has_headers = "headers" in target or "headers" in source
    headers = dict(target.get("headers") or {})
    headers.update(source.get("headers") or {})
    target.update(source)
    if has_headers:
        target["headers"] = headers
    return target
