"""
Queryable resources.

A Queryable describes one addressable REST resource: its url, the url of its
parent resource, the query parameters accumulated so far, request option
overrides, and optional batch and caching linkage. Turning a queryable into a
request produces a RequestContext that the pipeline dispatches.

Fluent calls (filter, select, order_by, configure, ...) mutate the queryable
in place and return it. Two chains started from the same intermediate
queryable share that state; take a clone() before branching.

Example usage:
    ```python
    items = QueryableCollection("https://contoso.sharepoint.com/sites/dev",
                                "_api/web/lists/getByTitle('Tasks')/items")
    items.select("Title", "Id").filter("Status eq 'Open'").order_by("Created", False).top(10)
    data = await items.get()
    ```
"""

from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union
from uuid import uuid4

from .batch import Batch
from .context import CachingOptions, RequestContext, merge_options
from .parsers import ODataDefaultParser, ODataParser
from .paths import resolve_path
from .pipeline import PipelineStep, get_default_pipeline, pipe
from .query import QueryParameters, serialize_url_and_query
from .runtime.config import get_config
from .runtime.errors import AlreadyInBatchError
from .runtime.url import to_absolute_url
from .transport import get_default_client


logger = logging.getLogger(__name__)

TARGET_KEY = "@target"

Q = TypeVar("Q", bound="Queryable")


def _no_dependency() -> None:
    return None


class Queryable:
    """
    Base class for all queryable resources.

    Args:
        base_url: Url string or queryable forming the base of the url
        path: Optional path appended to the base
    """

    def __init__(self, base_url: Union[str, "Queryable"], path: Optional[str] = None):
        self._query = QueryParameters()
        self._options: Dict[str, Any] = {}
        self._batch: Optional[Batch] = None
        self._use_caching = False
        self._caching_options: Optional[CachingOptions] = None

        if isinstance(base_url, str):
            self._url, self._parent_url = resolve_path(base_url, path)
        else:
            self._extend(base_url, path)

    def _extend(self, parent: "Queryable", path: Optional[str]) -> None:
        # query and options are copied by value, @target included
        self._url, self._parent_url = resolve_path(parent, path)
        self._query.merge(parent.query)
        merge_options(self._options, parent.options)

    @property
    def url(self) -> str:
        return self._url

    @property
    def parent_url(self) -> str:
        return self._parent_url

    @property
    def query(self) -> QueryParameters:
        return self._query

    @property
    def options(self) -> Dict[str, Any]:
        return self._options

    @property
    def batch(self) -> Optional[Batch]:
        return self._batch

    @property
    def has_batch(self) -> bool:
        return self._batch is not None

    @property
    def use_caching(self) -> bool:
        return self._use_caching

    @property
    def caching_options(self) -> Optional[CachingOptions]:
        return self._caching_options

    def concat(self: Q, path_part: str) -> Q:
        """Append raw text to the url (no separator is added)."""
        self._url += path_part
        return self

    def configure(self: Q, options: Dict[str, Any]) -> Q:
        """Merge request options into this queryable; headers are merged per key."""
        merge_options(self._options, options)
        return self

    def using_caching(self: Q, options: Optional[CachingOptions] = None) -> Q:
        """Mark GET requests from this queryable as cache eligible."""
        self._use_caching = True
        if options is not None:
            self._caching_options = options
        return self

    def in_batch(self: Q, batch: Batch) -> Q:
        """
        Defer requests from this queryable into ``batch``.

        Raises:
            AlreadyInBatchError: If a batch is already attached
        """
        if self._batch is not None:
            raise AlreadyInBatchError(details={"batch_id": self._batch.batch_id})
        self._batch = batch
        return self

    def add_batch_dependency(self) -> Callable[[], None]:
        """Register a dependency with the attached batch; a no-op release when not batched."""
        if self._batch is not None:
            return self._batch.add_dependency()
        return _no_dependency

    def to_url(self) -> str:
        return self._url

    def to_url_and_query(self) -> str:
        """Full url with the query string, aliased parameters rewritten."""
        return serialize_url_and_query(self.to_url(), self._query)

    def as_(self, factory: Type[Q]) -> Q:
        """
        Reinterpret this resource as another queryable type.

        The new instance gets the same url, parent url, query, options,
        caching settings and batch.
        """
        other = factory(self._url)
        other._parent_url = self._parent_url
        other._query = self._query.copy()
        other._options = merge_options({}, self._options)
        other._use_caching = self._use_caching
        other._caching_options = self._caching_options
        other._batch = self._batch
        return other

    def get_parent(self, factory: Type[Q], base_url: Union[str, "Queryable", None] = None,
                   path: Optional[str] = None, batch: Optional[Batch] = None) -> Q:
        """
        Create the parent resource of this queryable.

        Args:
            factory: Queryable type of the parent
            base_url: Base for the parent (defaults to this queryable's parent url)
            path: Optional path appended to the base
            batch: Batch to attach to the parent
        """
        parent = factory(self._parent_url if base_url is None else base_url, path)
        parent.configure(self._options)

        target = self._query.get(TARGET_KEY)
        if target is not None:
            parent.query.add(TARGET_KEY, target)

        if batch is not None:
            parent = parent.in_batch(batch)
        return parent

    def clone(self, factory: Optional[Type[Q]] = None, additional_path: Optional[str] = None,
              include_batch: bool = True) -> Q:
        """
        Copy this queryable into a new instance.

        Args:
            factory: Queryable type of the copy (defaults to this type)
            additional_path: Path appended to this queryable's url
            include_batch: Attach this queryable's batch to the copy
        """
        factory = factory or type(self)
        cloned = factory(self, additional_path)
        if include_batch and self._batch is not None:
            cloned = cloned.in_batch(self._batch)
        return cloned

    async def to_request_context(self, verb: str, options: Optional[Dict[str, Any]] = None,
                                 parser: Optional[ODataParser] = None,
                                 pipeline: Optional[List[PipelineStep]] = None) -> RequestContext:
        """
        Convert this queryable into a request context.

        The batch dependency is registered before the url is resolved, so a
        batch cannot be sent while this request is still being prepared.
        Releasing it is the job of whoever dispatches the context.

        Args:
            verb: Request verb
            options: Options for this request; the queryable's options take precedence
            parser: Parser for the response
            pipeline: Request processing steps

        Raises:
            UrlResolutionError: If the url cannot be made absolute
        """
        dependency_dispose = self.add_batch_dependency()

        url = await to_absolute_url(self.to_url_and_query())

        merged = merge_options(dict(options or {}), self._options)
        config = get_config()

        return RequestContext(
            batch=self._batch,
            batch_dependency=dependency_dispose,
            caching_options=self._caching_options,
            client_factory=config.fetch_client_factory or get_default_client,
            is_batched=self.has_batch,
            is_cached=verb.upper() == "GET" and self._use_caching,
            options=merged,
            parser=parser if parser is not None else ODataDefaultParser(),
            pipeline=list(pipeline or []),
            request_absolute_url=url,
            request_id=str(uuid4()),
            verb=verb,
        )

    async def get(self, parser: Optional[ODataParser] = None, options: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a GET request for this resource and return the parsed result."""
        return await self._request("GET", options, parser)

    async def _post_core(self, options: Optional[Dict[str, Any]] = None, parser: Optional[ODataParser] = None) -> Any:
        return await self._request("POST", options, parser)

    async def _patch_core(self, options: Optional[Dict[str, Any]] = None, parser: Optional[ODataParser] = None) -> Any:
        return await self._request("PATCH", options, parser)

    async def _delete_core(self, options: Optional[Dict[str, Any]] = None, parser: Optional[ODataParser] = None) -> Any:
        return await self._request("DELETE", options, parser)

    async def _request(self, verb: str, options: Optional[Dict[str, Any]], parser: Optional[ODataParser]) -> Any:
        context = await self.to_request_context(verb, options, parser, get_default_pipeline())
        context = await pipe(context)
        return context.result

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self._url}')"


class _SelectExpand:
    """select/expand verbs shared by collections and instances."""

    _query: QueryParameters

    def select(self, *selects: str):
        """
        Choose which fields to return.

        Args:
            selects: One or more field names
        """
        if selects:
            self._query.add("$select", ",".join(selects))
        return self

    def expand(self, *expands: str):
        """
        Expand fields such as lookups to get additional data.

        Args:
            expands: One or more field names
        """
        if expands:
            self._query.add("$expand", ",".join(expands))
        return self


class QueryableCollection(_SelectExpand, Queryable):
    """A REST collection which can be filtered, paged, ordered and selected."""

    def filter(self, filter: str) -> "QueryableCollection":
        """Filter the returned collection with an OData filter expression."""
        self._query.add("$filter", filter)
        return self

    def order_by(self, order_by: str, ascending: bool = True) -> "QueryableCollection":
        """
        Order by the supplied field, after any ordering already applied.

        Args:
            order_by: Name of the field to sort on
            ascending: If False 'desc' is used, otherwise 'asc'
        """
        clauses = [self._query.get(key) for key in self._query.get_keys() if key == "$orderby"]
        clauses.append(f"{order_by} {'asc' if ascending else 'desc'}")
        self._query.add("$orderby", ",".join(clauses))
        return self

    def skip(self, skip: int) -> "QueryableCollection":
        self._query.add("$skip", str(skip))
        return self

    def top(self, top: int) -> "QueryableCollection":
        """Limit the query to ``top`` rows."""
        self._query.add("$top", str(top))
        return self


class QueryableInstance(_SelectExpand, Queryable):
    """A single REST resource whose fields can be selected and expanded."""
