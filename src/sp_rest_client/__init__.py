"""
SharePoint REST client - request composition core

Builds SharePoint REST/OData resource urls and query strings through fluent
queryables and turns them into dispatch-ready request contexts.
"""

from .paths import ResolvedPath, combine_paths, is_url_absolute, resolve_path
from .query import QueryParameters, serialize_url_and_query
from .context import CachingOptions, RequestContext, merge_options
from .batch import Batch, BatchRequest
from .transport import HttpClient, RawResponse, close_default_client, get_default_client
from .parsers import BufferParser, JSONParser, ODataDefaultParser, ODataParser, TextParser
from .pipeline import get_default_pipeline, pipe, pipeline_step
from .queryable import Queryable, QueryableCollection, QueryableInstance

from .runtime.config import RuntimeConfig, get_config, reset_config, setup
from .runtime.errors import *
from .runtime.url import to_absolute_url

__version__ = "1.0.0"
__all__ = [
    # Paths and query
    "ResolvedPath",
    "combine_paths",
    "is_url_absolute",
    "resolve_path",
    "QueryParameters",
    "serialize_url_and_query",

    # Queryables
    "Queryable",
    "QueryableCollection",
    "QueryableInstance",

    # Request dispatch
    "CachingOptions",
    "RequestContext",
    "merge_options",
    "Batch",
    "BatchRequest",
    "HttpClient",
    "RawResponse",
    "get_default_client",
    "close_default_client",
    "ODataParser",
    "ODataDefaultParser",
    "JSONParser",
    "TextParser",
    "BufferParser",
    "get_default_pipeline",
    "pipe",
    "pipeline_step",
    "to_absolute_url",

    # Configuration
    "RuntimeConfig",
    "get_config",
    "setup",
    "reset_config",

    # Errors
    "ErrorCode",
    "SPClientError",
    "NetworkError",
    "HttpRequestError",
    "UrlResolutionError",
    "ParseError",
    "BatchError",
    "AlreadyInBatchError",
    "BatchTimeout",
    "PipelineError",
    "ErrorHandler",
]
