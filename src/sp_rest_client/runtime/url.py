"""
Absolute url resolution for request urls.
"""

import logging

from .config import get_config
from .errors import SPClientError, UrlResolutionError
from ..paths import combine_paths, is_url_absolute


logger = logging.getLogger(__name__)


async def to_absolute_url(candidate_url: str) -> str:
    """
    Resolve a possibly relative request url to its absolute form.

    Absolute urls are returned unchanged. Relative urls go through the
    configured url_resolver when one is set, otherwise they are combined
    with the configured base_url.

    Args:
        candidate_url: Url as serialized by a queryable

    Returns:
        The absolute url

    Raises:
        UrlResolutionError: If no resolver or base url can resolve the url
    """
    if is_url_absolute(candidate_url):
        return candidate_url

    config = get_config()

    if config.url_resolver is not None:
        try:
            resolved = await config.url_resolver(candidate_url)
        except SPClientError:
            raise
        except Exception as e:
            raise UrlResolutionError(
                f"Url resolver failed for {candidate_url}",
                details={"url": candidate_url},
                cause=e,
            ) from e
        logger.debug(f"Resolved {candidate_url} -> {resolved}")
        return resolved

    if config.base_url:
        # only the path is combined; the query string is appended untouched
        path, separator, query = candidate_url.partition("?")
        return combine_paths(config.base_url, path) + separator + query

    raise UrlResolutionError(
        f"Cannot resolve relative url '{candidate_url}': no base_url configured",
        details={"url": candidate_url},
    )
