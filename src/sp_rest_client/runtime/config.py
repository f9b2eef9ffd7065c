"""
Runtime configuration for the SharePoint REST client.

A single process-wide RuntimeConfig holds the values every queryable reads
when it is turned into a request: the web base url used for absolute url
resolution, default headers, the transport factory and the caching store.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, MutableMapping, Optional


logger = logging.getLogger(__name__)

CLIENT_TAG = "sp-rest-client/1.0.0"


@dataclass
class RuntimeConfig:
    """Configuration shared by all queryables."""

    base_url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    fetch_client_factory: Optional[Callable[[], Any]] = None
    url_resolver: Optional[Callable[[str], Awaitable[str]]] = None
    default_caching_store: Optional[MutableMapping[str, Any]] = None
    global_cache_disable: bool = False
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 0.1
    retry_backoff: float = 2.0
    user_agent: str = CLIENT_TAG

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must not be negative")
        if self.retry_backoff < 1:
            raise ValueError("retry_backoff must be at least 1")


_config = RuntimeConfig()


def get_config() -> RuntimeConfig:
    """Return the active runtime configuration."""
    return _config


def setup(config: Optional[RuntimeConfig] = None, **overrides: Any) -> RuntimeConfig:
    """
    Replace the active runtime configuration.

    Args:
        config: Complete configuration to install
        **overrides: Individual fields applied on top of the active (or given) config

    Returns:
        The installed configuration
    """
    global _config
    base = config if config is not None else _config
    _config = replace(base, **overrides) if overrides else base
    logger.debug(f"Runtime configuration updated: base_url={_config.base_url}")
    return _config


def reset_config() -> RuntimeConfig:
    """Restore the default configuration."""
    global _config
    _config = RuntimeConfig()
    return _config
