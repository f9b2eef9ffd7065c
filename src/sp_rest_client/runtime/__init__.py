"""
Runtime support: configuration, errors and absolute url resolution.
"""

from .config import RuntimeConfig, get_config, setup, reset_config
from .errors import *
from .url import to_absolute_url
