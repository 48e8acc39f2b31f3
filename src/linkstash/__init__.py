"""
linkstash - saved articles store

Keeps saved articles in a single versioned JSON document and upgrades old
documents to the current schema at startup.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import Settings, load_settings
from .startup import prepare_storage

__all__ = ["Settings", "load_settings", "prepare_storage", "__version__"]
