"""
Services package.
"""

from .config_svc import ConfigService
from .weaver_svc import Architecture, WeaverService, load_architecture

__all__ = [
    "Architecture",
    "ConfigService",
    "WeaverService",
    "load_architecture",
]
