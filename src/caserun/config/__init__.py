#
# config/__init__.py
#
"""
Configuration handling sub-package for caserun.

Exports the loading function and core configuration models.
"""

from .loader import import_object, load_config
from .models import (
    CaserunConfig,
    DiscoveryConfig,
    ExecutionConfig,
    GlobalConfig,
    IdentifierConfig,
)

__all__ = [
    "CaserunConfig",
    "DiscoveryConfig",
    "ExecutionConfig",
    "GlobalConfig",
    "IdentifierConfig",
    "import_object",
    "load_config",
]

# 🔼⚙️
