# src/repeater/plugins/__init__.py
"""Plugin system: record processors via pluggy.

- Base class: BaseProcessor with declared relationships and options
- Config: pydantic-based option validation
- Descriptors: operator-facing metadata
- Manager: plugin discovery and registration
- Hookspecs: pluggy hook definitions
"""

from repeater.plugins.base import BaseProcessor
from repeater.plugins.config_base import PluginConfig, PluginConfigError
from repeater.plugins.descriptors import PropertyDescriptor, Relationship, WritesAttribute
from repeater.plugins.hookspecs import hookimpl, hookspec
from repeater.plugins.manager import PluginManager, PluginSpec

__all__ = [
    # Base class
    "BaseProcessor",
    # Config
    "PluginConfig",
    "PluginConfigError",
    # Descriptors
    "PropertyDescriptor",
    "Relationship",
    "WritesAttribute",
    # Hookspecs
    "hookimpl",
    "hookspec",
    # Manager
    "PluginManager",
    "PluginSpec",
]
