"""Plugin manager for discovery, registration, and lookup.

Uses pluggy for hook-based plugin registration.
"""

from dataclasses import dataclass
from typing import Any

import pluggy

from repeater.contracts import Determinism
from repeater.plugins.base import BaseProcessor
from repeater.plugins.hookspecs import PROJECT_NAME, RepeaterProcessorSpec


@dataclass(frozen=True)
class PluginSpec:
    """Registration record for a processor.

    Frozen for immutability - plugin specs shouldn't change after creation.
    """

    name: str
    version: str
    determinism: Determinism
    relationships: tuple[str, ...]
    tags: tuple[str, ...] = ()

    @classmethod
    def from_plugin(cls, plugin_cls: type[BaseProcessor]) -> "PluginSpec":
        """Create spec from a processor class."""
        return cls(
            name=plugin_cls.name,
            version=plugin_cls.plugin_version,
            determinism=plugin_cls.determinism,
            relationships=tuple(rel.name for rel in plugin_cls.relationships),
            tags=plugin_cls.tags,
        )


class PluginManager:
    """Manages processor discovery, registration, and lookup.

    Usage:
        manager = PluginManager()
        manager.register_builtin_plugins()

        counter_cls = manager.get_processor_by_name("repeat_counter")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RepeaterProcessorSpec)

        # Map name to plugin class for duplicate detection
        self._processors: dict[str, type[BaseProcessor]] = {}

    def register_builtin_plugins(self) -> None:
        """Discover and register all built-in processors.

        Call this once at startup to make built-in processors discoverable.
        """
        from repeater.plugins.discovery import create_dynamic_hookimpl, discover_all_processors

        self.register(create_dynamic_hookimpl(discover_all_processors()))

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin instance implementing hook methods
        """
        self._pm.register(plugin)
        self._refresh_caches()

    def _refresh_caches(self) -> None:
        """Refresh plugin caches from hooks.

        Raises:
            ValueError: If a processor with the same name is already registered
        """
        new_processors: dict[str, type[BaseProcessor]] = {}

        for processors in self._pm.hook.repeater_get_processors():
            for cls in processors:
                name = cls.name
                if name in new_processors:
                    raise ValueError(f"Duplicate processor plugin name: '{name}'. Already registered by {new_processors[name].__name__}")
                new_processors[name] = cls

        self._processors = new_processors

    def get_processors(self) -> list[type[BaseProcessor]]:
        """Get all registered processors."""
        return list(self._processors.values())

    def get_processor_by_name(self, name: str) -> type[BaseProcessor] | None:
        """Get processor class by name."""
        return self._processors.get(name)

    def get_specs(self) -> list[PluginSpec]:
        """Get registration records for all processors, sorted by name."""
        return [PluginSpec.from_plugin(cls) for cls in sorted(self._processors.values(), key=lambda c: c.name)]
