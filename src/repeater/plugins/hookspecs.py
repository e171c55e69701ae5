# src/repeater/plugins/hookspecs.py
"""pluggy hooks through which processor classes reach the PluginManager.

Built-in processors are registered by discovery (see discovery.py), which
wraps the scanned classes in a generated hookimpl. An out-of-tree package
can register its own object carrying ``@hookimpl repeater_get_processors``.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from repeater.plugins.base import BaseProcessor

PROJECT_NAME = "repeater"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class RepeaterProcessorSpec:
    @hookspec
    def repeater_get_processors(self) -> list[type["BaseProcessor"]]:  # type: ignore[empty-body]
        """Processor classes (not instances) this plugin contributes."""
