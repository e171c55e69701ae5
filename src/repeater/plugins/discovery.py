"""Dynamic processor discovery by package scanning.

Scans the built-in processor package for classes that:
1. Inherit from BaseProcessor
2. Have a `name` class attribute
3. Are not abstract (no @abstractmethod methods without implementation)
"""

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType

from repeater.plugins.base import BaseProcessor

logger = logging.getLogger(__name__)

# Packages scanned for built-in processors (non-recursive)
PROCESSOR_PACKAGES: tuple[str, ...] = ("repeater.plugins.processors",)


def discover_processors_in_package(package_name: str) -> list[type[BaseProcessor]]:
    """Discover processor classes in one package.

    Processor code is system-owned. Import errors indicate bugs in our code
    and propagate unchanged.

    Args:
        package_name: Dotted name of the package to scan

    Returns:
        List of discovered processor classes, in module name order
    """
    package = importlib.import_module(package_name)
    discovered: list[type[BaseProcessor]] = []

    for module_info in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        if module_info.ispkg or module_info.name.startswith("_"):
            continue
        module = importlib.import_module(f"{package_name}.{module_info.name}")
        discovered.extend(_discover_in_module(module))

    return discovered


def _discover_in_module(module: ModuleType) -> list[type[BaseProcessor]]:
    discovered: list[type[BaseProcessor]] = []
    for class_name, obj in inspect.getmembers(module, inspect.isclass):
        # Must be defined in this module (not imported)
        if obj.__module__ != module.__name__:
            continue
        if not issubclass(obj, BaseProcessor) or obj is BaseProcessor:
            continue
        if inspect.isabstract(obj):
            continue

        plugin_name = getattr(obj, "name", None)
        if not plugin_name:
            logger.warning(
                "Class %s in %s inherits from BaseProcessor but has no/empty 'name' attribute - skipping",
                class_name,
                module.__name__,
            )
            continue

        discovered.append(obj)
    return discovered


def discover_all_processors() -> list[type[BaseProcessor]]:
    """Discover all built-in processors.

    Raises:
        ValueError: If two processors share a name
    """
    all_discovered: list[type[BaseProcessor]] = []
    seen: dict[str, type[BaseProcessor]] = {}

    for package_name in PROCESSOR_PACKAGES:
        for cls in discover_processors_in_package(package_name):
            if cls.name in seen:
                raise ValueError(
                    f"Duplicate processor name '{cls.name}': "
                    f"found in both {seen[cls.name].__module__} and {cls.__module__}. "
                    f"Processor names must be unique."
                )
            seen[cls.name] = cls
            all_discovered.append(cls)

    return all_discovered


def get_plugin_description(plugin_cls: type) -> str:
    """Extract description from plugin class docstring.

    Returns the first non-empty line of the docstring. If no docstring exists,
    returns a default message using the plugin name.
    """
    if plugin_cls.__doc__:
        for line in plugin_cls.__doc__.strip().split("\n"):
            cleaned = line.strip()
            if cleaned:
                return cleaned

    name = getattr(plugin_cls, "name", plugin_cls.__name__)
    return f"{name} plugin"


def create_dynamic_hookimpl(plugin_classes: list[type[BaseProcessor]]) -> object:
    """Create a pluggy hookimpl object returning ``plugin_classes``.

    Args:
        plugin_classes: Processor classes to register

    Returns:
        Object instance with the decorated repeater_get_processors hook
    """
    from repeater.plugins.hookspecs import hookimpl

    class DynamicHookImpl:
        """Dynamically generated hook implementer."""

        @hookimpl
        def repeater_get_processors(self) -> list[type[BaseProcessor]]:
            return list(plugin_classes)

    return DynamicHookImpl()
