# src/repeater/plugins/base.py
"""Base class for processor implementations.

Processors MUST subclass BaseProcessor. Plugin discovery uses issubclass()
checks against it, and __init_subclass__ enforces that every concrete
processor declares its host-facing metadata.

Lifecycle Contract (all hooks called by the runner on one thread):
    __init__(options) -> on_trigger(session) * N

- __init__: Validates options. Raises PluginConfigError on bad config, so a
  misconfigured processor is never scheduled.
- on_trigger: Handles at most one record per call. Returns immediately when
  the session has nothing queued.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from repeater.contracts import Determinism, ProcessSession
from repeater.plugins.config_base import PluginConfig
from repeater.plugins.descriptors import PropertyDescriptor, Relationship, WritesAttribute


class BaseProcessor(ABC):
    """Base class for all record processors.

    Subclasses declare:
        name: Registry name (e.g. "repeat_counter")
        config_model: PluginConfig subclass that validates options
        relationships: Output channels the processor may transfer to
        property_descriptors: Options as shown to operators
        writes_attributes: Attributes written onto records

    Example:
        class Tagger(BaseProcessor):
            name = "tagger"
            config_model = TaggerConfig
            relationships = (Relationship("success", "Tagged records."),)

            def on_trigger(self, session: ProcessSession) -> None:
                record = session.get()
                if record is None:
                    return
                record = session.put_all_attributes(record, {"tag": self.config.tag})
                session.transfer(record, "success")
    """

    name: ClassVar[str]
    config_model: ClassVar[type[PluginConfig]]
    relationships: ClassVar[tuple[Relationship, ...]] = ()
    property_descriptors: ClassVar[tuple[PropertyDescriptor, ...]] = ()
    writes_attributes: ClassVar[tuple[WritesAttribute, ...]] = ()
    tags: ClassVar[tuple[str, ...]] = ()
    capability_description: ClassVar[str] = ""

    determinism: ClassVar[Determinism] = Determinism.DETERMINISTIC
    plugin_version: ClassVar[str] = "0.0.0"

    # Host hints: no side effects outside the session, safe to batch
    side_effect_free: ClassVar[bool] = False
    supports_batching: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "name" in cls.__dict__ and not cls.relationships:
            raise TypeError(f"{cls.__name__} must declare at least one relationship")

    def __init__(self, options: dict[str, Any]) -> None:
        """Initialize with options.

        Args:
            options: Raw processor options, validated via config_model

        Raises:
            PluginConfigError: If options are invalid
        """
        self.options = dict(options)
        self.config = self.config_model.from_dict(options)

    @classmethod
    def relationship_names(cls) -> frozenset[str]:
        """Names of every declared relationship."""
        return frozenset(rel.name for rel in cls.relationships)

    @abstractmethod
    def on_trigger(self, session: ProcessSession) -> None:
        """Process at most one record from the session."""
        ...
