"""LayerEngine: the API inspection adapters call into.

One engine owns one :class:`RuleStore` and the components reading from it.
Adapters normally receive an engine explicitly; :func:`get_default_engine`
provides the lazily created process-wide instance.
"""

from __future__ import annotations

import atexit
import logging
import threading
from typing import TYPE_CHECKING

from layerdog.engine.classifier import LayerClassifier
from layerdog.engine.heuristics import BusinessLogicHeuristic
from layerdog.engine.messages import MessageFormatter
from layerdog.engine.validator import CallValidator
from layerdog.rules.models import SoundConfiguration
from layerdog.rules.store import RuleStore

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from layerdog.engine.descriptors import ClassDescriptor, MethodBody
    from layerdog.rules.models import (
        Layer,
        LayerSpecificRules,
        QuickFixDefinition,
        RuleDocument,
    )

logger = logging.getLogger(__name__)


class LayerEngine:
    """Classification, call validation, heuristics and messages over one store."""

    def __init__(self, store: RuleStore | None = None) -> None:
        self.store = store if store is not None else RuleStore()
        self.classifier = LayerClassifier(self.store)
        self.validator = CallValidator(self.store)
        self.heuristic = BusinessLogicHeuristic(self.store)
        self.formatter = MessageFormatter(self.store)

    # -- lifecycle ----------------------------------------------------------

    def start(self, *, watch: bool = True) -> LayerEngine:
        """Load the rules and, if requested, start watching the rules file."""
        self.store.load()
        if watch:
            self.store.watch()
        return self

    def close(self) -> None:
        self.store.stop()

    def __enter__(self) -> LayerEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def document(self) -> RuleDocument | None:
        return self.store.active_document()

    # -- classification and validation ---------------------------------------

    def classify(self, descriptor: ClassDescriptor) -> Layer:
        return self.classifier.classify(descriptor)

    def is_valid_call(self, from_layer: Layer, to_layer: Layer) -> bool:
        return self.validator.is_valid_call(from_layer, to_layer)

    def is_library_call(self, qualified_name: str | None) -> bool:
        return self.validator.is_library_call(qualified_name)

    def is_database_related(self, descriptor: ClassDescriptor) -> bool:
        return self.validator.is_database_related(descriptor)

    def has_business_logic(
        self, descriptor: ClassDescriptor, method_bodies: Iterable[MethodBody]
    ) -> bool:
        return self.heuristic.has_business_logic(descriptor, method_bodies)

    def has_business_logic_pattern(self, method_name: str, layer: Layer) -> bool:
        return self.heuristic.has_business_logic_pattern(method_name, layer)

    def has_direct_data_access_pattern(self, method_name: str, layer: Layer) -> bool:
        return self.heuristic.has_direct_data_access_pattern(method_name, layer)

    def is_data_access_method(self, method_name: str, layer: Layer) -> bool:
        return self.heuristic.is_data_access_method(method_name, layer)

    def layer_rules(self, layer: Layer) -> LayerSpecificRules | None:
        document = self.store.active_document()
        definition = document.layer(layer) if document is not None else None
        return definition.rules if definition is not None else None

    # -- messages -----------------------------------------------------------

    def violation_message(
        self, from_layer: Layer, to_layer: Layer, from_class: str, to_class: str
    ) -> str:
        return self.formatter.violation_message(from_layer, to_layer, from_class, to_class)

    def business_logic_message(self, layer: Layer, class_name: str) -> str:
        return self.formatter.business_logic_message(layer, class_name)

    def get_quick_fix(self, key: str) -> QuickFixDefinition | None:
        return self.formatter.quick_fix(key)

    def sound_configuration(self) -> SoundConfiguration:
        document = self.store.active_document()
        if document is None:
            return SoundConfiguration()
        return document.global_rules.sound_configuration

    # -- configuration files ------------------------------------------------

    def initialize_configuration(self) -> bool:
        return self.store.initialize_external_configuration()

    def reset_configuration(self) -> bool:
        return self.store.reset_to_defaults()

    def has_external_configuration(self) -> bool:
        return self.store.has_external_configuration()

    def configuration_path(self) -> Path:
        return self.store.external_configuration_path()


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_default_engine: LayerEngine | None = None
_default_lock = threading.Lock()


def get_default_engine() -> LayerEngine:
    """Return the process-wide engine, creating and starting it on first use."""
    global _default_engine  # noqa: PLW0603
    with _default_lock:
        if _default_engine is None:
            engine = LayerEngine().start()
            atexit.register(engine.close)
            _default_engine = engine
            logger.debug("Created default LayerEngine (rules: %s)", engine.store.source)
        return _default_engine


def reset_default_engine() -> None:
    """Stop and forget the process-wide engine."""
    global _default_engine  # noqa: PLW0603
    with _default_lock:
        engine, _default_engine = _default_engine, None
    if engine is not None:
        atexit.unregister(engine.close)
        engine.close()
