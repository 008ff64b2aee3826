"""Layer classifier: map a class descriptor to its architectural layer."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from layerdog.engine.cache import ClassificationCache
from layerdog.rules.models import Layer

if TYPE_CHECKING:
    from layerdog.engine.descriptors import ClassDescriptor
    from layerdog.rules.models import LayerDetection, RuleDocument
    from layerdog.rules.store import RuleStore

logger = logging.getLogger(__name__)


def matches_detection(descriptor: ClassDescriptor, detection: LayerDetection) -> bool:
    """Return True if the class name, package, or an annotation matches *detection*.

    All comparisons are case-insensitive.  A detection with no patterns never
    matches.
    """
    name = descriptor.simple_name.lower()
    names = detection.class_name_patterns
    if (
        any(name.endswith(s.lower()) for s in names.suffixes)
        or any(name.startswith(p.lower()) for p in names.prefixes)
        or any(c.lower() in name for c in names.contains)
    ):
        return True

    package = descriptor.package_name.lower()
    packages = detection.package_patterns
    if any(c.lower() in package for c in packages.contains) or any(
        e.lower() == package for e in packages.exact
    ):
        return True

    # Substring match also covers an exact annotation name.
    wanted = [a.lower() for a in detection.annotations]
    return any(
        pattern in annotation.lower()
        for annotation in descriptor.annotation_qualified_names
        for pattern in wanted
    )


def detect_layer(document: RuleDocument, descriptor: ClassDescriptor) -> Layer:
    """Return the first layer of *document* whose detection matches, else UNKNOWN."""
    for key, definition in document.layers.items():
        if matches_detection(descriptor, definition.detection):
            return key
    return Layer.UNKNOWN


class LayerClassifier:
    """First-match classifier over the active document's layer definitions.

    Layers are tried in the order they are declared in the rules file; the
    first whose detection matches wins.  Results are memoized per qualified
    name until the store reloads.
    """

    def __init__(self, store: RuleStore, cache: ClassificationCache | None = None) -> None:
        self._store = store
        self.cache = cache if cache is not None else ClassificationCache()
        store.subscribe(self.invalidate)

    def invalidate(self) -> None:
        logger.debug("Clearing classification cache (%d entries)", len(self.cache))
        self.cache.clear()

    def classify(self, descriptor: ClassDescriptor) -> Layer:
        # Read the generation before the document: a reload in between makes
        # the put below a no-op instead of caching a stale answer.
        generation = self.cache.generation
        document = self._store.active_document()
        if document is None:
            return Layer.UNKNOWN

        cached = self.cache.get(descriptor.qualified_name)
        if cached is not None:
            return cached

        layer = detect_layer(document, descriptor)
        self.cache.put(descriptor.qualified_name, layer, generation=generation)
        return layer
