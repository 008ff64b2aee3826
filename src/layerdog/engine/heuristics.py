"""Business-logic heuristic based on counts of syntactic constructs.

A method "contains business logic" when either

* its conditionals + switches + loops exceed the *sum* of the three
  ``complexLogicThreshold`` values, or
* its assignments or binary expressions exceed their
  ``calculationLogicThreshold`` value.

All comparisons are strict.  The check only applies to layers whose rules set
``businessLogicProhibited``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from layerdog.engine.classifier import detect_layer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from layerdog.engine.descriptors import ClassDescriptor, MethodBody
    from layerdog.rules.models import BusinessLogicDetection, Layer, LayerSpecificRules
    from layerdog.rules.store import RuleStore

logger = logging.getLogger(__name__)


def method_has_complex_logic(body: MethodBody, thresholds: BusinessLogicDetection) -> bool:
    return body.complex_score > thresholds.complex_logic_threshold.total


def method_has_calculation_logic(body: MethodBody, thresholds: BusinessLogicDetection) -> bool:
    calc = thresholds.calculation_logic_threshold
    return (
        body.assignments > calc.assignment_expressions
        or body.binary_expressions > calc.binary_expressions
    )


class BusinessLogicHeuristic:
    def __init__(self, store: RuleStore) -> None:
        self._store = store

    def _layer_rules(self, layer: Layer) -> LayerSpecificRules | None:
        document = self._store.active_document()
        if document is None:
            return None
        definition = document.layer(layer)
        return definition.rules if definition is not None else None

    def has_business_logic(
        self, descriptor: ClassDescriptor, method_bodies: Iterable[MethodBody]
    ) -> bool:
        """Return True if any method of a policed class trips a threshold."""
        document = self._store.active_document()
        if document is None:
            return False

        definition = document.layer(detect_layer(document, descriptor))
        if definition is None or not definition.rules.business_logic_prohibited:
            return False

        thresholds = document.global_rules.business_logic_detection
        for body in method_bodies:
            if method_has_complex_logic(body, thresholds) or method_has_calculation_logic(
                body, thresholds
            ):
                logger.debug("Business logic detected in %s", descriptor.qualified_name)
                return True
        return False

    def has_business_logic_pattern(self, method_name: str, layer: Layer) -> bool:
        """Return True if *method_name* contains one of the layer's business-logic names."""
        rules = self._layer_rules(layer)
        if rules is None:
            return False
        name = method_name.lower()
        return any(pattern.lower() in name for pattern in rules.business_logic_patterns)

    def has_direct_data_access_pattern(self, method_name: str, layer: Layer) -> bool:
        """Return True if *method_name* contains both an access pattern and an indicator.

        ``selectFromSqlDb`` matches pattern ``select`` and indicator ``sql``;
        ``selectUserData`` has no indicator and does not match.
        """
        rules = self._layer_rules(layer)
        if rules is None:
            return False
        name = method_name.lower()
        has_pattern = any(p.lower() in name for p in rules.direct_data_access_patterns)
        return has_pattern and any(
            i.lower() in name for i in rules.direct_data_access_indicators
        )

    def is_data_access_method(self, method_name: str, layer: Layer) -> bool:
        """Return True if *method_name* contains any of the layer's data access patterns."""
        rules = self._layer_rules(layer)
        if rules is None:
            return False
        name = method_name.lower()
        return any(p.lower() in name for p in rules.direct_data_access_patterns)
