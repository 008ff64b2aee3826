"""Calling convention shared by the per-layer inspections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from layerdog.rules.models import Layer

if TYPE_CHECKING:
    from layerdog.engine.core import LayerEngine
    from layerdog.engine.descriptors import ClassDescriptor
    from layerdog.inspections.model import CallSite, ClassModel, MethodModel


@dataclass(frozen=True)
class Violation:
    """A single problem reported by an inspection."""

    inspection: str
    layer: str
    class_name: str
    message: str
    method_name: str | None = None  # calling method, for call-site problems
    target_class: str | None = None
    quick_fix: str | None = None  # key into the document's quickFixes
    severity: str = "warning"


class BaseLayerInspection:
    """Inspects classes of one layer: once per class, then once per outgoing call.

    Calls to the class itself, to unresolved targets, and to standard library
    packages are never passed to :meth:`check_call`.
    """

    name: ClassVar[str] = ""
    layer: ClassVar[Layer] = Layer.UNKNOWN

    def __init__(self, engine: LayerEngine) -> None:
        self.engine = engine

    def inspect(self, model: ClassModel) -> list[Violation]:
        if self.engine.classify(model.descriptor) is not self.layer:
            return []

        violations = list(self.check_class(model))
        for method in model.methods:
            for call in method.calls:
                target = call.target
                if target is None or target.qualified_name == model.descriptor.qualified_name:
                    continue
                if self.engine.is_library_call(target.qualified_name):
                    continue
                violations.extend(self.check_call(model, method, call, target))
        return violations

    def check_class(self, model: ClassModel) -> list[Violation]:
        return []

    def check_call(
        self,
        model: ClassModel,
        method: MethodModel,
        call: CallSite,
        target: ClassDescriptor,
    ) -> list[Violation]:
        return []

    # -- helpers ------------------------------------------------------------

    def violation(
        self,
        model: ClassModel,
        message: str,
        quick_fix: str | None = None,
        *,
        method: MethodModel | None = None,
        target: ClassDescriptor | None = None,
    ) -> Violation:
        return Violation(
            inspection=self.name,
            layer=self.layer.value,
            class_name=model.descriptor.qualified_name,
            message=message,
            method_name=method.name if method is not None else None,
            target_class=target.qualified_name if target is not None else None,
            quick_fix=quick_fix,
        )

    def business_logic_violation(self, model: ClassModel, quick_fix: str) -> list[Violation]:
        """Report the class if the business-logic heuristic trips."""
        if not self.engine.has_business_logic(model.descriptor, model.method_bodies):
            return []
        message = self.engine.business_logic_message(self.layer, model.name)
        return [self.violation(model, message, quick_fix)]

    def layer_call_violation(
        self,
        model: ClassModel,
        method: MethodModel,
        target: ClassDescriptor,
        target_layer: Layer,
        quick_fix: str,
    ) -> Violation:
        message = self.engine.violation_message(
            self.layer, target_layer, model.name, target.simple_name
        )
        return self.violation(model, message, quick_fix, method=method, target=target)
