"""The five per-layer inspections."""

from __future__ import annotations

from typing import TYPE_CHECKING

from layerdog.engine.messages import fill_template
from layerdog.inspections.base import BaseLayerInspection, Violation
from layerdog.rules.models import Layer

if TYPE_CHECKING:
    from layerdog.engine.descriptors import ClassDescriptor
    from layerdog.inspections.model import CallSite, ClassModel, MethodModel


class ControllerLayerInspection(BaseLayerInspection):
    """Controllers stay thin and only talk to DTOs."""

    name = "controller-layer"
    layer = Layer.CONTROLLER

    def check_class(self, model: ClassModel) -> list[Violation]:
        return self.business_logic_violation(model, "extractBusinessLogic")

    def check_call(
        self,
        model: ClassModel,
        method: MethodModel,
        call: CallSite,
        target: ClassDescriptor,
    ) -> list[Violation]:
        target_layer = self.engine.classify(target)
        if self.engine.is_valid_call(self.layer, target_layer):
            return []
        return [self.layer_call_violation(model, method, target, target_layer, "moveToDTO")]


class DTOLayerInspection(BaseLayerInspection):
    """DTOs carry data and delegate to the API layer."""

    name = "dto-layer"
    layer = Layer.DTO

    def check_class(self, model: ClassModel) -> list[Violation]:
        return self.business_logic_violation(model, "moveBusinessLogicToAPI")

    def check_call(
        self,
        model: ClassModel,
        method: MethodModel,
        call: CallSite,
        target: ClassDescriptor,
    ) -> list[Violation]:
        violations: list[Violation] = []
        target_layer = self.engine.classify(target)
        if not self.engine.is_valid_call(self.layer, target_layer):
            violations.append(
                self.layer_call_violation(model, method, target, target_layer, "useAPILayer")
            )

        if self.engine.has_business_logic_pattern(call.method_name, self.layer):
            message = (
                f"DTO '{model.name}' method '{call.method_name}' appears to contain "
                "business logic. Consider moving to API layer."
            )
            violations.append(
                self.violation(
                    model, message, "moveBusinessLogicToAPI", method=method, target=target
                )
            )
        return violations


class APILayerInspection(BaseLayerInspection):
    """APIs hold business logic, reach data through DAOs, and never call each other."""

    name = "api-layer"
    layer = Layer.API

    def check_call(
        self,
        model: ClassModel,
        method: MethodModel,
        call: CallSite,
        target: ClassDescriptor,
    ) -> list[Violation]:
        target_layer = self.engine.classify(target)

        if target_layer is Layer.API:
            rules = self.engine.layer_rules(self.layer)
            if rules is not None and rules.direct_api_calls_prohibited:
                if not rules.direct_api_call_message:
                    return [
                        self.layer_call_violation(
                            model, method, target, target_layer, "useFlowLayer"
                        )
                    ]
                message = fill_template(
                    rules.direct_api_call_message,
                    {"fromClass": model.name, "toClass": target.simple_name},
                )
                return [
                    self.violation(model, message, "useFlowLayer", method=method, target=target)
                ]

        violations: list[Violation] = []
        if not self.engine.is_valid_call(self.layer, target_layer):
            violations.append(
                self.layer_call_violation(model, method, target, target_layer, "refactorLayerCall")
            )

        if self.engine.has_direct_data_access_pattern(call.method_name, self.layer):
            message = (
                f"API '{model.name}' appears to have direct data access in method "
                f"'{call.method_name}'. Consider using DAO layer."
            )
            violations.append(
                self.violation(model, message, "createDAOMethod", method=method, target=target)
            )
        return violations


class FlowLayerInspection(BaseLayerInspection):
    """FLOW classes orchestrate several API calls."""

    name = "flow-layer"
    layer = Layer.FLOW

    def _api_call_count(self, method: MethodModel) -> int:
        return sum(
            1
            for call in method.calls
            if call.target is not None and self.engine.classify(call.target) is Layer.API
        )

    def check_class(self, model: ClassModel) -> list[Violation]:
        counts = [self._api_call_count(m) for m in model.methods if not m.is_constructor]
        if not any(counts):
            message = (
                f"FLOW '{model.name}' doesn't seem to orchestrate API calls. "
                "Consider if this belongs in the FLOW layer."
            )
            return [self.violation(model, message, "addAPIOrchestration")]
        if max(counts) < 2:
            message = (
                f"FLOW '{model.name}' only makes single API calls. "
                "Consider if this logic belongs in the API layer."
            )
            return [self.violation(model, message, "considerAPILayer")]
        return []

    def check_call(
        self,
        model: ClassModel,
        method: MethodModel,
        call: CallSite,
        target: ClassDescriptor,
    ) -> list[Violation]:
        violations: list[Violation] = []
        target_layer = self.engine.classify(target)
        if not self.engine.is_valid_call(self.layer, target_layer):
            violations.append(
                self.layer_call_violation(model, method, target, target_layer, "refactorFlowCall")
            )

        if target_layer is Layer.API and self._api_call_count(method) == 1:
            message = (
                f"FLOW '{model.name}' method '{method.name}' makes only one API call to "
                f"'{target.simple_name}'. Consider moving this logic to the API layer."
            )
            violations.append(
                self.violation(model, message, "moveToAPILayer", method=method, target=target)
            )
        return violations


class DAOLayerInspection(BaseLayerInspection):
    """DAOs do persistence only."""

    name = "dao-layer"
    layer = Layer.DAO

    def _has_database_interaction(self, model: ClassModel) -> bool:
        for method in model.methods:
            if method.is_constructor:
                continue
            if self.engine.is_data_access_method(method.name, self.layer):
                return True
            for call in method.calls:
                if call.target is not None and self.engine.is_database_related(call.target):
                    return True
        return False

    def check_class(self, model: ClassModel) -> list[Violation]:
        violations = self.business_logic_violation(model, "moveBusinessLogicToAPI")
        if not self._has_database_interaction(model):
            message = (
                f"DAO '{model.name}' doesn't seem to have database interaction patterns. "
                "Consider if this belongs in the DAO layer."
            )
            violations.append(self.violation(model, message, "addDatabaseInteraction"))
        return violations

    def check_call(
        self,
        model: ClassModel,
        method: MethodModel,
        call: CallSite,
        target: ClassDescriptor,
    ) -> list[Violation]:
        violations: list[Violation] = []
        target_layer = self.engine.classify(target)
        if not self.engine.is_valid_call(
            self.layer, target_layer
        ) and not self.engine.is_database_related(target):
            violations.append(
                self.layer_call_violation(model, method, target, target_layer, "refactorDAOCall")
            )

        if self.engine.has_business_logic_pattern(call.method_name, self.layer):
            message = (
                f"DAO '{model.name}' method call '{call.method_name}' appears to involve "
                "business logic. DAOs should focus on data persistence."
            )
            violations.append(
                self.violation(
                    model, message, "moveBusinessLogicToAPI", method=method, target=target
                )
            )
        return violations


ALL_INSPECTIONS: tuple[type[BaseLayerInspection], ...] = (
    ControllerLayerInspection,
    DTOLayerInspection,
    APILayerInspection,
    FlowLayerInspection,
    DAOLayerInspection,
)
