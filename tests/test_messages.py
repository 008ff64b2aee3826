"""Tests for layerdog.engine.messages — template lookup and filling."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import patch

from layerdog.engine.core import LayerEngine
from layerdog.engine.messages import (
    DEFAULT_BUSINESS_LOGIC_MESSAGE,
    DEFAULT_VIOLATION_MESSAGE,
    fill_template,
    message_key,
)
from layerdog.rules.models import Layer, parse_document
from layerdog.rules.store import RuleStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class TestHelpers:
    def test_message_key(self) -> None:
        assert message_key(Layer.CONTROLLER, Layer.API) == "CONTROLLER_TO_API"

    def test_fill_template_literal(self) -> None:
        assert fill_template("{a} and {a}, not {b}", {"a": "x"}) == "x and x, not {b}"

    def test_fill_template_no_format_semantics(self) -> None:
        assert fill_template("{a:>5} {a}", {"a": "x"}) == "{a:>5} x"


class TestViolationMessage:
    def test_specific_template(self, engine: LayerEngine) -> None:
        message = engine.violation_message(
            Layer.CONTROLLER, Layer.API, "UserController", "UserService"
        )
        assert message == "UserController must not call UserService"

    def test_generic_fallback(self, engine: LayerEngine) -> None:
        message = engine.violation_message(Layer.API, Layer.CONTROLLER, "A", "B")
        assert message == "API cannot call CONTROLLER; allowed: DAO, FLOW"

    def test_empty_allowed_layers(self, engine: LayerEngine) -> None:
        message = engine.violation_message(Layer.DAO, Layer.API, "A", "B")
        assert message == "DAO cannot call API; allowed: "

    def test_literal_fallback(
        self,
        write_rules: Callable[[dict[str, Any]], Path],
        rules_data: dict[str, Any],
    ) -> None:
        rules_data["violationMessages"] = {}
        engine = LayerEngine(RuleStore(write_rules(rules_data))).start(watch=False)
        message = engine.violation_message(Layer.DAO, Layer.API, "A", "B")
        assert message == DEFAULT_VIOLATION_MESSAGE

    def test_empty_template_falls_through(
        self,
        write_rules: Callable[[dict[str, Any]], Path],
        rules_data: dict[str, Any],
    ) -> None:
        rules_data["violationMessages"]["CONTROLLER_TO_API"] = ""
        engine = LayerEngine(RuleStore(write_rules(rules_data))).start(watch=False)
        message = engine.violation_message(Layer.CONTROLLER, Layer.API, "A", "B")
        assert message == "CONTROLLER cannot call API; allowed: DTO"

    def test_no_document(self, empty_engine: LayerEngine) -> None:
        message = empty_engine.violation_message(Layer.CONTROLLER, Layer.API, "A", "B")
        assert message == DEFAULT_VIOLATION_MESSAGE

    def test_allowed_layers_from_same_document(self, engine: LayerEngine) -> None:
        replacement = parse_document({"layers": {"API": {"allowedCalls": ["DAO"]}}})
        with patch.object(
            engine.store, "active_document", side_effect=[engine.document, replacement]
        ) as active:
            message = engine.violation_message(Layer.API, Layer.CONTROLLER, "A", "B")
        assert message == "API cannot call CONTROLLER; allowed: DAO, FLOW"
        assert active.call_count == 1


class TestBusinessLogicMessage:
    def test_template(self, engine: LayerEngine) -> None:
        message = engine.business_logic_message(Layer.CONTROLLER, "UserController")
        assert message == "Controller 'UserController' has business logic"

    def test_missing_template(self, engine: LayerEngine) -> None:
        assert engine.business_logic_message(Layer.DTO, "X") == DEFAULT_BUSINESS_LOGIC_MESSAGE

    def test_no_document(self, empty_engine: LayerEngine) -> None:
        message = empty_engine.business_logic_message(Layer.CONTROLLER, "X")
        assert message == DEFAULT_BUSINESS_LOGIC_MESSAGE


class TestQuickFix:
    def test_known(self, engine: LayerEngine) -> None:
        fix = engine.get_quick_fix("moveToDTO")
        assert fix is not None
        assert fix.name == "Move to DTO"

    def test_unknown(self, engine: LayerEngine) -> None:
        assert engine.get_quick_fix("doesNotExist") is None

    def test_no_document(self, empty_engine: LayerEngine) -> None:
        assert empty_engine.get_quick_fix("moveToDTO") is None
