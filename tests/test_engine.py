"""Tests for layerdog.engine.core — the engine facade and the default instance."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

from layerdog.engine import core
from layerdog.engine.core import LayerEngine, get_default_engine, reset_default_engine
from layerdog.engine.descriptors import ClassDescriptor, MethodBody
from layerdog.rules.models import Layer, SoundConfiguration
from layerdog.rules.store import SOURCE_BUNDLED, RuleStore

if TYPE_CHECKING:
    from pathlib import Path


class TestBundledDefaults:
    def test_classification(self, bundled_engine: LayerEngine) -> None:
        controller = ClassDescriptor.from_qualified_name("com.example.web.UserController")
        service = ClassDescriptor.from_qualified_name(
            "com.example.users.UserLogic", ("org.springframework.stereotype.Service",)
        )
        repo = ClassDescriptor.from_qualified_name("com.example.data.UserRepository")
        assert bundled_engine.classify(controller) is Layer.CONTROLLER
        assert bundled_engine.classify(service) is Layer.API
        assert bundled_engine.classify(repo) is Layer.DAO

    def test_allowed_calls(self, bundled_engine: LayerEngine) -> None:
        assert bundled_engine.is_valid_call(Layer.CONTROLLER, Layer.API) is False
        assert bundled_engine.is_valid_call(Layer.CONTROLLER, Layer.DTO) is True
        assert bundled_engine.is_valid_call(Layer.API, Layer.FLOW) is True

    def test_violation_message(self, bundled_engine: LayerEngine) -> None:
        message = bundled_engine.violation_message(
            Layer.CONTROLLER, Layer.API, "UserController", "UserService"
        )
        assert "UserController" in message
        assert "UserService" in message

    def test_business_logic(self, bundled_engine: LayerEngine) -> None:
        controller = ClassDescriptor.from_qualified_name("com.example.web.UserController")
        assert bundled_engine.has_business_logic(controller, [MethodBody(conditionals=7)])
        assert not bundled_engine.has_business_logic(controller, [MethodBody(conditionals=6)])

    def test_sound_disabled_by_default(self, bundled_engine: LayerEngine) -> None:
        assert bundled_engine.sound_configuration().enabled is False


class TestLifecycle:
    def test_start_loads(self, rules_path: Path) -> None:
        engine = LayerEngine(RuleStore(rules_path))
        assert engine.document is None
        engine.start(watch=False)
        assert engine.document is not None
        assert engine.store.source == SOURCE_BUNDLED

    def test_context_manager_stops_watcher(self, rules_path: Path) -> None:
        with LayerEngine(RuleStore(rules_path)).start() as engine:
            assert engine.store.is_watching is True
        assert engine.store.is_watching is False

    def test_sound_configuration_without_document(self, empty_engine: LayerEngine) -> None:
        assert empty_engine.sound_configuration() == SoundConfiguration()

    def test_layer_rules(self, engine: LayerEngine) -> None:
        rules = engine.layer_rules(Layer.API)
        assert rules is not None
        assert rules.direct_api_calls_prohibited is True

    def test_layer_rules_without_document(self, empty_engine: LayerEngine) -> None:
        assert empty_engine.layer_rules(Layer.API) is None


class TestConfigurationDelegation:
    def test_initialize_and_reset(self, rules_path: Path) -> None:
        engine = LayerEngine(RuleStore(rules_path))
        assert engine.configuration_path() == rules_path
        assert engine.has_external_configuration() is False
        assert engine.initialize_configuration() is True
        assert engine.has_external_configuration() is True
        assert engine.reset_configuration() is True


class TestDefaultEngine:
    def test_singleton(self) -> None:
        reset_default_engine()
        try:
            with patch.object(core.LayerEngine, "start", autospec=True) as start:
                start.side_effect = lambda self, **_: self
                first = get_default_engine()
                second = get_default_engine()
            assert first is second
            assert start.call_count == 1
        finally:
            reset_default_engine()

    def test_reset_creates_new_instance(self) -> None:
        reset_default_engine()
        try:
            with patch.object(core.LayerEngine, "start", autospec=True) as start:
                start.side_effect = lambda self, **_: self
                first = get_default_engine()
                reset_default_engine()
                second = get_default_engine()
            assert first is not second
        finally:
            reset_default_engine()
