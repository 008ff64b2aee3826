"""Shared test fixtures for LayerDog."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from layerdog.engine.core import LayerEngine
from layerdog.rules.store import CONFIG_DIR_ENV, RULES_FILE_NAME, RuleStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def sample_rules() -> dict[str, Any]:
    """A small but complete rule document (as decoded JSON)."""
    return {
        "version": "1.0",
        "description": "test rules",
        "layers": {
            "CONTROLLER": {
                "name": "Controller Layer",
                "description": "Entry points",
                "detection": {
                    "classNamePatterns": {"suffixes": ["Controller"]},
                    "annotations": ["RestController"],
                },
                "allowedCalls": ["DTO"],
                "rules": {
                    "businessLogicProhibited": True,
                    "businessLogicMessage": "Controller '{className}' has business logic",
                },
            },
            "DTO": {
                "name": "DTO Layer",
                "description": "Data carriers",
                "detection": {"classNamePatterns": {"suffixes": ["DTO", "Request"]}},
                "allowedCalls": ["API"],
                "rules": {
                    "businessLogicProhibited": True,
                    "businessLogicPatterns": ["calculate", "validate"],
                },
            },
            "API": {
                "name": "API Layer",
                "description": "Business logic",
                "detection": {
                    "classNamePatterns": {"suffixes": ["Service", "Manager"]},
                    "annotations": ["Service"],
                },
                "allowedCalls": ["DAO", "FLOW"],
                "rules": {
                    "directApiCallsProhibited": True,
                    "directDataAccessPatterns": ["select", "insert"],
                    "directDataAccessIndicators": ["sql", "db"],
                },
            },
            "FLOW": {
                "name": "Flow Layer",
                "description": "Orchestration",
                "detection": {"classNamePatterns": {"suffixes": ["Flow"]}},
                "allowedCalls": ["API"],
            },
            "DAO": {
                "name": "DAO Layer",
                "description": "Persistence",
                "detection": {
                    "classNamePatterns": {"suffixes": ["DAO", "Repository"]},
                    "packagePatterns": {"contains": [".dao"]},
                },
                "allowedCalls": [],
                "rules": {
                    "businessLogicProhibited": True,
                    "businessLogicPatterns": ["calculate"],
                    "directDataAccessPatterns": ["find", "save"],
                },
            },
        },
        "globalRules": {
            "businessLogicDetection": {
                "complexLogicThreshold": {
                    "ifStatements": 2,
                    "switchStatements": 0,
                    "loopStatements": 0,
                },
                "calculationLogicThreshold": {
                    "assignmentExpressions": 3,
                    "binaryExpressions": 5,
                },
            },
            "javaLibraryPackages": ["java.", "javax."],
            "databaseRelatedPatterns": {
                "classNames": ["JdbcTemplate", "EntityManager"],
                "packages": ["jdbc"],
            },
        },
        "violationMessages": {
            "CONTROLLER_TO_API": "{fromClass} must not call {toClass}",
            "GENERIC": "{fromLayer} cannot call {toLayer}; allowed: {allowedLayers}",
        },
        "quickFixes": {
            "moveToDTO": {"name": "Move to DTO", "description": "Route through a DTO"},
        },
    }


@pytest.fixture(autouse=True)
def _isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep every test away from the real ~/.layerdog."""
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path / "home-layerdog"))


@pytest.fixture()
def rules_data() -> dict[str, Any]:
    """A fresh copy of :func:`sample_rules` for tests that modify it."""
    return sample_rules()


@pytest.fixture()
def rules_path(tmp_path: Path) -> Path:
    """Location of an external rules file (not created)."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir / RULES_FILE_NAME


@pytest.fixture()
def write_rules(rules_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Write a rule document to the external rules file."""

    def _write(data: dict[str, Any]) -> Path:
        rules_path.write_text(json.dumps(data), encoding="utf-8")
        return rules_path

    return _write


@pytest.fixture()
def engine(write_rules: Callable[[dict[str, Any]], Path]) -> LayerEngine:
    """An engine loaded from :func:`sample_rules`, not watching."""
    path = write_rules(sample_rules())
    return LayerEngine(RuleStore(path)).start(watch=False)


@pytest.fixture()
def bundled_engine(rules_path: Path) -> LayerEngine:
    """An engine running on the bundled default rules."""
    return LayerEngine(RuleStore(rules_path)).start(watch=False)


def _no_bundled_rules() -> str:
    msg = "bundled rules missing"
    raise OSError(msg)


@pytest.fixture()
def empty_engine(rules_path: Path) -> LayerEngine:
    """An engine with no rule document at all."""
    store = RuleStore(rules_path, bundled_reader=_no_bundled_rules)
    return LayerEngine(store).start(watch=False)
