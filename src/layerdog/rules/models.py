"""Rule document model: parse layer-rules.json into immutable dataclasses."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GENERIC_MESSAGE_KEY = "GENERIC"
_LEGACY_MESSAGES_KEY = "invalidLayerCall"


class Layer(str, enum.Enum):
    """Architectural layer a class belongs to."""

    CONTROLLER = "CONTROLLER"
    DTO = "DTO"
    API = "API"
    FLOW = "FLOW"
    DAO = "DAO"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str) -> Layer:
        """Return the layer named *value* (case-insensitive).

        Raises ``ValueError`` for names that are not layers.
        """
        try:
            return cls(value.strip().upper())
        except ValueError:
            msg = f"unknown layer '{value}', must be one of {[m.value for m in cls]}"
            raise ValueError(msg) from None


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassNamePatterns:
    suffixes: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()
    contains: tuple[str, ...] = ()


@dataclass(frozen=True)
class PackagePatterns:
    contains: tuple[str, ...] = ()
    exact: tuple[str, ...] = ()


@dataclass(frozen=True)
class LayerDetection:
    """Name, package and annotation patterns that identify a layer."""

    class_name_patterns: ClassNamePatterns = field(default_factory=ClassNamePatterns)
    package_patterns: PackagePatterns = field(default_factory=PackagePatterns)
    annotations: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        """Return True when no pattern could ever match."""
        names = self.class_name_patterns
        packages = self.package_patterns
        return not (
            names.suffixes
            or names.prefixes
            or names.contains
            or packages.contains
            or packages.exact
            or self.annotations
        )


@dataclass(frozen=True)
class LayerSpecificRules:
    business_logic_prohibited: bool = False
    business_logic_message: str = ""
    business_logic_patterns: tuple[str, ...] = ()
    direct_api_calls_prohibited: bool = False
    direct_api_call_message: str = ""
    direct_data_access_patterns: tuple[str, ...] = ()
    direct_data_access_indicators: tuple[str, ...] = ()


@dataclass(frozen=True)
class LayerDefinition:
    name: str
    description: str
    detection: LayerDetection
    allowed_calls: tuple[str, ...]  # layer keys, declaration order
    rules: LayerSpecificRules = field(default_factory=LayerSpecificRules)


@dataclass(frozen=True)
class ComplexLogicThreshold:
    if_statements: int = 0
    switch_statements: int = 0
    loop_statements: int = 0

    @property
    def total(self) -> int:
        return self.if_statements + self.switch_statements + self.loop_statements


@dataclass(frozen=True)
class CalculationLogicThreshold:
    assignment_expressions: int = 0
    binary_expressions: int = 0


@dataclass(frozen=True)
class BusinessLogicDetection:
    complex_logic_threshold: ComplexLogicThreshold = field(
        default_factory=ComplexLogicThreshold
    )
    calculation_logic_threshold: CalculationLogicThreshold = field(
        default_factory=CalculationLogicThreshold
    )


@dataclass(frozen=True)
class DatabaseRelatedPatterns:
    class_names: tuple[str, ...] = ()
    packages: tuple[str, ...] = ()


@dataclass(frozen=True)
class SoundConfiguration:
    """Sound settings for violation and hover events."""

    enabled: bool = False
    sound_file: str = ""
    volume: float = 0.7
    play_on_hover: bool = True
    play_on_inspection: bool = False
    debounce_ms: int = 1000  # minimum gap between two plays of the same event


@dataclass(frozen=True)
class GlobalRules:
    business_logic_detection: BusinessLogicDetection = field(
        default_factory=BusinessLogicDetection
    )
    java_library_packages: tuple[str, ...] = ()
    database_related_patterns: DatabaseRelatedPatterns = field(
        default_factory=DatabaseRelatedPatterns
    )
    sound_configuration: SoundConfiguration = field(default_factory=SoundConfiguration)


@dataclass(frozen=True)
class QuickFixDefinition:
    name: str
    description: str


@dataclass(frozen=True)
class RuleDocument:
    """A complete, immutable rule configuration snapshot.

    ``layers`` keeps the declaration order of the source file; the classifier
    relies on it for first-match precedence.
    """

    version: str
    description: str
    layers: dict[Layer, LayerDefinition]
    global_rules: GlobalRules
    violation_messages: dict[str, str]
    quick_fixes: dict[str, QuickFixDefinition]

    def layer(self, layer: Layer) -> LayerDefinition | None:
        return self.layers.get(layer)


# ---------------------------------------------------------------------------
# JSON parsing
# ---------------------------------------------------------------------------


def _mapping(data: dict[str, object], key: str, context: str) -> dict[str, object]:
    """Return ``data[key]`` as a mapping, ``{}`` when absent."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"{context}.{key} must be an object"
        raise ValueError(msg)
    return value


def _strings(data: dict[str, object], key: str, context: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        msg = f"{context}.{key} must be a list of strings"
        raise ValueError(msg)
    return tuple(str(item) for item in value)


def _int(data: dict[str, object], key: str, context: str, default: int = 0) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{context}.{key} must be an integer, got {value!r}"
        raise ValueError(msg)
    return value


def _bool(data: dict[str, object], key: str, context: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        msg = f"{context}.{key} must be true or false, got {value!r}"
        raise ValueError(msg)
    return value


def _str(data: dict[str, object], key: str, default: str = "") -> str:
    value = data.get(key)
    return default if value is None else str(value)


def _parse_detection(data: dict[str, object], context: str) -> LayerDetection:
    names = _mapping(data, "classNamePatterns", context)
    names_ctx = f"{context}.classNamePatterns"
    packages = _mapping(data, "packagePatterns", context)
    packages_ctx = f"{context}.packagePatterns"
    return LayerDetection(
        class_name_patterns=ClassNamePatterns(
            suffixes=_strings(names, "suffixes", names_ctx),
            prefixes=_strings(names, "prefixes", names_ctx),
            contains=_strings(names, "contains", names_ctx),
        ),
        package_patterns=PackagePatterns(
            contains=_strings(packages, "contains", packages_ctx),
            exact=_strings(packages, "exact", packages_ctx),
        ),
        annotations=_strings(data, "annotations", context),
    )


def _parse_layer_rules(data: dict[str, object], context: str) -> LayerSpecificRules:
    return LayerSpecificRules(
        business_logic_prohibited=_bool(data, "businessLogicProhibited", context),
        business_logic_message=_str(data, "businessLogicMessage"),
        business_logic_patterns=_strings(data, "businessLogicPatterns", context),
        direct_api_calls_prohibited=_bool(data, "directApiCallsProhibited", context),
        direct_api_call_message=_str(data, "directApiCallMessage"),
        direct_data_access_patterns=_strings(data, "directDataAccessPatterns", context),
        direct_data_access_indicators=_strings(data, "directDataAccessIndicators", context),
    )


def _parse_layer(key: str, data: dict[str, object]) -> LayerDefinition:
    context = f"layers.{key}"
    allowed: list[str] = []
    for raw in _strings(data, "allowedCalls", context):
        try:
            allowed.append(Layer.parse(raw).value)
        except ValueError:
            logger.warning("Ignoring unknown layer '%s' in %s.allowedCalls", raw, context)

    return LayerDefinition(
        name=_str(data, "name", key),
        description=_str(data, "description"),
        detection=_parse_detection(_mapping(data, "detection", context), f"{context}.detection"),
        allowed_calls=tuple(allowed),
        rules=_parse_layer_rules(_mapping(data, "rules", context), f"{context}.rules"),
    )


def _parse_layers(data: dict[str, object]) -> dict[Layer, LayerDefinition]:
    raw_layers = data.get("layers")
    if not isinstance(raw_layers, dict):
        msg = "layer rules: 'layers' must be an object keyed by layer name"
        raise ValueError(msg)

    layers: dict[Layer, LayerDefinition] = {}
    for key, layer_data in raw_layers.items():
        try:
            layer = Layer.parse(str(key))
        except ValueError:
            logger.warning("Ignoring unknown layer key '%s' in layer rules", key)
            continue
        if not isinstance(layer_data, dict):
            msg = f"layers.{key} must be an object"
            raise ValueError(msg)
        if layer in layers:
            msg = f"layer rules: duplicate layer '{layer.value}'"
            raise ValueError(msg)
        layers[layer] = _parse_layer(str(key), layer_data)
    return layers


def _parse_sound(data: dict[str, object]) -> SoundConfiguration:
    context = "globalRules.soundConfiguration"
    volume_raw = data.get("volume", 0.7)
    if isinstance(volume_raw, bool) or not isinstance(volume_raw, (int, float)):
        msg = f"{context}.volume must be a number"
        raise ValueError(msg)
    volume = float(volume_raw)
    if not (0.0 <= volume <= 1.0):
        msg = f"{context}.volume must be between 0.0 and 1.0"
        raise ValueError(msg)

    return SoundConfiguration(
        enabled=_bool(data, "enabled", context),
        sound_file=_str(data, "soundFile"),
        volume=volume,
        play_on_hover=_bool(data, "playOnHover", context, default=True),
        play_on_inspection=_bool(data, "playOnInspection", context),
        debounce_ms=_int(data, "debounceMs", context, default=1000),
    )


def _parse_global_rules(data: dict[str, object]) -> GlobalRules:
    detection = _mapping(data, "businessLogicDetection", "globalRules")
    complex_ctx = "globalRules.businessLogicDetection.complexLogicThreshold"
    complex_data = _mapping(detection, "complexLogicThreshold", complex_ctx)
    calc_ctx = "globalRules.businessLogicDetection.calculationLogicThreshold"
    calc_data = _mapping(detection, "calculationLogicThreshold", calc_ctx)
    db_data = _mapping(data, "databaseRelatedPatterns", "globalRules")
    db_ctx = "globalRules.databaseRelatedPatterns"

    return GlobalRules(
        business_logic_detection=BusinessLogicDetection(
            complex_logic_threshold=ComplexLogicThreshold(
                if_statements=_int(complex_data, "ifStatements", complex_ctx),
                switch_statements=_int(complex_data, "switchStatements", complex_ctx),
                loop_statements=_int(complex_data, "loopStatements", complex_ctx),
            ),
            calculation_logic_threshold=CalculationLogicThreshold(
                assignment_expressions=_int(calc_data, "assignmentExpressions", calc_ctx),
                binary_expressions=_int(calc_data, "binaryExpressions", calc_ctx),
            ),
        ),
        java_library_packages=_strings(data, "javaLibraryPackages", "globalRules"),
        database_related_patterns=DatabaseRelatedPatterns(
            class_names=_strings(db_data, "classNames", db_ctx),
            packages=_strings(db_data, "packages", db_ctx),
        ),
        sound_configuration=_parse_sound(_mapping(data, "soundConfiguration", "globalRules")),
    )


def _parse_violation_messages(data: dict[str, object]) -> dict[str, str]:
    """Accept both ``{"GENERIC": ...}`` and ``{"invalidLayerCall": {"GENERIC": ...}}``."""
    messages = _mapping(data, "violationMessages", "layer rules")
    nested = messages.get(_LEGACY_MESSAGES_KEY)
    if isinstance(nested, dict):
        messages = nested
    return {str(key).upper(): str(value) for key, value in messages.items()}


def _parse_quick_fixes(data: dict[str, object]) -> dict[str, QuickFixDefinition]:
    fixes: dict[str, QuickFixDefinition] = {}
    for key, fix_data in _mapping(data, "quickFixes", "layer rules").items():
        if not isinstance(fix_data, dict):
            msg = f"quickFixes.{key} must be an object"
            raise ValueError(msg)
        fixes[str(key)] = QuickFixDefinition(
            name=_str(fix_data, "name", str(key)),
            description=_str(fix_data, "description"),
        )
    return fixes


def parse_document(data: object) -> RuleDocument:
    """Build a :class:`RuleDocument` from decoded JSON.

    Raises ``ValueError`` on schema errors.
    """
    if not isinstance(data, dict):
        msg = "layer rules must be a JSON object"
        raise ValueError(msg)

    return RuleDocument(
        version=_str(data, "version"),
        description=_str(data, "description"),
        layers=_parse_layers(data),
        global_rules=_parse_global_rules(_mapping(data, "globalRules", "layer rules")),
        violation_messages=_parse_violation_messages(data),
        quick_fixes=_parse_quick_fixes(data),
    )


def parse_document_text(text: str) -> RuleDocument:
    """Parse a JSON string. ``json.JSONDecodeError`` is a ``ValueError``."""
    return parse_document(json.loads(text))


def load_document(path: Path) -> RuleDocument:
    """Read and parse a UTF-8 rules file."""
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    return parse_document(data)
