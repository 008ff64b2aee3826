"""Host-neutral class snapshots for the inspections, and a YAML/JSON loader.

Model files list the classes to inspect::

    classes:
      - name: com.example.web.UserController
        annotations: [org.springframework.web.bind.annotation.RestController]
        methods:
          - name: show
            body: {conditionals: 1, assignments: 2}
            calls:
              - {method: findUser, target: com.example.service.UserService}

A call target is resolved against the other classes in the file first, so
annotations declared there take part in classifying the target.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import yaml

from layerdog.engine.descriptors import ClassDescriptor, MethodBody

if TYPE_CHECKING:
    from pathlib import Path

_BODY_FIELDS = {
    "conditionals": "conditionals",
    "switches": "switches",
    "loops": "loops",
    "assignments": "assignments",
    "binaryExpressions": "binary_expressions",
}


class ModelLoadError(Exception):
    """Raised when a class model file is unreadable or malformed."""


@dataclass(frozen=True)
class CallSite:
    """A method call inside a method body; ``target`` is None when unresolved."""

    method_name: str
    target: ClassDescriptor | None = None


@dataclass(frozen=True)
class MethodModel:
    name: str
    body: MethodBody = field(default_factory=MethodBody)
    calls: tuple[CallSite, ...] = ()
    is_constructor: bool = False


@dataclass(frozen=True)
class ClassModel:
    descriptor: ClassDescriptor
    methods: tuple[MethodModel, ...] = ()

    @property
    def name(self) -> str:
        return self.descriptor.simple_name

    @property
    def method_bodies(self) -> tuple[MethodBody, ...]:
        return tuple(m.body for m in self.methods if not m.is_constructor)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _strings(value: object, context: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        msg = f"{context} must be a list"
        raise ModelLoadError(msg)
    return tuple(str(item) for item in value)


def _descriptor(data: dict[str, object], context: str) -> ClassDescriptor:
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        msg = f"{context}: missing required 'name'"
        raise ModelLoadError(msg)
    descriptor = ClassDescriptor.from_qualified_name(
        name.strip(), _strings(data.get("annotations"), f"{context}.annotations")
    )
    package = data.get("package")
    if isinstance(package, str):
        descriptor = replace(descriptor, package_name=package)
    return descriptor


def _body(data: object, context: str) -> MethodBody:
    if data is None:
        return MethodBody()
    if not isinstance(data, dict):
        msg = f"{context} must be a mapping"
        raise ModelLoadError(msg)
    counts: dict[str, int] = {}
    for key, attr in _BODY_FIELDS.items():
        value = data.get(key, 0)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            msg = f"{context}.{key} must be a non-negative integer"
            raise ModelLoadError(msg)
        counts[attr] = value
    return MethodBody(**counts)


def _target(
    raw: object, known: dict[str, ClassDescriptor], context: str
) -> ClassDescriptor | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return known.get(raw) or ClassDescriptor.from_qualified_name(raw)
    if isinstance(raw, dict):
        name = raw.get("name")
        if isinstance(name, str) and name in known and "annotations" not in raw:
            return known[name]
        return _descriptor(raw, context)
    msg = f"{context} must be a class name or mapping"
    raise ModelLoadError(msg)


def _method(
    data: object, known: dict[str, ClassDescriptor], context: str
) -> MethodModel:
    if not isinstance(data, dict):
        msg = f"{context} must be a mapping"
        raise ModelLoadError(msg)
    name = data.get("name")
    if not isinstance(name, str) or not name:
        msg = f"{context}: missing required 'name'"
        raise ModelLoadError(msg)

    calls_raw = data.get("calls") or []
    if not isinstance(calls_raw, list):
        msg = f"{context}.calls must be a list"
        raise ModelLoadError(msg)
    calls: list[CallSite] = []
    for idx, call in enumerate(calls_raw):
        call_ctx = f"{context}.calls[{idx}]"
        if not isinstance(call, dict) or not isinstance(call.get("method"), str):
            msg = f"{call_ctx} must be a mapping with a 'method' name"
            raise ModelLoadError(msg)
        calls.append(
            CallSite(
                method_name=str(call["method"]),
                target=_target(call.get("target"), known, f"{call_ctx}.target"),
            )
        )

    return MethodModel(
        name=name,
        body=_body(data.get("body"), f"{context}.body"),
        calls=tuple(calls),
        is_constructor=bool(data.get("constructor", False)),
    )


def parse_class_models(data: object) -> list[ClassModel]:
    """Build class models from decoded YAML/JSON."""
    if isinstance(data, dict):
        data = data.get("classes")
    if not isinstance(data, list):
        msg = "model file must contain a 'classes' list"
        raise ModelLoadError(msg)

    entries: list[tuple[dict[str, object], ClassDescriptor]] = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict):
            msg = f"classes[{idx}] must be a mapping"
            raise ModelLoadError(msg)
        entries.append((entry, _descriptor(entry, f"classes[{idx}]")))

    known = {descriptor.qualified_name: descriptor for _, descriptor in entries}

    models: list[ClassModel] = []
    for idx, (entry, descriptor) in enumerate(entries):
        methods_raw = entry.get("methods") or []
        if not isinstance(methods_raw, list):
            msg = f"classes[{idx}].methods must be a list"
            raise ModelLoadError(msg)
        methods = tuple(
            _method(m, known, f"classes[{idx}].methods[{j}]") for j, m in enumerate(methods_raw)
        )
        models.append(ClassModel(descriptor=descriptor, methods=methods))
    return models


def load_class_models(path: Path) -> list[ClassModel]:
    """Read a ``.json``, ``.yml`` or ``.yaml`` model file."""
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        msg = f"cannot read class model {path}: {exc}"
        raise ModelLoadError(msg) from exc
    return parse_class_models(data)
