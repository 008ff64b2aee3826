"""Inspection runner: classify, inspect every class, format results."""

from __future__ import annotations

import json
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from layerdog.inspections.layers import ALL_INSPECTIONS
from layerdog.sound import SoundEvent

if TYPE_CHECKING:
    from collections.abc import Iterable

    from layerdog.engine.core import LayerEngine
    from layerdog.inspections.base import Violation
    from layerdog.inspections.model import ClassModel
    from layerdog.sound import SoundNotifier

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class InspectionResult:
    """Result of an inspection run."""

    violations: list[Violation] = field(default_factory=list)
    classes_inspected: int = 0
    layer_counts: dict[str, int] = field(default_factory=dict)
    rules_source: str | None = None
    elapsed_ms: float = 0.0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_inspections(
    engine: LayerEngine,
    classes: Iterable[ClassModel],
    *,
    notifier: SoundNotifier | None = None,
) -> InspectionResult:
    """Run every layer inspection over *classes*.

    Each inspection only looks at classes of its own layer, so a class is
    reported by at most one of them. When a *notifier* is given, every
    violation found is signalled as :attr:`SoundEvent.INSPECTION_FOUND`
    (the notifier applies its own debounce).
    """
    start = time.monotonic()
    inspections = [cls(engine) for cls in ALL_INSPECTIONS]

    violations: list[Violation] = []
    layers: Counter[str] = Counter()
    inspected = 0
    for model in classes:
        inspected += 1
        layers[engine.classify(model.descriptor).value] += 1
        for inspection in inspections:
            found = inspection.inspect(model)
            if found:
                logger.debug("%s: %d problem(s) in %s", inspection.name, len(found), model.name)
            violations.extend(found)

    if notifier is not None:
        for _ in violations:
            notifier.notify(SoundEvent.INSPECTION_FOUND)

    return InspectionResult(
        violations=violations,
        classes_inspected=inspected,
        layer_counts=dict(layers),
        rules_source=engine.store.source,
        elapsed_ms=(time.monotonic() - start) * 1000,
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_rich(result: InspectionResult) -> str:
    """Format an InspectionResult as human-readable text.

    Example output::

        Rules: bundled
        Classes: 3 inspected (API: 1, CONTROLLER: 2)

        ✗ controller-layer UserController.show
          Controller 'UserController' should not directly call API 'UserService'. ...

        1 violations found (3 classes, 0.0s)
    """
    lines: list[str] = []

    lines.append(f"Rules: {result.rules_source or 'none'}")
    breakdown = ", ".join(f"{layer}: {n}" for layer, n in sorted(result.layer_counts.items()))
    header = f"Classes: {result.classes_inspected} inspected"
    lines.append(f"{header} ({breakdown})" if breakdown else header)
    lines.append("")

    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"

    if result.violations:
        for v in result.violations:
            where = v.class_name.rpartition(".")[2]
            if v.method_name is not None:
                where += f".{v.method_name}"
            lines.append(f"✗ {v.inspection} {where}")
            lines.append(f"  {v.message}")
            if v.quick_fix is not None:
                lines.append(f"  fix: {v.quick_fix}")
            lines.append("")

        count = len(result.violations)
        lines.append(
            f"{count} violations found ({result.classes_inspected} classes, {elapsed_str})"
        )
    else:
        lines.append(
            f"✓ No violations found ({result.classes_inspected} classes, {elapsed_str})"
        )

    return "\n".join(lines)


def format_json(result: InspectionResult) -> str:
    """Format an InspectionResult as a JSON document with ``violations`` and ``summary``."""
    violations_list: list[dict[str, object]] = [
        {
            "inspection": v.inspection,
            "layer": v.layer,
            "severity": v.severity,
            "class_name": v.class_name,
            "method_name": v.method_name,
            "target_class": v.target_class,
            "message": v.message,
            "quick_fix": v.quick_fix,
        }
        for v in result.violations
    ]

    output: dict[str, object] = {
        "violations": violations_list,
        "summary": {
            "classes_inspected": result.classes_inspected,
            "violations_count": len(result.violations),
            "layers": result.layer_counts,
            "rules_source": result.rules_source,
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_porcelain(result: InspectionResult) -> str:
    """One line per violation: ``inspection:class:method:target:quick_fix``.

    Missing fields are empty strings; no violations gives an empty string.
    """
    lines: list[str] = []
    for v in result.violations:
        method = v.method_name or ""
        target = v.target_class or ""
        fix = v.quick_fix or ""
        lines.append(f"{v.inspection}:{v.class_name}:{method}:{target}:{fix}")
    return "\n".join(lines)
