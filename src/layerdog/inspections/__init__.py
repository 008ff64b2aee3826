"""Inspections domain — per-layer checks over class snapshots."""

from layerdog.inspections.base import BaseLayerInspection, Violation
from layerdog.inspections.layers import (
    ALL_INSPECTIONS,
    APILayerInspection,
    ControllerLayerInspection,
    DAOLayerInspection,
    DTOLayerInspection,
    FlowLayerInspection,
)
from layerdog.inspections.model import (
    CallSite,
    ClassModel,
    MethodModel,
    ModelLoadError,
    load_class_models,
    parse_class_models,
)
from layerdog.inspections.runner import (
    InspectionResult,
    format_json,
    format_porcelain,
    format_rich,
    run_inspections,
)

__all__ = [
    "ALL_INSPECTIONS",
    "APILayerInspection",
    "BaseLayerInspection",
    "CallSite",
    "ClassModel",
    "ControllerLayerInspection",
    "DAOLayerInspection",
    "DTOLayerInspection",
    "FlowLayerInspection",
    "InspectionResult",
    "MethodModel",
    "ModelLoadError",
    "Violation",
    "format_json",
    "format_porcelain",
    "format_rich",
    "load_class_models",
    "parse_class_models",
    "run_inspections",
]
