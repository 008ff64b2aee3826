"""LayerDog: rule-driven layer classification and call validation for Java code."""

from layerdog.engine import ClassDescriptor, LayerEngine, MethodBody, get_default_engine
from layerdog.rules import Layer, RuleDocument, RuleStore

__version__ = "0.1.0"

__all__ = [
    "ClassDescriptor",
    "Layer",
    "LayerEngine",
    "MethodBody",
    "RuleDocument",
    "RuleStore",
    "__version__",
    "get_default_engine",
]
