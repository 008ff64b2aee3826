"""Engine domain — classification, call validation, heuristics, and messages."""

from layerdog.engine.cache import ClassificationCache
from layerdog.engine.classifier import LayerClassifier, matches_detection
from layerdog.engine.core import LayerEngine, get_default_engine, reset_default_engine
from layerdog.engine.descriptors import ClassDescriptor, MethodBody
from layerdog.engine.heuristics import BusinessLogicHeuristic
from layerdog.engine.messages import MessageFormatter
from layerdog.engine.validator import CallValidator

__all__ = [
    "BusinessLogicHeuristic",
    "CallValidator",
    "ClassDescriptor",
    "ClassificationCache",
    "LayerClassifier",
    "LayerEngine",
    "MessageFormatter",
    "MethodBody",
    "get_default_engine",
    "matches_detection",
    "reset_default_engine",
]
