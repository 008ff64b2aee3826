"""Rules domain — rule document model, store, and file watcher."""

from layerdog.rules.models import (
    GENERIC_MESSAGE_KEY,
    Layer,
    LayerDefinition,
    LayerDetection,
    QuickFixDefinition,
    RuleDocument,
    SoundConfiguration,
    load_document,
    parse_document,
    parse_document_text,
)
from layerdog.rules.store import (
    RULES_FILE_NAME,
    ConfigLoadError,
    RuleStore,
    default_config_dir,
    default_config_path,
)
from layerdog.rules.watcher import ConfigWatchError, RuleFileWatcher

__all__ = [
    "GENERIC_MESSAGE_KEY",
    "RULES_FILE_NAME",
    "ConfigLoadError",
    "ConfigWatchError",
    "Layer",
    "LayerDefinition",
    "LayerDetection",
    "QuickFixDefinition",
    "RuleDocument",
    "RuleFileWatcher",
    "RuleStore",
    "SoundConfiguration",
    "default_config_dir",
    "default_config_path",
    "load_document",
    "parse_document",
    "parse_document_text",
]
