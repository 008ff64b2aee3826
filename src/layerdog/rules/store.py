"""Rule store: owns the active rule document, reloads it, and manages the rules file.

Load order is: external override file, bundled default, nothing.  Every
failure along the way is logged and treated as absence; callers only ever see
a :class:`RuleDocument` or ``None``.
"""

from __future__ import annotations

import logging
import os
import threading
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from layerdog.rules.models import RuleDocument, load_document, parse_document_text
from layerdog.rules.watcher import SETTLE_DELAY_SECONDS, ConfigWatchError, RuleFileWatcher

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "LAYERDOG_CONFIG_DIR"
CONFIG_DIR_NAME = ".layerdog"
RULES_FILE_NAME = "layer-rules.json"
BUNDLED_RULES_NAME = "default_rules.json"

SOURCE_EXTERNAL = "external"
SOURCE_BUNDLED = "bundled"

# Written by initialize/reset when the bundled resource cannot be read.
_BASIC_CONFIGURATION = """\
{
  "version": "1.0",
  "description": "LayerDog Architecture Rules Configuration",
  "layers": {
    "CONTROLLER": {
      "name": "Controller",
      "description": "Should have no business logic and only call DTO layer",
      "detection": {
        "classNamePatterns": {"suffixes": ["Controller", "Resource", "Endpoint"], "prefixes": [], "contains": []},
        "packagePatterns": {"contains": ["controller", "web", "rest"], "exact": []},
        "annotations": ["Controller", "RestController", "Resource"]
      },
      "allowedCalls": ["DTO"],
      "rules": {
        "businessLogicProhibited": true,
        "businessLogicMessage": "Controller '{className}' contains business logic. Controllers should delegate to DTOs."
      }
    },
    "DTO": {
      "name": "DTO",
      "description": "Should call only API layer and do validations and conversions",
      "detection": {
        "classNamePatterns": {"suffixes": ["DTO", "Dto", "Request", "Response", "Model"], "prefixes": [], "contains": []},
        "packagePatterns": {"contains": ["dto", "model"], "exact": []},
        "annotations": []
      },
      "allowedCalls": ["API"],
      "rules": {
        "businessLogicProhibited": true,
        "businessLogicMessage": "DTO '{className}' contains business logic. DTOs should only handle validation and conversion."
      }
    },
    "API": {
      "name": "API",
      "description": "Contains business logic, calls DAO layer",
      "detection": {
        "classNamePatterns": {"suffixes": ["Service", "ServiceImpl", "Manager"], "prefixes": [], "contains": []},
        "packagePatterns": {"contains": ["service", "business", "logic"], "exact": []},
        "annotations": ["Service", "Component"]
      },
      "allowedCalls": ["DAO", "FLOW"],
      "rules": {}
    }
  },
  "globalRules": {
    "businessLogicDetection": {
      "complexLogicThreshold": {"ifStatements": 2, "switchStatements": 2, "loopStatements": 2},
      "calculationLogicThreshold": {"assignmentExpressions": 3, "binaryExpressions": 5}
    },
    "javaLibraryPackages": ["java.", "javax.", "com.sun."],
    "databaseRelatedPatterns": {
      "classNames": ["Connection", "DataSource", "Driver"],
      "packages": ["java.sql", "javax.sql", "hibernate"]
    }
  },
  "violationMessages": {
    "GENERIC": "{fromLayer} '{fromClass}' is calling '{toClass}' which violates layer architecture."
  },
  "quickFixes": {
    "extractBusinessLogic": {
      "name": "Extract business logic to API layer",
      "description": "To fix this violation, move the business logic to the appropriate API layer."
    }
  }
}
"""


class ConfigLoadError(Exception):
    """Raised when a rule document cannot be read or parsed."""


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def default_config_dir() -> Path:
    """Return ``$LAYERDOG_CONFIG_DIR`` or ``~/.layerdog``."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / CONFIG_DIR_NAME


def default_config_path() -> Path:
    return default_config_dir() / RULES_FILE_NAME


def read_bundled_rules() -> str:
    """Return the text of the bundled default rules."""
    resource = resources.files("layerdog.rules").joinpath(BUNDLED_RULES_NAME)
    return resource.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class RuleStore:
    """Holds the single active :class:`RuleDocument` for the process.

    The active document and its source are kept together in one tuple that is
    replaced wholesale on every load, so readers on other threads see either
    the old or the new state, never a mix.  Subscribers are notified after a
    reload has installed the new document.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        bundled_reader: Callable[[], str] = read_bundled_rules,
        settle_delay: float = SETTLE_DELAY_SECONDS,
    ) -> None:
        self._config_path = config_path or default_config_path()
        self._bundled_reader = bundled_reader
        self._settle_delay = settle_delay
        self._state: tuple[RuleDocument | None, str | None] = (None, None)
        self._watched_path: Path | None = None
        self._subscribers: list[Callable[[], None]] = []
        self._lock = threading.Lock()
        self._watcher: RuleFileWatcher | None = None
        self._watch_error_logged = False

    # -- accessors ----------------------------------------------------------

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def source(self) -> str | None:
        """``"external"``, ``"bundled"`` or ``None`` when nothing is loaded."""
        return self._state[1]

    @property
    def watched_path(self) -> Path | None:
        """The external file path, once it has been loaded successfully."""
        return self._watched_path

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None and self._watcher.is_running

    def active_document(self) -> RuleDocument | None:
        return self._state[0]

    # -- loading ------------------------------------------------------------

    def _load_external(self) -> RuleDocument:
        try:
            return load_document(self._config_path)
        except (OSError, ValueError) as exc:
            msg = f"failed to load layer rules from {self._config_path}: {exc}"
            raise ConfigLoadError(msg) from exc

    def _load_bundled(self) -> RuleDocument:
        try:
            return parse_document_text(self._bundled_reader())
        except (OSError, ValueError) as exc:
            msg = f"failed to load bundled layer rules: {exc}"
            raise ConfigLoadError(msg) from exc

    def load(self) -> RuleDocument | None:
        """Load the rule document and make it the active one.

        Returns the new active document, or ``None`` when neither the external
        file nor the bundled default could be loaded.
        """
        document: RuleDocument | None = None
        source: str | None = None

        if self._config_path.is_file():
            try:
                document = self._load_external()
                source = SOURCE_EXTERNAL
                logger.info("Loaded layer rules from external config: %s", self._config_path)
            except ConfigLoadError as exc:
                logger.error("%s; falling back to bundled rules", exc)

        if document is None:
            try:
                document = self._load_bundled()
                source = SOURCE_BUNDLED
                logger.info("Loaded layer rules from bundled defaults")
            except ConfigLoadError as exc:
                logger.error("%s; layer checks are disabled", exc)

        self._state = (document, source)
        if source == SOURCE_EXTERNAL:
            self._watched_path = self._config_path
        return document

    def reload(self) -> RuleDocument | None:
        """Load, then notify subscribers that cached results are stale."""
        document = self.load()
        self._broadcast()
        return document

    # -- invalidation -------------------------------------------------------

    def subscribe(self, callback: Callable[[], None]) -> None:
        """Register *callback* to run after every reload."""
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def _broadcast(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception:
                logger.exception("Rule reload subscriber %r failed", callback)

    # -- watching -----------------------------------------------------------

    def watch(self) -> bool:
        """Start reloading on changes to the external file.

        Returns False (and logs once) when watching cannot be set up; the
        store keeps serving whatever document is already loaded.
        """
        if self.is_watching:
            return True

        watcher = RuleFileWatcher(
            self._config_path,
            self.reload,
            settle_delay=self._settle_delay,
        )
        try:
            watcher.start()
        except ConfigWatchError as exc:
            if not self._watch_error_logged:
                logger.warning("Rule file watching disabled: %s", exc)
                self._watch_error_logged = True
            return False

        self._watcher = watcher
        return True

    def stop(self) -> None:
        """Stop the watcher thread, if any."""
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()

    # -- configuration files ------------------------------------------------

    def external_configuration_path(self) -> Path:
        return self._config_path

    def has_external_configuration(self) -> bool:
        return self._config_path.exists()

    def _default_text(self) -> str:
        try:
            return self._bundled_reader()
        except OSError:
            logger.warning("Bundled layer rules not found, writing basic configuration")
            return _BASIC_CONFIGURATION

    def initialize_external_configuration(self) -> bool:
        """Create the external rules file from the defaults if it is missing."""
        try:
            config_dir = self._config_path.parent
            if not config_dir.exists():
                config_dir.mkdir(parents=True)
                logger.info("Created LayerDog configuration directory: %s", config_dir)

            if not self._config_path.exists():
                self._config_path.write_text(self._default_text(), encoding="utf-8")
                logger.info("Created external configuration file: %s", self._config_path)
        except OSError:
            logger.exception("Failed to initialize external configuration")
            return False
        return True

    def reset_to_defaults(self) -> bool:
        """Overwrite the external rules file with the defaults."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)
            self._config_path.unlink(missing_ok=True)
            self._config_path.write_text(self._default_text(), encoding="utf-8")
        except OSError:
            logger.exception("Failed to reset configuration to defaults")
            return False
        logger.info("Reset external configuration to defaults: %s", self._config_path)
        return True
