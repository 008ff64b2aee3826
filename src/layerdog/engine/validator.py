"""Call validator: decide whether a call between two layers is allowed."""

from __future__ import annotations

from typing import TYPE_CHECKING

from layerdog.rules.models import Layer

if TYPE_CHECKING:
    from layerdog.engine.descriptors import ClassDescriptor
    from layerdog.rules.models import RuleDocument
    from layerdog.rules.store import RuleStore

# Used for library detection when no rule document is loaded.
DEFAULT_LIBRARY_PACKAGES: tuple[str, ...] = ("java.", "javax.", "com.sun.", "org.w3c.", "org.xml.")

# JDBC, driver and persistence packages that always count as database-related.
KNOWN_DATABASE_PACKAGES: tuple[str, ...] = (
    "java.sql",
    "javax.sql",
    "javax.persistence",
    "jakarta.persistence",
    "org.hibernate",
    "org.springframework.jdbc",
    "org.springframework.data",
    "org.mybatis",
    "org.apache.ibatis",
    "org.jooq",
    "com.mysql",
    "org.postgresql",
    "oracle.jdbc",
)


def allowed_calls(document: RuleDocument | None, layer: Layer) -> tuple[str, ...]:
    """Return the layer keys *layer* may call in *document*, in declaration order."""
    if document is None:
        return ()
    definition = document.layer(layer)
    return definition.allowed_calls if definition is not None else ()


class CallValidator:
    """Allowed-call checks against the active rule document.

    Every check fails open: with no document loaded nothing is reported.
    """

    def __init__(self, store: RuleStore) -> None:
        self._store = store

    def is_valid_call(self, from_layer: Layer, to_layer: Layer) -> bool:
        # Unclassified callers are not policed.
        if from_layer is Layer.UNKNOWN:
            return True

        document = self._store.active_document()
        if document is None:
            return True

        definition = document.layer(from_layer)
        if definition is None:
            return True

        # Unclassified targets are usually third-party or framework classes.
        return to_layer is Layer.UNKNOWN or to_layer.value in definition.allowed_calls

    def allowed_layers(self, layer: Layer) -> tuple[str, ...]:
        return allowed_calls(self._store.active_document(), layer)

    def is_library_call(self, qualified_name: str | None) -> bool:
        """Return True if *qualified_name* lives in a standard library package."""
        if not qualified_name:
            return False
        document = self._store.active_document()
        prefixes = (
            document.global_rules.java_library_packages
            if document is not None
            else DEFAULT_LIBRARY_PACKAGES
        )
        return any(qualified_name.startswith(prefix) for prefix in prefixes)

    def is_database_related(self, descriptor: ClassDescriptor) -> bool:
        """Return True if the class looks like a database or persistence type."""
        package = descriptor.package_name.lower()
        if any(package.startswith(prefix) for prefix in KNOWN_DATABASE_PACKAGES):
            return True

        document = self._store.active_document()
        if document is None:
            return False

        patterns = document.global_rules.database_related_patterns
        name = descriptor.simple_name.lower()
        return any(p.lower() in name for p in patterns.class_names) or any(
            p.lower() in package for p in patterns.packages
        )
