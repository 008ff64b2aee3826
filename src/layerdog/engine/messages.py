"""Message formatter: fill violation templates from the rule document."""

from __future__ import annotations

from typing import TYPE_CHECKING

from layerdog.engine.validator import allowed_calls
from layerdog.rules.models import GENERIC_MESSAGE_KEY

if TYPE_CHECKING:
    from layerdog.rules.models import Layer, QuickFixDefinition
    from layerdog.rules.store import RuleStore

DEFAULT_VIOLATION_MESSAGE = "Layer violation detected"
DEFAULT_BUSINESS_LOGIC_MESSAGE = "Business logic violation detected"


def message_key(from_layer: Layer, to_layer: Layer) -> str:
    return f"{from_layer.value}_TO_{to_layer.value}"


def fill_template(template: str, values: dict[str, str]) -> str:
    """Replace each literal ``{name}`` in *template*; unknown braces are left alone."""
    for name, value in values.items():
        template = template.replace("{" + name + "}", value)
    return template


class MessageFormatter:
    def __init__(self, store: RuleStore) -> None:
        self._store = store

    def violation_message(
        self, from_layer: Layer, to_layer: Layer, from_class: str, to_class: str
    ) -> str:
        """Return the message for a disallowed call.

        Template lookup: ``FROM_TO_TO``, then ``GENERIC``, then a fixed literal.
        """
        document = self._store.active_document()
        if document is None:
            return DEFAULT_VIOLATION_MESSAGE

        messages = document.violation_messages
        template = (
            messages.get(message_key(from_layer, to_layer))
            or messages.get(GENERIC_MESSAGE_KEY)
            or DEFAULT_VIOLATION_MESSAGE
        )
        return fill_template(
            template,
            {
                "fromLayer": from_layer.value,
                "toLayer": to_layer.value,
                "fromClass": from_class,
                "toClass": to_class,
                "allowedLayers": ", ".join(allowed_calls(document, from_layer)),
            },
        )

    def business_logic_message(self, layer: Layer, class_name: str) -> str:
        document = self._store.active_document()
        definition = document.layer(layer) if document is not None else None
        if definition is None or not definition.rules.business_logic_message:
            return DEFAULT_BUSINESS_LOGIC_MESSAGE
        return fill_template(definition.rules.business_logic_message, {"className": class_name})

    def quick_fix(self, key: str) -> QuickFixDefinition | None:
        document = self._store.active_document()
        if document is None:
            return None
        return document.quick_fixes.get(key)
