from __future__ import annotations

"""
Adjacent Metadata Overlay.

Parses `<name>.meta.json` sidecar documents and applies their overrides onto
an in-progress snapshot. Values are resolved against the reflection schema of
the snapshot's class, so an override can only set properties that class
actually declares.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from treesync.core.schema.reflection import PropertyDescriptor, ReflectionDatabase
from treesync.domain.constants import PROP_ATTRIBUTES
from treesync.domain.errors import MetadataParseError, MetadataValidationError
from treesync.domain.snapshot_models import InstanceSnapshot, PropertyValue

logger = logging.getLogger(__name__)

# Top-level keys accepted in a sidecar document; anything else is rejected
_KNOWN_KEYS = ("ignoreUnknownInstances", "properties", "attributes")

# -----------------------------------------------------------------------------
# OVERLAY MODEL
# -----------------------------------------------------------------------------

@dataclass
class AdjacentMetadata:
    """
    Structured form of a sidecar metadata document.

    Attributes:
        path: Sidecar file the document was read from.
        ignore_unknown_instances: Optional override of the metadata flag.
        properties: Raw property overrides, resolved at apply time.
        attributes: Raw user attributes to merge into the Attributes property.
    """
    path: str
    ignore_unknown_instances: Optional[bool] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_slice(cls, data: bytes, path: str) -> AdjacentMetadata:
        """
        Parse raw sidecar bytes.

        Args:
            data: File contents.
            path: Sidecar path, attached to any error raised.

        Returns:
            AdjacentMetadata: The parsed document.

        Raises:
            MetadataParseError: On undecodable, malformed or mis-shaped input.
        """
        try:
            doc = json.loads(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise MetadataParseError(path, f"Sidecar is not valid UTF-8: {e}") from e
        except ValueError as e:
            # JSONDecodeError, or an integer beyond the interpreter digit limit
            raise MetadataParseError(path, f"Malformed JSON: {e}") from e

        if not isinstance(doc, dict):
            raise MetadataParseError(
                path, f"Expected a JSON object, found {type(doc).__name__}"
            )

        unknown = sorted(k for k in doc if k not in _KNOWN_KEYS)
        if unknown:
            raise MetadataParseError(path, f"Unknown field(s): {', '.join(unknown)}")

        ignore_unknown = doc.get("ignoreUnknownInstances")
        if ignore_unknown is not None and not isinstance(ignore_unknown, bool):
            raise MetadataParseError(path, "'ignoreUnknownInstances' must be a boolean")

        properties = doc.get("properties", {})
        if not isinstance(properties, dict):
            raise MetadataParseError(path, "'properties' must be an object")

        attributes = doc.get("attributes", {})
        if not isinstance(attributes, dict):
            raise MetadataParseError(path, "'attributes' must be an object")

        return cls(
            path=path,
            ignore_unknown_instances=ignore_unknown,
            properties=dict(properties),
            attributes=dict(attributes),
        )

    # --- Application -----------------------------------------------------------

    def apply_all(self, snapshot: InstanceSnapshot, schema: ReflectionDatabase) -> None:
        """
        Apply every override onto the snapshot in place.

        Raises:
            MetadataValidationError: If an override is unknown or ill-typed.
        """
        self.apply_ignore_unknown_instances(snapshot)
        self.apply_properties(snapshot, schema)
        self.apply_attributes(snapshot, schema)

    def apply_ignore_unknown_instances(self, snapshot: InstanceSnapshot) -> None:
        if self.ignore_unknown_instances is not None:
            snapshot.metadata.ignore_unknown_instances = self.ignore_unknown_instances

    def apply_properties(self, snapshot: InstanceSnapshot, schema: ReflectionDatabase) -> None:
        for prop_name, raw_value in self.properties.items():
            descriptor = schema.find_property(snapshot.class_name, prop_name)
            if descriptor is None:
                raise MetadataValidationError(
                    self.path,
                    f"Unknown property '{prop_name}' for class {snapshot.class_name}",
                )
            snapshot.properties[prop_name] = self._resolve(descriptor, raw_value, schema)
            logger.debug(f"Overlay: {snapshot.name}.{prop_name} set from {self.path}")

    def apply_attributes(self, snapshot: InstanceSnapshot, schema: ReflectionDatabase) -> None:
        if not self.attributes:
            return
        if schema.find_property(snapshot.class_name, PROP_ATTRIBUTES) is None:
            raise MetadataValidationError(
                self.path, f"Class {snapshot.class_name} does not support attributes"
            )

        for key, value in self.attributes.items():
            if value is not None and not isinstance(value, (str, bool, int, float)):
                raise MetadataValidationError(
                    self.path, f"Attribute '{key}' must be a string, number or boolean"
                )

        existing = snapshot.properties.get(PROP_ATTRIBUTES)
        merged: Dict[str, Any] = dict(existing) if isinstance(existing, dict) else {}
        merged.update(self.attributes)
        snapshot.properties[PROP_ATTRIBUTES] = merged

    # --- Value resolution ------------------------------------------------------

    def _resolve(
            self,
            descriptor: PropertyDescriptor,
            raw: Any,
            schema: ReflectionDatabase,
    ) -> PropertyValue:
        """Convert a JSON value into the property's declared type."""
        value_type = descriptor.value_type
        label = f"{descriptor.owner_class}.{descriptor.name}"

        if value_type == "String" and isinstance(raw, str):
            return raw
        if value_type == "Bool" and isinstance(raw, bool):
            return raw
        if value_type in ("Int", "Float") and _is_number(raw):
            if value_type == "Int":
                if isinstance(raw, float) and not raw.is_integer():
                    raise MetadataValidationError(self.path, f"{label} expects an integer")
                return int(raw)
            try:
                return float(raw)
            except OverflowError as e:
                raise MetadataValidationError(
                    self.path, f"{label} value is out of range for a float"
                ) from e
        if value_type == "Enum":
            return self._resolve_enum(descriptor, raw, schema, label)
        if value_type == "Attributes":
            raise MetadataValidationError(
                self.path, f"{label} must be set through the 'attributes' field"
            )

        raise MetadataValidationError(
            self.path,
            f"{label} expects a value of type {value_type}, found {_json_type_name(raw)}",
        )

    def _resolve_enum(
            self,
            descriptor: PropertyDescriptor,
            raw: Any,
            schema: ReflectionDatabase,
            label: str,
    ) -> PropertyValue:
        enum_name = descriptor.enum_name or ""
        items = schema.get_enum(enum_name)
        if items is None:
            raise MetadataValidationError(self.path, f"{label} refers to unknown enum {enum_name}")

        if isinstance(raw, dict) and set(raw) == {"Enum"}:
            raw = raw["Enum"]

        if isinstance(raw, str):
            if raw not in items:
                raise MetadataValidationError(
                    self.path, f"'{raw}' is not a valid member of enum {enum_name}"
                )
            return schema.get_enum_item(enum_name, raw)

        if _is_integral(raw):
            resolved = schema.find_enum_item_by_value(enum_name, int(raw))
            if resolved is None:
                raise MetadataValidationError(
                    self.path, f"{raw} is not a valid value of enum {enum_name}"
                )
            return resolved

        raise MetadataValidationError(
            self.path, f"{label} expects an {enum_name} member, found {_json_type_name(raw)}"
        )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integral(value: Any) -> bool:
    if isinstance(value, float):
        return value.is_integer()
    return _is_number(value)


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
