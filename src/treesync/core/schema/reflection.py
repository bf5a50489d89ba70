from __future__ import annotations

"""
Reflection Schema Provider.

Exposes a read-only view over the object-model schema: enum members and the
property declarations of each class, including inherited ones. A bundled
database ships with the package; tests and embedders can construct a
provider from any mapping with the same shape.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from treesync.domain.constants import REFLECTION_DATABASE_FILENAME
from treesync.domain.errors import SchemaLookupError
from treesync.domain.snapshot_models import EnumValue

logger = logging.getLogger(__name__)

# Recognized property value types
VALUE_TYPES = ("String", "Bool", "Int", "Float", "Enum", "Attributes")

# -----------------------------------------------------------------------------
# DESCRIPTORS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PropertyDescriptor:
    """
    Declaration of a single class property.

    Attributes:
        name: Property name.
        owner_class: Class that declares the property.
        value_type: One of VALUE_TYPES.
        enum_name: Owning enum for Enum-typed properties.
    """
    name: str
    owner_class: str
    value_type: str
    enum_name: Optional[str] = None


@dataclass(frozen=True)
class ClassDescriptor:
    """Declaration of a class: its superclass and its own properties."""
    name: str
    superclass: Optional[str]
    properties: Dict[str, PropertyDescriptor]

# -----------------------------------------------------------------------------
# DATABASE
# -----------------------------------------------------------------------------

class ReflectionDatabase:
    """
    Read-only schema lookup service passed explicitly to the builders.
    """

    def __init__(
            self,
            enums: Dict[str, Dict[str, int]],
            classes: Dict[str, ClassDescriptor],
            version: str = "",
    ) -> None:
        self._enums = enums
        self._classes = classes
        self.version = version

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ReflectionDatabase:
        """
        Build a database from its JSON-shaped mapping.

        Args:
            raw: Mapping with 'enums' and 'classes' keys.

        Returns:
            ReflectionDatabase: The constructed provider.

        Raises:
            ValueError: If the mapping does not follow the expected layout.
        """
        enums: Dict[str, Dict[str, int]] = {}
        for enum_name, items in (raw.get("enums") or {}).items():
            if not isinstance(items, Mapping):
                raise ValueError(f"Enum '{enum_name}' must map member names to values")
            enums[enum_name] = {str(k): int(v) for k, v in items.items()}

        classes: Dict[str, ClassDescriptor] = {}
        for class_name, body in (raw.get("classes") or {}).items():
            props: Dict[str, PropertyDescriptor] = {}
            for prop_name, decl in (body.get("properties") or {}).items():
                value_type = decl.get("type")
                if value_type not in VALUE_TYPES:
                    raise ValueError(
                        f"Property '{class_name}.{prop_name}' has unknown type {value_type!r}"
                    )
                props[prop_name] = PropertyDescriptor(
                    name=prop_name,
                    owner_class=class_name,
                    value_type=value_type,
                    enum_name=decl.get("enum"),
                )
            classes[class_name] = ClassDescriptor(
                name=class_name,
                superclass=body.get("superclass"),
                properties=props,
            )

        return cls(enums=enums, classes=classes, version=str(raw.get("version", "")))

    @classmethod
    def load_bundled(cls) -> ReflectionDatabase:
        """Load the schema snapshot shipped inside the package."""
        path = _get_bundled_path()
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        db = cls.from_dict(raw)
        logger.debug(f"Reflection: Loaded bundled database version {db.version or 'unknown'}")
        return db

    # --- Lookups ---------------------------------------------------------------

    def has_class(self, class_name: str) -> bool:
        return class_name in self._classes

    def get_enum(self, enum_name: str) -> Optional[Dict[str, int]]:
        """Return the member map of an enum, or None if it is not declared."""
        items = self._enums.get(enum_name)
        return dict(items) if items is not None else None

    def require_enum(self, enum_name: str) -> Dict[str, int]:
        """
        Return the member map of an enum the tool cannot work without.

        Raises:
            SchemaLookupError: If the enum is not declared.
        """
        items = self.get_enum(enum_name)
        if items is None:
            raise SchemaLookupError(f"Unable to get {enum_name} enums!")
        return items

    def get_enum_item(self, enum_name: str, item_name: str) -> EnumValue:
        """
        Resolve an enum member that the tool itself depends on.

        Raises:
            SchemaLookupError: If the enum or the member is missing, which
                means the schema is corrupt or from an incompatible version.
        """
        items = self.require_enum(enum_name)
        if item_name not in items:
            raise SchemaLookupError(f"Enum {enum_name} has no member named {item_name}")
        return EnumValue(enum_name=enum_name, item_name=item_name, value=items[item_name])

    def find_enum_item_by_value(self, enum_name: str, value: int) -> Optional[EnumValue]:
        """Reverse lookup of an enum member by its numeric value."""
        for item_name, item_value in self._enums.get(enum_name, {}).items():
            if item_value == value:
                return EnumValue(enum_name=enum_name, item_name=item_name, value=item_value)
        return None

    def find_property(self, class_name: str, prop_name: str) -> Optional[PropertyDescriptor]:
        """
        Find a property declared on a class or any of its ancestors.

        Args:
            class_name: Class to start from.
            prop_name: Property being looked up.

        Returns:
            Optional[PropertyDescriptor]: Declaration, or None if unknown.
        """
        current = self._classes.get(class_name)
        seen = set()
        while current is not None and current.name not in seen:
            seen.add(current.name)
            descriptor = current.properties.get(prop_name)
            if descriptor is not None:
                return descriptor
            current = self._classes.get(current.superclass) if current.superclass else None
        return None

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _get_bundled_path() -> str:
    """Resolve the absolute path of the packaged reflection database."""
    package_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    return os.path.join(package_root, "resources", REFLECTION_DATABASE_FILENAME)
