from __future__ import annotations

"""
Instance Snapshot Data Models.

Defines the in-memory object-model tree produced by the snapshot builders,
together with the immutable traversal context threaded through every
recursive build call.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple, Union

if TYPE_CHECKING:
    from treesync.core.components.ignore_rules import PathIgnoreRule

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class ScriptType(Enum):
    """Execution flavour of a script, decided upstream from its file name."""
    SERVER = "server"
    CLIENT = "client"
    MODULE = "module"


class EmitLegacyScripts(Enum):
    """
    Tri-state switch selecting how server/client scripts are expressed.

    UNSET means the project did not choose a mode; it resolves like FORCE_ON.
    """
    UNSET = "unset"
    FORCE_ON = "force_on"
    FORCE_OFF = "force_off"

    @classmethod
    def from_optional_bool(cls, value: Optional[bool]) -> EmitLegacyScripts:
        """
        Map a project-file style optional boolean onto the tri-state enum.

        Args:
            value: None, True or False.

        Returns:
            EmitLegacyScripts: The matching member.
        """
        if value is None:
            return cls.UNSET
        return cls.FORCE_ON if value else cls.FORCE_OFF

# -----------------------------------------------------------------------------
# PROPERTY VALUES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EnumValue:
    """
    A resolved member of a reflection enum.

    Attributes:
        enum_name: Name of the owning enum (e.g. "RunContext").
        item_name: Member name (e.g. "Server").
        value: Numeric value as declared in the schema.
    """
    enum_name: str
    item_name: str
    value: int


PropertyValue = Union[str, bool, int, float, EnumValue, Dict[str, Any]]

# -----------------------------------------------------------------------------
# TRAVERSAL CONTEXT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class InstanceContext:
    """
    Immutable per-build configuration shared by reference across the walk.

    Attributes:
        path_ignore_rules: Ordered rules; a path is kept only if all pass.
        emit_legacy_scripts: Script class resolution mode.
    """
    path_ignore_rules: Tuple["PathIgnoreRule", ...] = ()
    emit_legacy_scripts: EmitLegacyScripts = EmitLegacyScripts.UNSET

    @classmethod
    def with_emit_legacy_scripts(
            cls,
            emit_legacy_scripts: Union[EmitLegacyScripts, Optional[bool]],
    ) -> InstanceContext:
        """Build a context with no ignore rules and the given legacy mode."""
        if not isinstance(emit_legacy_scripts, EmitLegacyScripts):
            emit_legacy_scripts = EmitLegacyScripts.from_optional_bool(emit_legacy_scripts)
        return cls(emit_legacy_scripts=emit_legacy_scripts)

    def add_path_ignore_rules(self, rules: Iterable["PathIgnoreRule"]) -> InstanceContext:
        """Return a copy of this context with extra ignore rules appended."""
        return dataclasses.replace(
            self, path_ignore_rules=self.path_ignore_rules + tuple(rules)
        )

    def passes_ignore_rules(self, path: str) -> bool:
        """Check a path against every registered ignore rule."""
        return all(rule.passes(path) for rule in self.path_ignore_rules)

# -----------------------------------------------------------------------------
# SNAPSHOT TREE
# -----------------------------------------------------------------------------

@dataclass
class InstanceMetadata:
    """
    Bookkeeping attached to a snapshot for change detection.

    Attributes:
        instigating_source: Filesystem path that produced the node.
        relevant_paths: Paths whose change invalidates the node, existing or not.
        context: The context active when the node was built. Read-only.
        ignore_unknown_instances: Overlay-only flag telling reconciliation to
            keep instances on the target that have no snapshot counterpart.
    """
    instigating_source: Optional[str] = None
    relevant_paths: List[str] = field(default_factory=list)
    context: InstanceContext = field(default_factory=InstanceContext)
    ignore_unknown_instances: bool = False


@dataclass
class InstanceSnapshot:
    """
    Description of a future object-model instance and its subtree.

    Attributes:
        name: Instance name.
        class_name: Member of the class taxonomy.
        properties: Property name to typed value.
        children: Child snapshots in build order.
        metadata: Change-detection metadata.
    """
    name: str
    class_name: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)
    children: List[InstanceSnapshot] = field(default_factory=list)
    metadata: InstanceMetadata = field(default_factory=InstanceMetadata)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the snapshot subtree into plain, key-sorted data.

        The context back-reference is reduced to its legacy flag so the output
        stays serializable.

        Returns:
            Dict[str, Any]: Nested representation of the subtree.
        """
        return {
            "name": self.name,
            "class_name": self.class_name,
            "properties": {
                key: _property_to_plain(self.properties[key])
                for key in sorted(self.properties)
            },
            "metadata": {
                "instigating_source": self.metadata.instigating_source,
                "relevant_paths": list(self.metadata.relevant_paths),
                "ignore_unknown_instances": self.metadata.ignore_unknown_instances,
                "emit_legacy_scripts": self.metadata.context.emit_legacy_scripts.value,
            },
            "children": [child.to_dict() for child in self.children],
        }


def _property_to_plain(value: PropertyValue) -> Any:
    """Flatten enum values into a tagged mapping."""
    if isinstance(value, EnumValue):
        return {"Enum": value.value, "name": f"{value.enum_name}.{value.item_name}"}
    return value
