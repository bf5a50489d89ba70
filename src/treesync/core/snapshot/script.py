from __future__ import annotations

"""
Script Snapshot Builder.

Turns a script file into a single instance snapshot. Class resolution keeps
two historical conventions alive: a distinct class per execution side
(Script / LocalScript) and a single Script class tagged with a RunContext.
The traversal context decides which one is emitted.
"""

import logging
import os
from typing import Dict, Optional, Tuple

from treesync.core.schema.reflection import ReflectionDatabase
from treesync.core.snapshot.metadata import AdjacentMetadata
from treesync.domain.constants import (
    CLASS_LOCAL_SCRIPT,
    CLASS_MODULE_SCRIPT,
    CLASS_SCRIPT,
    ENUM_RUN_CONTEXT,
    META_FILE_SUFFIX,
    PROP_RUN_CONTEXT,
    PROP_SOURCE,
)
from treesync.domain.snapshot_models import (
    EmitLegacyScripts,
    InstanceContext,
    InstanceMetadata,
    InstanceSnapshot,
    PropertyValue,
    ScriptType,
)
from treesync.infra.fs import FileSystem

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CLASSIFICATION
# -----------------------------------------------------------------------------

def classify_script(
        emit_legacy_scripts: EmitLegacyScripts,
        script_type: ScriptType,
) -> Tuple[str, Optional[str]]:
    """
    Resolve the class name and RunContext member for a script.

    UNSET behaves like FORCE_ON for server and client scripts. Module scripts
    ignore the flag entirely.

    Args:
        emit_legacy_scripts: Legacy emission mode from the context.
        script_type: Script flavour derived from the file name.

    Returns:
        Tuple[str, Optional[str]]: (class name, RunContext member name or None).
    """
    if script_type is ScriptType.MODULE:
        return CLASS_MODULE_SCRIPT, None

    if emit_legacy_scripts is EmitLegacyScripts.FORCE_OFF:
        if script_type is ScriptType.SERVER:
            return CLASS_SCRIPT, "Server"
        return CLASS_SCRIPT, "Client"

    if script_type is ScriptType.SERVER:
        return CLASS_SCRIPT, "Legacy"
    return CLASS_LOCAL_SCRIPT, None


def meta_path_for(path: str, name: str) -> str:
    """Compute the sidecar path `<name>.meta.json` next to the script."""
    return os.path.join(os.path.dirname(path), f"{name}{META_FILE_SUFFIX}")

# -----------------------------------------------------------------------------
# BUILDER
# -----------------------------------------------------------------------------

def snapshot_script(
        context: InstanceContext,
        fs: FileSystem,
        path: str,
        name: str,
        script_type: ScriptType,
        *,
        schema: ReflectionDatabase,
) -> Optional[InstanceSnapshot]:
    """
    Build the snapshot of a single script file.

    Args:
        context: Active traversal context.
        fs: Filesystem collaborator.
        path: Script file path.
        name: Logical instance name (file name without script suffix).
        script_type: Script flavour.
        schema: Reflection provider used for RunContext and overlay resolution.

    Returns:
        Optional[InstanceSnapshot]: Always a snapshot once the read succeeds.

    Raises:
        OSError: If the script or an existing sidecar cannot be read.
        SchemaLookupError: If the RunContext enum or member is missing.
        MetadataParseError: If the sidecar is malformed.
        MetadataValidationError: If a sidecar override is invalid.
    """
    class_name, run_context_member = classify_script(context.emit_legacy_scripts, script_type)

    # A schema without RunContext is unusable for any script flavour
    schema.require_enum(ENUM_RUN_CONTEXT)
    run_context = (
        schema.get_enum_item(ENUM_RUN_CONTEXT, run_context_member)
        if run_context_member is not None
        else None
    )

    contents = fs.read_to_string_lf_normalized(path)

    properties: Dict[str, PropertyValue] = {PROP_SOURCE: contents}
    if run_context is not None:
        properties[PROP_RUN_CONTEXT] = run_context

    meta_path = meta_path_for(path, name)

    snapshot = InstanceSnapshot(
        name=name,
        class_name=class_name,
        properties=properties,
        metadata=InstanceMetadata(
            instigating_source=path,
            relevant_paths=[path, meta_path],
            context=context,
        ),
    )

    meta_contents = _read_optional(fs, meta_path)
    if meta_contents is not None:
        metadata = AdjacentMetadata.from_slice(meta_contents, meta_path)
        metadata.apply_all(snapshot, schema)

    logger.debug(f"Snapshot: {class_name} '{name}' from {path}")
    return snapshot

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _read_optional(fs: FileSystem, path: str) -> Optional[bytes]:
    """Read a file, mapping 'does not exist' to None."""
    try:
        return fs.read(path)
    except FileNotFoundError:
        return None
