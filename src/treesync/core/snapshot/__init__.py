from __future__ import annotations

from .directory import snapshot_dir
from .dispatcher import (
    BuilderEntry,
    SnapshotDispatcher,
    create_default_dispatcher,
    snapshot_tree,
)
from .metadata import AdjacentMetadata
from .script import classify_script, snapshot_script

__all__ = [
    "AdjacentMetadata",
    "BuilderEntry",
    "SnapshotDispatcher",
    "classify_script",
    "create_default_dispatcher",
    "snapshot_dir",
    "snapshot_script",
    "snapshot_tree",
]
