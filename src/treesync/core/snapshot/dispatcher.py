from __future__ import annotations

"""
Snapshot Dispatcher.

Selects which builder handles a given path. Directories always go to the
directory builder; files go to the first registered builder whose predicate
accepts the path. Files that no builder claims (including sidecar metadata
files) produce no snapshot.
"""

import functools
import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from treesync.core.schema.reflection import ReflectionDatabase
from treesync.core.snapshot.directory import snapshot_dir
from treesync.core.snapshot.script import snapshot_script
from treesync.domain.constants import (
    CLIENT_SCRIPT_SUFFIXES,
    MODULE_SCRIPT_SUFFIXES,
    SERVER_SCRIPT_SUFFIXES,
)
from treesync.domain.snapshot_models import InstanceContext, InstanceSnapshot, ScriptType
from treesync.infra.fs import FileSystem, RealFileSystem

logger = logging.getLogger(__name__)

PathPredicate = Callable[[str], bool]
BuilderFn = Callable[[InstanceContext, FileSystem, str], Optional[InstanceSnapshot]]

# -----------------------------------------------------------------------------
# REGISTRY MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BuilderEntry:
    """
    A tagged file builder.

    Attributes:
        name: Identifier used in logs.
        predicate: Decides whether the builder applies to a path.
        builder: Function producing the snapshot.
    """
    name: str
    predicate: PathPredicate
    builder: BuilderFn


class SnapshotDispatcher:
    """
    Ordered registry of file builders plus the directory fallback.
    """

    def __init__(self, schema: ReflectionDatabase) -> None:
        self.schema = schema
        self._entries: List[BuilderEntry] = []

    @property
    def entries(self) -> Tuple[BuilderEntry, ...]:
        return tuple(self._entries)

    def register(self, name: str, predicate: PathPredicate, builder: BuilderFn) -> None:
        """Append a builder; earlier registrations take precedence."""
        self._entries.append(BuilderEntry(name=name, predicate=predicate, builder=builder))

    def snapshot_from_fs(
            self,
            context: InstanceContext,
            fs: FileSystem,
            path: str,
    ) -> Optional[InstanceSnapshot]:
        """
        Build the snapshot for any path.

        Args:
            context: Active traversal context.
            fs: Filesystem collaborator.
            path: Path to snapshot.

        Returns:
            Optional[InstanceSnapshot]: None for missing or unclaimed paths.
        """
        meta = fs.metadata(path)
        if meta is None:
            logger.debug(f"Dispatch: Path does not exist: {path}")
            return None

        if meta.is_dir:
            return snapshot_dir(context, fs, path, dispatch=self.snapshot_from_fs)

        for entry in self._entries:
            if entry.predicate(path):
                return entry.builder(context, fs, path)

        logger.debug(f"Dispatch: No builder claimed file: {path}")
        return None

# -----------------------------------------------------------------------------
# DEFAULT REGISTRY
# -----------------------------------------------------------------------------

def create_default_dispatcher(schema: ReflectionDatabase) -> SnapshotDispatcher:
    """
    Build a dispatcher with the standard script naming conventions.

    Order matters: '.server.lua' and '.client.lua' must be tried before the
    plain '.lua' module suffix.
    """
    dispatcher = SnapshotDispatcher(schema)
    for script_type, suffixes in (
            (ScriptType.SERVER, SERVER_SCRIPT_SUFFIXES),
            (ScriptType.CLIENT, CLIENT_SCRIPT_SUFFIXES),
            (ScriptType.MODULE, MODULE_SCRIPT_SUFFIXES),
    ):
        dispatcher.register(
            name=f"{script_type.value}_script",
            predicate=functools.partial(_has_suffix, suffixes=suffixes),
            builder=functools.partial(
                _build_script, script_type=script_type, suffixes=suffixes, schema=schema
            ),
        )
    return dispatcher


def script_name_from_path(path: str, suffixes: Tuple[str, ...]) -> Optional[str]:
    """Strip the first matching script suffix from the file name."""
    file_name = os.path.basename(path)
    for suffix in suffixes:
        if file_name.endswith(suffix) and len(file_name) > len(suffix):
            return file_name[: -len(suffix)]
    return None

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _has_suffix(path: str, *, suffixes: Tuple[str, ...]) -> bool:
    return script_name_from_path(path, suffixes) is not None


def _build_script(
        context: InstanceContext,
        fs: FileSystem,
        path: str,
        *,
        script_type: ScriptType,
        suffixes: Tuple[str, ...],
        schema: ReflectionDatabase,
) -> Optional[InstanceSnapshot]:
    name = script_name_from_path(path, suffixes)
    if name is None:
        return None
    return snapshot_script(context, fs, path, name, script_type, schema=schema)

# -----------------------------------------------------------------------------
# PUBLIC ENTRY POINT
# -----------------------------------------------------------------------------

def snapshot_tree(
        path: str,
        context: Optional[InstanceContext] = None,
        fs: Optional[FileSystem] = None,
        schema: Optional[ReflectionDatabase] = None,
) -> Optional[InstanceSnapshot]:
    """
    Snapshot a path with the default dispatcher.

    Args:
        path: Root path (usually a project directory).
        context: Traversal context; defaults to InstanceContext().
        fs: Filesystem collaborator; defaults to the real disk.
        schema: Reflection provider; defaults to the bundled database.

    Returns:
        Optional[InstanceSnapshot]: The root snapshot, or None if unclaimed.
    """
    dispatcher = create_default_dispatcher(schema or ReflectionDatabase.load_bundled())
    logger.info(f"Building snapshot tree for: {path}")
    return dispatcher.snapshot_from_fs(context or InstanceContext(), fs or RealFileSystem(), path)
