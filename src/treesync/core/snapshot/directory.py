from __future__ import annotations

"""
Directory Snapshot Builder.

Turns a directory into a Folder snapshot whose children are produced by
calling back into the dispatcher for every entry that survives the context's
ignore rules.
"""

import logging
import os
from typing import Callable, List, Optional

from treesync.domain.constants import CLASS_FOLDER
from treesync.domain.errors import PathEncodingError, SnapshotNameError
from treesync.domain.snapshot_models import InstanceContext, InstanceMetadata, InstanceSnapshot
from treesync.infra.fs import FileSystem

logger = logging.getLogger(__name__)

DispatchFn = Callable[[InstanceContext, FileSystem, str], Optional[InstanceSnapshot]]


def snapshot_dir(
        context: InstanceContext,
        fs: FileSystem,
        path: str,
        *,
        dispatch: DispatchFn,
) -> Optional[InstanceSnapshot]:
    """
    Build a Folder snapshot for a directory and its accepted descendants.

    Args:
        context: Active traversal context.
        fs: Filesystem collaborator.
        path: Directory path.
        dispatch: Per-path builder selector invoked for each child entry.

    Returns:
        Optional[InstanceSnapshot]: The folder snapshot (never None).

    Raises:
        OSError: If the directory cannot be listed.
        SnapshotNameError: If the path has no final component.
        PathEncodingError: If the final component is not valid text.
    """
    children: List[InstanceSnapshot] = []

    for entry in fs.read_dir(path):
        if not context.passes_ignore_rules(entry.path):
            logger.debug(f"Snapshot: Ignored by rule: {entry.path}")
            continue

        child = dispatch(context, fs, entry.path)
        if child is not None:
            children.append(child)

    instance_name = dir_instance_name(path)

    return InstanceSnapshot(
        name=instance_name,
        class_name=CLASS_FOLDER,
        children=children,
        metadata=InstanceMetadata(
            instigating_source=path,
            relevant_paths=[path],
            context=context,
        ),
    )


def dir_instance_name(path: str) -> str:
    """
    Derive an instance name from the final component of a path.

    Raises:
        SnapshotNameError: If there is no final component.
        PathEncodingError: If the component holds undecodable bytes.
    """
    name = os.path.basename(os.path.normpath(path))
    if not name or name in (".", ".."):
        raise SnapshotNameError(path)

    # Undecodable bytes survive in str paths as lone surrogates
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise PathEncodingError(path) from e
    return name
