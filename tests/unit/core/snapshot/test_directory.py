from __future__ import annotations

"""
Unit tests for the Directory Snapshot Builder.

Verifies:
1. Folder snapshots for empty and nested directories.
2. Ignore-rule filtering before dispatch.
3. Children order and skipped entries.
4. Naming and I/O failures.
"""

from unittest.mock import MagicMock

import pytest

from treesync.core.components.ignore_rules import PathIgnoreRule
from treesync.core.snapshot.directory import dir_instance_name, snapshot_dir
from treesync.domain.errors import PathEncodingError, SnapshotNameError
from treesync.domain.snapshot_models import InstanceContext, InstanceSnapshot


def _leaf_dispatch(context, fs, path):
    """Dispatcher stub returning a leaf snapshot for every entry."""
    return InstanceSnapshot(name=path.rsplit("/", 1)[-1], class_name="ModuleScript")


def _recursive_dispatch(context, fs, path):
    meta = fs.metadata(path)
    if meta is not None and meta.is_dir:
        return snapshot_dir(context, fs, path, dispatch=_recursive_dispatch)
    return None


def test_empty_folder(memory_fs):
    memory_fs.load_dir("/foo")

    snap = snapshot_dir(InstanceContext(), memory_fs, "/foo", dispatch=_leaf_dispatch)

    assert snap.name == "foo"
    assert snap.class_name == "Folder"
    assert snap.children == []
    assert snap.properties == {}
    assert snap.metadata.instigating_source == "/foo"
    assert snap.metadata.relevant_paths == ["/foo"]


def test_folder_in_folder(memory_fs):
    memory_fs.load_tree("/foo", {"Child": {}})

    snap = snapshot_dir(InstanceContext(), memory_fs, "/foo", dispatch=_recursive_dispatch)

    assert [c.name for c in snap.children] == ["Child"]
    child = snap.children[0]
    assert child.class_name == "Folder"
    assert child.metadata.relevant_paths == ["/foo/Child"]


def test_ignored_entry_is_never_dispatched(memory_fs):
    memory_fs.load_tree("/foo", {"keep.lua": "x", "skip.txt": "y"})
    ctx = InstanceContext().add_path_ignore_rules([PathIgnoreRule("*.txt", "/foo")])
    dispatch = MagicMock(side_effect=_leaf_dispatch)

    snap = snapshot_dir(ctx, memory_fs, "/foo", dispatch=dispatch)

    assert [c.name for c in snap.children] == ["keep.lua"]
    dispatch.assert_called_once_with(ctx, memory_fs, "/foo/keep.lua")


def test_entries_without_snapshot_contribute_nothing(memory_fs):
    memory_fs.load_tree("/foo", {"a.lua": "", "b.png": b"\x89PNG", "c.lua": ""})

    def dispatch(context, fs, path):
        return None if path.endswith(".png") else _leaf_dispatch(context, fs, path)

    snap = snapshot_dir(InstanceContext(), memory_fs, "/foo", dispatch=dispatch)

    assert [c.name for c in snap.children] == ["a.lua", "c.lua"]


def test_children_follow_listing_order(memory_fs):
    memory_fs.load_tree("/foo", {"zeta.lua": "", "alpha.lua": "", "mid.lua": ""})

    snap = snapshot_dir(InstanceContext(), memory_fs, "/foo", dispatch=_leaf_dispatch)

    assert [c.name for c in snap.children] == ["alpha.lua", "mid.lua", "zeta.lua"]


def test_context_is_shared_by_reference(memory_fs):
    memory_fs.load_tree("/foo", {"Child": {}})
    ctx = InstanceContext.with_emit_legacy_scripts(False)

    snap = snapshot_dir(ctx, memory_fs, "/foo", dispatch=_recursive_dispatch)

    assert snap.metadata.context is ctx
    assert snap.children[0].metadata.context is ctx


def test_child_failure_aborts_whole_build(memory_fs):
    memory_fs.load_tree("/foo", {"bad.lua": ""})

    def dispatch(context, fs, path):
        raise PermissionError(13, "Permission denied", path)

    with pytest.raises(PermissionError):
        snapshot_dir(InstanceContext(), memory_fs, "/foo", dispatch=dispatch)


def test_unreadable_directory_raises(memory_fs):
    with pytest.raises(FileNotFoundError):
        snapshot_dir(InstanceContext(), memory_fs, "/missing", dispatch=_leaf_dispatch)


def test_root_path_has_no_name():
    with pytest.raises(SnapshotNameError):
        dir_instance_name("/")


def test_trailing_separator_is_stripped():
    assert dir_instance_name("/proj/src/") == "src"


def test_trailing_dot_segment_names_the_parent():
    assert dir_instance_name("/proj/src/.") == "src"
    assert dir_instance_name("/proj/src/./") == "src"


def test_undecodable_name_raises_encoding_error():
    # os.fsdecode maps undecodable bytes to lone surrogates
    with pytest.raises(PathEncodingError):
        dir_instance_name("/proj/bad\udcff")
