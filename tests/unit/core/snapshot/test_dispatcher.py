from __future__ import annotations

"""
Unit tests for the Snapshot Dispatcher.

Verifies:
1. Suffix-based selection of script builders.
2. Registration order and custom builders.
3. Recursive directory builds through the registry.
"""

from treesync.core.snapshot.dispatcher import (
    SnapshotDispatcher,
    create_default_dispatcher,
    script_name_from_path,
)
from treesync.domain.constants import CLIENT_SCRIPT_SUFFIXES, MODULE_SCRIPT_SUFFIXES
from treesync.domain.snapshot_models import InstanceContext, InstanceSnapshot


def test_script_name_from_path():
    assert script_name_from_path("/a/foo.client.lua", CLIENT_SCRIPT_SUFFIXES) == "foo"
    assert script_name_from_path("/a/foo.luau", MODULE_SCRIPT_SUFFIXES) == "foo"
    assert script_name_from_path("/a/.lua", MODULE_SCRIPT_SUFFIXES) is None
    assert script_name_from_path("/a/foo.txt", MODULE_SCRIPT_SUFFIXES) is None


def test_default_registry_order(schema):
    names = [e.name for e in create_default_dispatcher(schema).entries]
    assert names == ["server_script", "client_script", "module_script"]


def test_server_suffix_wins_over_module_suffix(memory_fs, schema):
    memory_fs.load_file("/foo.server.lua", "x")
    dispatcher = create_default_dispatcher(schema)

    snap = dispatcher.snapshot_from_fs(InstanceContext(), memory_fs, "/foo.server.lua")

    assert snap.name == "foo"
    assert snap.class_name == "Script"


def test_missing_path_yields_nothing(memory_fs, schema):
    dispatcher = create_default_dispatcher(schema)
    assert dispatcher.snapshot_from_fs(InstanceContext(), memory_fs, "/nope") is None


def test_project_tree(memory_fs, schema):
    memory_fs.load_tree("/proj", {
        "src": {
            "main.server.lua": "print('server')",
            "ui.client.lua": "print('client')",
            "util.lua": "return {}",
            "util.meta.json": '{"ignoreUnknownInstances": true}',
            "notes.md": "# skipped",
        },
        "empty": {},
    })
    ctx = InstanceContext.with_emit_legacy_scripts(False)

    root = create_default_dispatcher(schema).snapshot_from_fs(ctx, memory_fs, "/proj")

    assert root.class_name == "Folder"
    assert [c.name for c in root.children] == ["empty", "src"]
    src = root.children[1]
    by_name = {c.name: c for c in src.children}
    assert list(by_name) == ["main", "ui", "util"]
    assert by_name["main"].properties["RunContext"].item_name == "Server"
    assert by_name["ui"].class_name == "Script"
    assert by_name["ui"].properties["RunContext"].item_name == "Client"
    assert by_name["util"].class_name == "ModuleScript"
    assert by_name["util"].metadata.ignore_unknown_instances is True


def test_custom_builder_is_consulted(memory_fs, schema):
    memory_fs.load_tree("/proj", {"data.txt": "hello"})
    dispatcher = SnapshotDispatcher(schema)
    dispatcher.register(
        name="text",
        predicate=lambda p: p.endswith(".txt"),
        builder=lambda ctx, fs, p: InstanceSnapshot(
            name="data", class_name="Folder", properties={"Name": fs.read(p).decode()}
        ),
    )

    root = dispatcher.snapshot_from_fs(InstanceContext(), memory_fs, "/proj")

    assert [c.properties["Name"] for c in root.children] == ["hello"]
