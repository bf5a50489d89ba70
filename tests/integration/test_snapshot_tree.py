from __future__ import annotations

"""
End-to-end tests for snapshot construction on the real filesystem.

Builds small projects under tmp_path with the bundled schema and checks the
resulting trees.
"""

from pathlib import Path

import pytest

from treesync.core.snapshot import snapshot_tree
from treesync.domain.config import build_instance_context, validate_settings
from treesync.domain.errors import MetadataParseError


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "game"
    (root / "server").mkdir(parents=True)
    (root / "client").mkdir()
    (root / "server" / "main.server.lua").write_bytes(b"print('a')\r\nprint('b')\r\n")
    (root / "server" / "main.meta.json").write_text('{"properties": {"Disabled": true}}')
    (root / "client" / "hud.client.lua").write_text("print('hud')\n")
    (root / "client" / "hud.spec.lua").write_text("return nil\n")
    (root / "README.md").write_text("docs")
    return root


def test_snapshot_project_with_settings(project: Path) -> None:
    settings, warnings = validate_settings({
        "project_root": str(project),
        "emit_legacy_scripts": False,
        "glob_ignore_paths": ["**/*.spec.lua"],
    })
    assert warnings == []

    root = snapshot_tree(str(project), context=build_instance_context(settings))

    assert root.name == "game"
    assert root.class_name == "Folder"
    assert [c.name for c in root.children] == ["client", "server"]

    client, server = root.children
    assert [c.name for c in client.children] == ["hud"]
    hud = client.children[0]
    assert hud.class_name == "Script"
    assert hud.properties["RunContext"].item_name == "Client"

    main = server.children[0]
    assert main.properties["Source"] == "print('a')\nprint('b')\n"
    assert main.properties["Disabled"] is True
    assert set(main.metadata.relevant_paths) == {
        str(project / "server" / "main.server.lua"),
        str(project / "server" / "main.meta.json"),
    }


def test_snapshot_project_with_default_context(project: Path) -> None:
    root = snapshot_tree(str(project))

    client = root.children[0]
    assert [c.name for c in client.children] == ["hud", "hud.spec"]
    assert client.children[0].class_name == "LocalScript"
    assert root.to_dict()["children"][1]["children"][0]["properties"]["RunContext"] == {
        "Enum": 0,
        "name": "RunContext.Legacy",
    }


def test_broken_sidecar_fails_whole_build(project: Path) -> None:
    (project / "client" / "hud.meta.json").write_text("{,}")

    with pytest.raises(MetadataParseError) as exc_info:
        snapshot_tree(str(project))
    assert exc_info.value.path == str(project / "client" / "hud.meta.json")
