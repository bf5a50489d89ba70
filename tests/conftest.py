from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for schemas, contexts and in-memory filesystems.
"""

import os
import sys
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from treesync.core.schema.reflection import ReflectionDatabase  # noqa: E402
from treesync.infra.fs import InMemoryFileSystem  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def minimal_schema_dict() -> Dict[str, Any]:
    """
    Return the smallest schema mapping the script builder can work with.

    Mirrors the layout of the bundled reflection database.
    """
    return {
        "version": "test",
        "enums": {
            "RunContext": {"Legacy": 0, "Server": 1, "Client": 2, "Plugin": 3},
        },
        "classes": {
            "Instance": {
                "superclass": None,
                "properties": {
                    "Name": {"type": "String"},
                    "Attributes": {"type": "Attributes"},
                },
            },
            "Folder": {"superclass": "Instance", "properties": {}},
            "BaseScript": {
                "superclass": "Instance",
                "properties": {
                    "Disabled": {"type": "Bool"},
                    "RunContext": {"type": "Enum", "enum": "RunContext"},
                },
            },
            "Script": {"superclass": "BaseScript", "properties": {"Source": {"type": "String"}}},
            "LocalScript": {"superclass": "Script", "properties": {}},
            "ModuleScript": {"superclass": "Instance", "properties": {"Source": {"type": "String"}}},
        },
    }


@pytest.fixture
def schema(minimal_schema_dict) -> ReflectionDatabase:
    """Reflection provider built from the minimal schema."""
    return ReflectionDatabase.from_dict(minimal_schema_dict)


@pytest.fixture
def memory_fs() -> InMemoryFileSystem:
    """Empty in-memory filesystem."""
    return InMemoryFileSystem()
