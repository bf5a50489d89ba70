from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Provides centralized access to the object-model class taxonomy, property
names written by the builders, and the filesystem naming conventions used
to recognize scripts and their sidecar metadata files.
"""

from typing import Tuple

# -----------------------------------------------------------------------------
# CLASS TAXONOMY
# -----------------------------------------------------------------------------
CLASS_FOLDER = "Folder"
CLASS_SCRIPT = "Script"
CLASS_LOCAL_SCRIPT = "LocalScript"
CLASS_MODULE_SCRIPT = "ModuleScript"

CLASS_TAXONOMY: Tuple[str, ...] = (
    CLASS_FOLDER,
    CLASS_SCRIPT,
    CLASS_LOCAL_SCRIPT,
    CLASS_MODULE_SCRIPT,
)

# -----------------------------------------------------------------------------
# PROPERTY AND ENUM NAMES
# -----------------------------------------------------------------------------
PROP_SOURCE = "Source"
PROP_RUN_CONTEXT = "RunContext"
PROP_ATTRIBUTES = "Attributes"

ENUM_RUN_CONTEXT = "RunContext"

# -----------------------------------------------------------------------------
# FILESYSTEM NAMING CONVENTIONS
# -----------------------------------------------------------------------------
META_FILE_SUFFIX = ".meta.json"

SERVER_SCRIPT_SUFFIXES: Tuple[str, ...] = (".server.lua", ".server.luau")
CLIENT_SCRIPT_SUFFIXES: Tuple[str, ...] = (".client.lua", ".client.luau")
MODULE_SCRIPT_SUFFIXES: Tuple[str, ...] = (".lua", ".luau")

REFLECTION_DATABASE_FILENAME = "reflection_database.json"
