from __future__ import annotations

"""
Unit tests for the Reflection Schema Provider.

Verifies:
1. Loading of the bundled database.
2. Enum lookups, including the fatal path for missing members.
3. Property lookup through the superclass chain.
"""

import pytest

from treesync.core.schema.reflection import ReflectionDatabase
from treesync.domain.errors import SchemaLookupError, SnapshotError
from treesync.domain.snapshot_models import EnumValue


def test_bundled_database_has_run_context():
    db = ReflectionDatabase.load_bundled()

    assert db.get_enum_item("RunContext", "Legacy") == EnumValue("RunContext", "Legacy", 0)
    assert db.get_enum_item("RunContext", "Server").value == 1
    assert db.get_enum_item("RunContext", "Client").value == 2
    for class_name in ("Folder", "Script", "LocalScript", "ModuleScript"):
        assert db.has_class(class_name)


def test_missing_enum_is_an_internal_error(minimal_schema_dict):
    del minimal_schema_dict["enums"]["RunContext"]
    db = ReflectionDatabase.from_dict(minimal_schema_dict)

    with pytest.raises(SchemaLookupError) as exc_info:
        db.get_enum_item("RunContext", "Server")
    assert not isinstance(exc_info.value, SnapshotError)


def test_missing_member_is_an_internal_error(schema):
    with pytest.raises(SchemaLookupError):
        schema.get_enum_item("RunContext", "Nowhere")


def test_find_property_walks_superclasses(schema):
    prop = schema.find_property("LocalScript", "Disabled")
    assert prop is not None
    assert prop.owner_class == "BaseScript"
    assert prop.value_type == "Bool"

    assert schema.find_property("ModuleScript", "Disabled") is None
    assert schema.find_property("Unknown", "Name") is None


def test_find_enum_item_by_value(schema):
    assert schema.find_enum_item_by_value("RunContext", 2) == EnumValue("RunContext", "Client", 2)
    assert schema.find_enum_item_by_value("RunContext", 99) is None


def test_from_dict_rejects_unknown_property_type(minimal_schema_dict):
    minimal_schema_dict["classes"]["Folder"]["properties"]["Weird"] = {"type": "Vector9"}
    with pytest.raises(ValueError):
        ReflectionDatabase.from_dict(minimal_schema_dict)
