"""
Struct resolver: inheritance flattening, alias expansion, variant synthesis
and every resolution failure.
"""

from __future__ import annotations

import json
from dataclasses import FrozenInstanceError

import pytest

from eosio_abi import resolve
from eosio_abi.document import AbiDocument, validate_abi
from eosio_abi.errors import (
    CyclicInheritance,
    DuplicateFieldName,
    InvalidAbiDocument,
    MalformedTypeString,
    MisplacedBinaryExtension,
    ResolutionError,
    UnknownPrimitiveType,
    UnresolvedAliasTarget,
)
from eosio_abi.schema import ResolvedField


def _abi(structs, types=(), variants=()):
    return {"version": "eosio::abi/1.1", "types": list(types), "structs": list(structs), "variants": list(variants)}


def _struct(name, fields, base=""):
    return {"name": name, "base": base, "fields": [{"name": n, "type": t} for n, t in fields]}


def _names(schema, struct):
    return [f.name for f in schema[struct]]


# ──────────────────────────────────────────────────────────────────────────────
# Happy paths
# ──────────────────────────────────────────────────────────────────────────────


def test_inheritance_puts_base_fields_first(shapes_schema):
    assert _names(shapes_schema, "b") == ["x", "y"]
    assert shapes_schema["b"][0] == ResolvedField("x", "uint8")


def test_three_level_inheritance():
    schema = resolve(
        _abi([_struct("c", [("z", "bool")], base="b"), _struct("a", [("x", "uint8")]), _struct("b", [("y", "uint8")], base="a")])
    )
    assert _names(schema, "c") == ["x", "y", "z"]


def test_primitive_alias_is_transparent(shapes_schema):
    owner, friends, nickname, tags, origin = shapes_schema["record"]
    assert owner == ResolvedField("owner", "name")
    assert friends == ResolvedField("friends", "name", is_list=True)
    assert nickname.is_optional and nickname.base_type == "string"
    assert tags.is_list and tags.is_optional
    assert origin.is_object and origin.base_type == "point_alias"


def test_struct_alias_copies_fields(shapes_schema):
    assert shapes_schema["point_alias"] == shapes_schema["point"]
    assert shapes_schema.is_variant("shape_alias")
    assert shapes_schema.variant_members("shape_alias") == ("uint8", "string", "point")


def test_alias_modifiers_or_into_use_site():
    schema = resolve(
        _abi([_struct("s", [("maybe", "names?")])], types=[{"new_type_name": "names", "type": "name[]"}])
    )
    (f,) = schema["s"]
    assert (f.base_type, f.is_list, f.is_optional) == ("name", True, True)


def test_alias_chains_resolve_transitively():
    schema = resolve(
        _abi(
            [_struct("s", [("who", "acct2")])],
            types=[
                {"new_type_name": "acct2", "type": "acct1"},
                {"new_type_name": "acct1", "type": "name"},
            ],
        )
    )
    assert schema["s"][0].base_type == "name"
    assert schema.type_aliases["acct2"].base_type == "name"


def test_variant_becomes_struct(shapes_schema):
    assert shapes_schema.is_variant("shape")
    slots = shapes_schema["shape"]
    assert [s.name for s in slots] == ["uint8", "string", "point"]
    assert all(s.is_extension and s.is_variant_member for s in slots)
    assert slots[2].is_object and not slots[0].is_object


def test_variant_with_list_member():
    schema = resolve(_abi([], variants=[{"name": "v", "types": ["name[]", "bool"]}]))
    slot = schema["v"][0]
    assert (slot.name, slot.base_type, slot.is_list) == ("name[]", "name", True)


def test_is_object_flag(token_schema):
    assert all(not f.is_object for f in token_schema["transfer"])


def test_extension_fields_at_tail(shapes_schema):
    fields = shapes_schema["versioned"]
    assert [f.is_extension for f in fields] == [False, True, True]
    assert fields[2].is_optional
    assert fields[1].nullable and not fields[0].nullable


def test_declaration_order_is_preserved(shapes_schema):
    assert list(shapes_schema) == [
        "a", "b", "point", "record", "versioned", "holder", "shape", "point_alias", "shape_alias",
    ]


def test_schema_is_immutable(shapes_schema):
    with pytest.raises(TypeError):
        shapes_schema["a"] = ()  # type: ignore[index]
    with pytest.raises(FrozenInstanceError):
        shapes_schema["a"][0].name = "changed"  # type: ignore[misc]


def test_resolution_is_deterministic(shapes_abi):
    assert resolve(shapes_abi) == resolve(json.dumps(shapes_abi))


def test_resolution_does_not_share_state(shapes_abi, token_abi):
    first = resolve(shapes_abi)
    resolve(token_abi)
    assert "transfer" not in first
    assert resolve(shapes_abi) == first


def test_to_dict_shape(token_schema):
    out = token_schema.to_dict()
    assert out["account"] == [
        {
            "name": "balance",
            "base_type": "asset",
            "is_object": False,
            "is_list": False,
            "is_optional": False,
            "is_extension": False,
            "is_variant_member": False,
            "is_element_optional": False,
        }
    ]


def test_null_base_is_no_base():
    schema = resolve({"structs": [{"name": "s", "base": None, "fields": [{"name": "a", "type": "bool"}]}]})
    assert _names(schema, "s") == ["a"]


def test_unknown_top_level_keys_are_ignored(token_abi):
    token_abi["action_results"] = [{"name": "transfer", "result_type": "void"}]
    doc = AbiDocument.from_json(token_abi)
    assert doc.action("transfer").type == "transfer"
    assert doc.table("accounts").index_type == "i64"


# ──────────────────────────────────────────────────────────────────────────────
# Failures
# ──────────────────────────────────────────────────────────────────────────────


def test_ghost_base_is_unresolved():
    with pytest.raises(UnresolvedAliasTarget) as ei:
        resolve(_abi([_struct("s", [("a", "bool")], base="ghost")]))
    assert ei.value.data["base"] == "ghost"


def test_alias_to_nothing_is_unresolved():
    with pytest.raises(UnresolvedAliasTarget):
        resolve(_abi([], types=[{"new_type_name": "x", "type": "nothing"}]))


def test_self_base_is_cyclic():
    with pytest.raises(CyclicInheritance):
        resolve(_abi([_struct("s", [("a", "bool")], base="s")]))


def test_base_cycle_is_cyclic():
    with pytest.raises(CyclicInheritance) as ei:
        resolve(_abi([_struct("a", [], base="b"), _struct("b", [], base="a")]))
    assert set(ei.value.data["chain"]) == {"a", "b"}


def test_alias_cycle_is_cyclic():
    with pytest.raises(CyclicInheritance):
        resolve(
            _abi(
                [],
                types=[{"new_type_name": "x", "type": "y"}, {"new_type_name": "y", "type": "x"}],
            )
        )


def test_duplicate_field_names():
    with pytest.raises(DuplicateFieldName):
        resolve(_abi([_struct("s", [("a", "bool"), ("a", "uint8")])]))


def test_duplicate_field_through_base():
    with pytest.raises(DuplicateFieldName):
        resolve(_abi([_struct("p", [("a", "bool")]), _struct("c", [("a", "bool")], base="p")]))


def test_regular_field_after_extension():
    with pytest.raises(MisplacedBinaryExtension):
        resolve(_abi([_struct("s", [("a", "bool$"), ("b", "bool")])]))


def test_extension_in_base_then_regular_field():
    with pytest.raises(MisplacedBinaryExtension):
        resolve(_abi([_struct("p", [("a", "bool$")]), _struct("c", [("b", "bool")], base="p")]))


def test_unknown_field_type():
    with pytest.raises(UnknownPrimitiveType) as ei:
        resolve(_abi([_struct("s", [("a", "uint256")])]))
    assert ei.value.data["field"] == "a"


def test_nested_list_through_alias():
    with pytest.raises(MalformedTypeString):
        resolve(_abi([_struct("s", [("a", "names[]")])], types=[{"new_type_name": "names", "type": "name[]"}]))


def test_malformed_field_type():
    with pytest.raises(MalformedTypeString):
        resolve(_abi([_struct("s", [("a", "[]")])]))


def test_duplicate_struct_names():
    with pytest.raises(InvalidAbiDocument):
        resolve(_abi([_struct("s", []), _struct("s", [])]))


def test_struct_shadowing_primitive():
    with pytest.raises(InvalidAbiDocument):
        resolve(_abi([_struct("name", [])]))


@pytest.mark.parametrize(
    "doc",
    [
        {},
        {"structs": "nope"},
        {"structs": [{"name": "s"}]},
        {"structs": [{"name": "s", "fields": [{"name": "a"}]}]},
        {"structs": [], "variants": [{"name": "v"}]},
        {"structs": [], "types": [{"new_type_name": "", "type": "name"}]},
    ],
)
def test_json_schema_rejects_bad_documents(doc):
    with pytest.raises(InvalidAbiDocument) as ei:
        validate_abi(doc)
    assert ei.value.data["violations"] >= 1


def test_invalid_json_text():
    with pytest.raises(InvalidAbiDocument):
        resolve("{not json")


def test_all_resolution_errors_share_a_base():
    with pytest.raises(ResolutionError):
        resolve(_abi([_struct("s", [("a", "bool")], base="ghost")]))
