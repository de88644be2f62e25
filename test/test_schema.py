"""
Tests for node type declarations and their validation.
"""

import pytest

from asap2 import Node, NodeDict, Role, SchemaError, asap2_node, element, schema_of
from asap2.a2l_model import (
    Alignment,
    BitMask,
    CompuVTab,
    Header,
    Measurement,
    Module,
)
from asap2.schema import NodeKind, grammar_keywords, lookup, verbatim_keywords


def test_measurement_schema()->None:
    schema = schema_of(Measurement)
    assert schema.keyword == "MEASUREMENT"
    assert schema.kind is NodeKind.BLOCK
    assert [fd.name for fd in schema.positional] == [
        "name", "long_identifier", "datatype", "conversion",
        "resolution", "accuracy", "lower_limit", "upper_limit",
    ]
    assert schema.key_field.name == "name"
    assert "BIT_MASK" in schema.statement_keywords
    assert "IF_DATA" in schema.block_keywords
    assert schema.field("bit_mask").kind is BitMask


def test_fields_are_sorted_by_ordinal()->None:
    # conversion_type is declared after number_value_pairs
    names = [fd.name for fd in schema_of(CompuVTab).positional]
    assert names == ["name", "long_identifier", "conversion_type", "number_value_pairs"]


def test_anonymous_children()->None:
    assert [fd.name for fd in schema_of(CompuVTab).anonymous] == ["value_pairs"]
    assert schema_of(Alignment).keyword is None
    assert schema_of(Alignment).is_simple


def test_registry()->None:
    assert lookup("MODULE") is Module
    assert lookup("ALIGNMENT_BYTE") is None
    assert {"MODULE", "DATA_SIZE", "SIGN_EXTEND", "DEFAULT_VALUE"} <= grammar_keywords()
    assert verbatim_keywords() == {"A2ML", "IF_DATA"}


def test_schema_of_rejects_plain_objects()->None:
    with pytest.raises(SchemaError):
        schema_of(object())


def test_duplicate_ordinal()->None:
    with pytest.raises(SchemaError, match="share ordinal 1"):
        @asap2_node("TEST_DUPLICATE_ORDINAL", simple=True)
        class DuplicateOrdinal(Node):
            name: str = element(1, Role.STRING, key=True)
            value: str = element(1, Role.STRING)


def test_hex_string_conflict()->None:
    with pytest.raises(SchemaError, match="only integer arguments can be coded as hex"):
        @asap2_node("TEST_HEX_STRING", simple=True)
        class HexString(Node):
            value: str = element(0, Role.STRING, as_hex=True)


def test_repeated_keyword_value()->None:
    with pytest.raises(SchemaError, match="keyword values cannot be repeated"):
        @asap2_node("TEST_REPEATED_KEYWORD")
        class RepeatedKeyword(Node):
            name: str = element(0, Role.NAME, key=True)
            refs: list[str] | None = element(1, Role.ARGUMENT, str, keyword="TEST_REFS", repeated=True)


def test_missing_descriptor()->None:
    with pytest.raises(SchemaError, match="has no element descriptor"):
        @asap2_node("TEST_PLAIN_FIELD", simple=True)
        class PlainField(Node):
            value: int = 0


def test_positional_after_member()->None:
    with pytest.raises(SchemaError, match="follows keyword members"):
        @asap2_node("TEST_LATE_POSITIONAL")
        class LatePositional(Node):
            mask: BitMask | None = element(0, Role.NODE, BitMask)
            value: int = element(1, Role.ARGUMENT, int, default=0)


def test_dictionary_needs_key()->None:
    with pytest.raises(SchemaError, match="has no key field"):
        @asap2_node("TEST_MASK_DICT")
        class MaskDict(Node):
            masks: NodeDict[BitMask] = element(0, Role.DICT, BitMask)


def test_simple_node_without_values()->None:
    with pytest.raises(SchemaError, match="simple nodes hold positional values only"):
        @asap2_node("TEST_SIMPLE_FLAG", simple=True)
        class SimpleFlag(Node):
            flag: bool = element(0, Role.FLAG, keyword="TEST_FLAG")


def test_keyword_taken()->None:
    with pytest.raises(SchemaError, match="already declared"):
        @asap2_node("BIT_MASK", simple=True)
        class OtherMask(Node):
            value: int = element(0, Role.ARGUMENT, int)
    assert lookup("BIT_MASK") is BitMask


def test_block_needs_keyword()->None:
    with pytest.raises(SchemaError, match="need a keyword"):
        @asap2_node()
        class Nameless(Node):
            value: int = element(0, Role.ARGUMENT, int)


def test_required_field_at_construction()->None:
    with pytest.raises(SchemaError, match="required field 'comment'"):
        Header(None)


def test_optional_fields_default_to_absent()->None:
    header = Header("comment")
    assert header.version is None
    module = Module("M", "")
    assert module.mod_common is None
    assert module.if_data == []
    assert len(module.measurements) == 0
    assert isinstance(module.measurements, NodeDict)
