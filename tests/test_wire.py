"""Tests for the sentinel and tagged-union wire helpers."""

import pytest

from analyticdefs.kernel.wire import (
    ITEM,
    T,
    TEXT,
    TYPE,
    XML_TYPE,
    collapse_tagged_union,
    decode_sentinel,
    expand_tagged_union,
    expose_discriminator,
    is_empty_sentinel,
    is_number_str,
    null_sentinel,
    array_sentinel,
    wrap_scalar,
)

IGNORED = {"workbook", "dataSet", "formula"}
DISCRIMINATED = {"formula"}


class TestDecodeSentinel:
    """Sentinel wrappers decode to canonical values."""

    def test_null(self):
        assert decode_sentinel({TYPE: "null"}) == {}

    def test_array_without_items(self):
        assert decode_sentinel({TYPE: "array"}) == []

    def test_array_with_single_item(self):
        assert decode_sentinel({TYPE: "array", ITEM: {"id": "a"}}) == [{"id": "a"}]

    def test_array_with_items(self):
        assert decode_sentinel({TYPE: "array", ITEM: ["a", "b"]}) == ["a", "b"]

    def test_boolean(self):
        assert decode_sentinel({TYPE: "boolean", TEXT: "true"}) is True
        assert decode_sentinel({TYPE: "boolean", TEXT: "false"}) is False
        # the XML reader may already have produced a native bool
        assert decode_sentinel({TYPE: "boolean", TEXT: False}) is False

    def test_string(self):
        assert decode_sentinel({TYPE: "string", TEXT: "12"}) == "12"
        assert decode_sentinel({TYPE: "string", TEXT: 12}) == "12"
        assert decode_sentinel({TYPE: "string"}) == ""

    def test_not_a_sentinel(self):
        with pytest.raises(ValueError):
            decode_sentinel({TYPE: "other"})


class TestWrapScalar:
    """Canonical values that need a sentinel on the wire."""

    def test_list(self):
        assert wrap_scalar(["a"]) == {TYPE: "array", ITEM: ["a"]}

    def test_boolean(self):
        assert wrap_scalar(True) == {TYPE: "boolean", TEXT: "true"}
        assert wrap_scalar(False) == {TYPE: "boolean", TEXT: "false"}

    def test_numeric_string(self):
        assert wrap_scalar("12") == {TYPE: "string", TEXT: "12"}
        assert wrap_scalar("0.1") == {TYPE: "string", TEXT: "0.1"}

    def test_plain_values_pass_through(self):
        assert wrap_scalar("custview1") == "custview1"
        assert wrap_scalar(12) == 12
        assert wrap_scalar({"a": 1}) == {"a": 1}
        assert wrap_scalar(None) is None

    def test_decode_inverts_wrap(self):
        assert decode_sentinel(wrap_scalar(["a", "b"])) == ["a", "b"]
        assert decode_sentinel(wrap_scalar(True)) is True
        assert decode_sentinel(wrap_scalar("42")) == "42"


class TestIsNumberStr:
    """Mirrors what the serializer treats as numeric text."""

    @pytest.mark.parametrize("value", ["12", "-1.5", "1e3", ".5", "5.", " 7 ", "0x1F", "Infinity", "", "  "])
    def test_numeric(self, value):
        assert is_number_str(value)

    @pytest.mark.parametrize("value", ["abc", "12abc", "1,000", "custview1", "1.2.3", "NaN"])
    def test_not_numeric(self, value):
        assert not is_number_str(value)


class TestEmptySentinels:
    def test_empty(self):
        assert is_empty_sentinel(null_sentinel())
        assert is_empty_sentinel(array_sentinel())

    def test_not_empty(self):
        assert not is_empty_sentinel(array_sentinel(["a"]))
        assert not is_empty_sentinel(False)
        assert not is_empty_sentinel({})


class TestTaggedUnions:
    """Expand on fetch, collapse on deploy."""

    def test_expand_nests_variant_under_tag(self):
        raw = {T: "fieldReference", "id": "entityid", "label": "Name"}
        assert expand_tagged_union(raw, IGNORED) == {"fieldReference": {"id": "entityid", "label": "Name"}}

    def test_expand_drops_ignored_tag(self):
        raw = {T: "formula", "formulaSQL": "{id}"}
        assert expand_tagged_union(raw, IGNORED) == {"formulaSQL": "{id}"}

    def test_collapse_marked_single_variant(self):
        canonical = {"fieldReference": {"id": "entityid"}, T: "fieldReference"}
        assert collapse_tagged_union("field", canonical, DISCRIMINATED) == {T: "fieldReference", "id": "entityid"}

    def test_expand_then_collapse_is_identity(self):
        raw = {T: "filter", "fieldStateName": "display"}
        expanded = expand_tagged_union(raw, IGNORED)
        (variant,) = expanded
        marked = {**expanded, T: variant}
        assert collapse_tagged_union("criteria", marked, DISCRIMINATED) == raw

    def test_ignored_tag_restored_from_discriminated_key(self):
        raw = {T: "formula", "formulaSQL": "{id}"}
        expanded = expand_tagged_union(raw, IGNORED)
        assert collapse_tagged_union("formula", expanded, DISCRIMINATED) == raw

    def test_discriminated_key_holding_sentinel_unchanged(self):
        assert collapse_tagged_union("formula", null_sentinel(), DISCRIMINATED) == null_sentinel()

    def test_exposed_discriminator_collapses(self):
        exposed = expose_discriminator({T: "oddRecord", "id": "customer"})
        assert exposed == {XML_TYPE: "oddRecord", "id": "customer"}
        assert collapse_tagged_union("baseRecord", exposed, DISCRIMINATED) == {T: "oddRecord", "id": "customer"}

    def test_unmarked_mapping_unchanged(self):
        value = {"id": "customer", "label": "Customer"}
        assert collapse_tagged_union("baseRecord", value, DISCRIMINATED) == value

    def test_marked_scalar_variant_unchanged(self):
        value = {T: "a", "a": "text"}
        assert collapse_tagged_union("x", value, DISCRIMINATED) == value

    def test_non_mapping_unchanged(self):
        assert collapse_tagged_union("formula", "text", DISCRIMINATED) == "text"
