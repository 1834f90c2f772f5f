"""Tests for compiling validated trees into SQL condition fragments."""

from __future__ import annotations

import pytest

from compdb_filters import (
    FilterKind,
    TranslationError,
    TranslatorOptions,
    build_leaf,
    combine,
    compound_id_filter,
    compound_name_filter,
    msms_mz_range_max_filter,
    msms_mz_range_min_filter,
    parse,
    translate,
    validate,
)
from compdb_filters.escaping import escape_like, quote_text, render_list
from compdb_filters.translator import sql_condition, sql_value


def _sql(tree, caps, **kwargs):
    return translate(validate(tree, caps), **kwargs)


# -- leaves ------------------------------------------------------------------


def test_single_text_value(caps):
    assert _sql(compound_id_filter("comp_a"), caps) == "compound_id = 'comp_a'"


def test_single_numeric_value(msms_caps):
    assert _sql(msms_mz_range_min_filter(100), msms_caps) == "msms_mz_range_min >= 100"
    assert (
        _sql(msms_mz_range_max_filter(180.5, "<"), msms_caps)
        == "msms_mz_range_max < 180.5"
    )


def test_inner_quotes_are_doubled(caps):
    assert (
        _sql(compound_name_filter("O'Brien's acid"), caps)
        == "compound_name = 'O''Brien''s acid'"
    )


def test_inequality(caps):
    assert _sql(compound_name_filter("b", "!="), caps) == "compound_name != 'b'"


def test_multi_value_equality_folds_to_in(caps):
    assert _sql(compound_id_filter(["a", "b"]), caps) == "compound_id in ('a','b')"


def test_multi_value_inequality_folds_to_not_in(caps):
    assert (
        _sql(compound_id_filter(["a", "b'c"], "!="), caps)
        == "compound_id not in ('a','b''c')"
    )


def test_multi_value_numeric(msms_caps):
    leaf = build_leaf(FilterKind.MSMS_MZ_RANGE_MIN, "==", [1, 2.5])
    assert _sql(leaf, msms_caps) == "msms_mz_range_min in (1,2.5)"


def test_duplicate_values_collapse(caps):
    assert _sql(compound_id_filter(["a", "a"]), caps) == "compound_id = 'a'"
    assert _sql(compound_id_filter(["a", "b", "a"]), caps) == "compound_id in ('a','b')"


@pytest.mark.parametrize(
    ("op", "expected"),
    [
        ("startsWith", "compound_name like 'glu%'"),
        ("endsWith", "compound_name like '%glu'"),
        ("contains", "compound_name like '%glu%'"),
    ],
)
def test_pattern_operators(caps, op, expected):
    assert _sql(compound_name_filter("glu", op), caps) == expected


def test_pattern_value_quotes_are_doubled(caps):
    assert _sql(compound_name_filter("O'B", "startsWith"), caps) == (
        "compound_name like 'O''B%'"
    )


def test_pattern_wildcards_kept_by_default(caps):
    assert _sql(compound_name_filter("100%_", "contains"), caps) == (
        "compound_name like '%100%_%'"
    )


def test_pattern_wildcards_escaped_on_request(caps):
    options = TranslatorOptions(escape_wildcards=True)
    assert _sql(compound_name_filter("100%_", "startsWith"), caps, options=options) == (
        "compound_name like '100\\%\\_%' escape '\\'"
    )


# -- combinations ------------------------------------------------------------


def test_or_combination(caps):
    tree = combine([compound_id_filter("comp_a"), compound_name_filter("b", "!=")], "|")
    assert _sql(tree, caps) == "(compound_id = 'comp_a' or compound_name != 'b')"


def test_joins_in_input_order(caps):
    tree = combine(
        [compound_id_filter("a"), compound_id_filter("b"), compound_id_filter("c")],
        ["&", "|"],
    )
    assert _sql(tree, caps) == (
        "(compound_id = 'a' and compound_id = 'b' or compound_id = 'c')"
    )


def test_nested_combinations_parenthesised_once_each(msms_caps):
    tree = combine(
        [
            compound_id_filter("a"),
            combine([msms_mz_range_min_filter(5), msms_mz_range_max_filter(10)], "|"),
        ],
        "&",
    )
    assert _sql(tree, msms_caps) == (
        "(compound_id = 'a' and "
        "(msms_mz_range_min >= 5 or msms_mz_range_max <= 10))"
    )


def test_single_child_combination_is_unwrapped(caps):
    tree = combine([compound_id_filter("a")], [])
    assert _sql(tree, caps) == "compound_id = 'a'"
    nested = combine([combine([compound_id_filter("a")], [])], [])
    assert _sql(nested, caps) == "compound_id = 'a'"


def test_parser_and_builder_agree(caps):
    assert _sql(parse('compound_id == "a"'), caps) == _sql(
        build_leaf(FilterKind.COMPOUND_ID, "==", ["a"]), caps
    )


def test_end_to_end_expression(caps):
    tree = parse('compound_id == "comp_a" | compound_name != "b"')
    assert _sql(tree, caps) == "(compound_id = 'comp_a' or compound_name != 'b')"


# -- failures ----------------------------------------------------------------


def test_unvalidated_tree_is_rejected():
    with pytest.raises(TranslationError):
        translate(compound_id_filter("a"))  # type: ignore[arg-type]


def test_sql_condition_and_value_helpers():
    leaf = compound_id_filter(["x", "y"])
    assert sql_condition(leaf) == "in"
    assert sql_value(leaf) == "('x','y')"


# -- escaping ----------------------------------------------------------------


def test_escaping_helpers():
    assert quote_text("it's") == "'it''s'"
    assert quote_text("''") == "''''''"
    assert render_list(["a", 1, 2.5]) == "('a',1,2.5)"
    assert escape_like("a%b_c\\") == "a\\%b\\_c\\\\"
