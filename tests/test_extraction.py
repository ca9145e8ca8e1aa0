"""Tests for paramflow.extraction."""

from __future__ import annotations

import pytest

from paramflow.extraction import (
    MappingSource,
    StringSource,
    extract_parameters,
    scan_mapping,
    scan_source,
)
from paramflow.models import ParameterSource


def test_extract_keeps_first_seen_order_without_duplicates() -> None:
    assert extract_parameters("${a}-${b}-${a}") == ["a", "b"]


@pytest.mark.parametrize("value", ["", None, 42, ["${a}"], {"${a}": 1}])
def test_extract_treats_absent_or_non_string_input_as_empty(value: object) -> None:
    assert extract_parameters(value) == []


def test_extract_ignores_unterminated_placeholder() -> None:
    assert extract_parameters("${a") == []
    assert extract_parameters("/users/${id}/${broken") == ["id"]


def test_extract_is_case_sensitive() -> None:
    assert extract_parameters("${Token} ${token}") == ["Token", "token"]


def test_extract_token_spans_up_to_first_closing_brace() -> None:
    assert extract_parameters("${a b}") == ["a b"]
    assert extract_parameters("${${inner}}") == ["${inner"]
    assert extract_parameters("${}") == []


def test_extract_matches_placeholders_inside_json_text() -> None:
    text = '{"user": "${userId}", "items": ["${sku}", "${userId}"]}'
    assert extract_parameters(text) == ["userId", "sku"]


def test_scan_mapping_reads_keys_and_values_in_order() -> None:
    headers = {
        "Authorization": "Bearer ${authToken}",
        "${dynamicHeader}": "${dynamicValue}",
        "X-Trace": "${authToken}",
    }
    assert scan_mapping(headers) == ["authToken", "dynamicHeader", "dynamicValue"]


def test_scan_mapping_coerces_values_to_text() -> None:
    params = {"page": 1, "flag": True, "missing": None, "nested": {"q": "${term}"}}
    assert scan_mapping(params) == ["term"]


def test_scan_mapping_accepts_form_rows() -> None:
    rows = [
        {"key": "sort", "value": "${sortField}"},
        {"key": "${dynamicKey}", "value": "asc"},
        "not-a-row",
    ]
    assert scan_mapping(rows) == ["sortField", "dynamicKey"]


@pytest.mark.parametrize("value", [None, "${a}", 7, object()])
def test_scan_mapping_treats_non_mapping_input_as_empty(value: object) -> None:
    assert scan_mapping(value) == []


def test_scan_source_dispatches_on_variant() -> None:
    assert scan_source(StringSource("/a/${x}")) == ["x"]
    assert scan_source(MappingSource({"k": "${y}"}, ParameterSource.HEADER)) == ["y"]
    assert scan_source(StringSource(None)) == []
