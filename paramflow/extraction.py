"""Placeholder extraction for single strings and typed request sources."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Mapping, Tuple, Union

from .models import ParameterSource

PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")


def extract_parameters(text: object) -> List[str]:
    """Return placeholder names found in ``text`` in first-seen order.

    ``None``, empty strings and non-string values yield an empty list, and an
    unterminated ``${`` simply does not match.
    """
    if not isinstance(text, str) or not text:
        return []
    return unique(match.group(1) for match in PLACEHOLDER_PATTERN.finditer(text))


def unique(tokens: Iterable[str]) -> List[str]:
    """Deduplicate ``tokens`` keeping the first occurrence of each."""
    seen: set[str] = set()
    ordered: List[str] = []
    for token in tokens:
        if token in seen:
            continue
        seen.add(token)
        ordered.append(token)
    return ordered


@dataclass(frozen=True)
class StringSource:
    """A source read as one piece of text (URL, serialized body template)."""

    text: Any
    source: ParameterSource = ParameterSource.URL


@dataclass(frozen=True)
class MappingSource:
    """A key/value source (query parameters, headers, path parameters).

    ``entries`` is either a mapping or a list of ``{"key": ..., "value": ...}``
    rows as edited by the API-repository form. Anything else reads as empty.
    """

    entries: Any
    source: ParameterSource = ParameterSource.QUERY

    def pairs(self) -> Iterator[Tuple[str, str]]:
        if isinstance(self.entries, Mapping):
            for key, value in self.entries.items():
                yield _coerce_text(key), _coerce_text(value)
        elif isinstance(self.entries, (list, tuple)):
            for row in self.entries:
                if isinstance(row, Mapping):
                    yield _coerce_text(row.get("key")), _coerce_text(row.get("value"))


Source = Union[StringSource, MappingSource]


def scan_source(source: Source) -> List[str]:
    """Return the deduplicated placeholder names found in ``source``."""
    if isinstance(source, StringSource):
        return extract_parameters(source.text)
    if isinstance(source, MappingSource):
        return scan_mapping(source.entries)
    raise TypeError(f"Unsupported source variant: {type(source).__name__}")


def scan_mapping(entries: Any) -> List[str]:
    """Scan both the key and the value of every entry in iteration order."""
    tokens: List[str] = []
    for key, value in MappingSource(entries).pairs():
        tokens.extend(extract_parameters(key))
        tokens.extend(extract_parameters(value))
    return unique(tokens)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        # Nested values are scanned in their serialized form.
        try:
            return json.dumps(value, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


__all__ = [
    "MappingSource",
    "PLACEHOLDER_PATTERN",
    "Source",
    "StringSource",
    "extract_parameters",
    "scan_mapping",
    "scan_source",
    "unique",
]
