"""Placeholder substitution and highlighting helpers for template previews."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .extraction import PLACEHOLDER_PATTERN, extract_parameters
from .models import ConfiguredVariable

Values = Union[Mapping[str, Any], Iterable[ConfiguredVariable]]


@dataclass(frozen=True)
class TemplateSegment:
    """A run of template text; ``parameter`` is set for placeholder runs."""

    text: str
    parameter: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.parameter is not None


def render_template(template: Optional[str], values: Optional[Values]) -> str:
    """Replace placeholders that have a value; leave the others untouched."""
    if not template:
        return ""
    lookup = _as_lookup(values)
    if not lookup:
        return template

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in lookup:
            return lookup[name]
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def split_template(template: Optional[str]) -> List[TemplateSegment]:
    """Split ``template`` into literal and placeholder segments in order."""
    if not template:
        return []
    segments: List[TemplateSegment] = []
    cursor = 0
    for match in PLACEHOLDER_PATTERN.finditer(template):
        if match.start() > cursor:
            segments.append(TemplateSegment(text=template[cursor : match.start()]))
        segments.append(TemplateSegment(text=match.group(0), parameter=match.group(1)))
        cursor = match.end()
    if cursor < len(template):
        segments.append(TemplateSegment(text=template[cursor:]))
    return segments


def unresolved_parameters(template: Optional[str], values: Optional[Values]) -> List[str]:
    lookup = _as_lookup(values)
    return [name for name in extract_parameters(template) if name not in lookup]


def _as_lookup(values: Optional[Values]) -> Dict[str, str]:
    if values is None:
        return {}
    if isinstance(values, Mapping):
        return {str(key): "" if value is None else str(value) for key, value in values.items()}
    lookup: Dict[str, str] = {}
    for variable in values:
        if isinstance(variable, ConfiguredVariable):
            lookup.setdefault(variable.name, variable.value)
    return lookup


__all__ = [
    "TemplateSegment",
    "render_template",
    "split_template",
    "unresolved_parameters",
]
