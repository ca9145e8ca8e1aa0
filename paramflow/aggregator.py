"""Merge per-source placeholder lists into the canonical parameter set."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .extraction import MappingSource, Source, StringSource, scan_source, unique
from .logging import get_logger
from .models import EntitySnapshot, ParameterSource, RequestShape

_LOGGER = get_logger("aggregator")


@dataclass(frozen=True)
class SourceReport:
    """Placeholders found in one source, kept for diagnostics."""

    source: ParameterSource
    label: str
    parameters: Tuple[str, ...]


@dataclass(frozen=True)
class Aggregation:
    """Canonical parameter set plus the per-source reports it came from."""

    parameters: Tuple[str, ...]
    reports: Tuple[SourceReport, ...] = ()

    def origins(self) -> Dict[str, List[ParameterSource]]:
        """Map each parameter to every source kind that mentions it."""
        result: Dict[str, List[ParameterSource]] = {name: [] for name in self.parameters}
        for report in self.reports:
            for name in report.parameters:
                kinds = result.setdefault(name, [])
                if report.source not in kinds:
                    kinds.append(report.source)
        return result


def aggregate(
    url: Optional[str] = None,
    request: Optional[RequestShape] = None,
    templates: Optional[Mapping[str, Any]] = None,
) -> Aggregation:
    """Scan every source in the fixed order and merge the results.

    The order is URL, query parameters, headers, path parameters, then body
    templates in the order given. Nothing is cached between calls.
    """
    shape = request or RequestShape()
    labelled: List[Tuple[str, Source]] = [
        ("url", StringSource(url, ParameterSource.URL)),
        ("queryParams", MappingSource(shape.query_params, ParameterSource.QUERY)),
        ("headers", MappingSource(shape.headers, ParameterSource.HEADER)),
        ("pathParams", MappingSource(shape.path_params, ParameterSource.PATH)),
    ]
    for name, value in (templates or {}).items():
        labelled.append(
            (name, StringSource(serialize_template(value, label=name), ParameterSource.BODY_TEMPLATE))
        )

    reports = tuple(
        SourceReport(source=source.source, label=label, parameters=tuple(scan_source(source)))
        for label, source in labelled
    )
    merged = unique(name for report in reports for name in report.parameters)
    return Aggregation(parameters=tuple(merged), reports=reports)


def detect_from_form(
    url: Optional[str],
    request: Optional[RequestShape] = None,
    templates: Optional[Mapping[str, Any]] = None,
) -> Aggregation:
    """Aggregate the in-progress form fields: URL plus the selected API's shape."""
    return aggregate(url=url, request=request, templates=templates)


def detect_from_snapshot(
    snapshot: EntitySnapshot, *, include_templates: bool = True
) -> Aggregation:
    """Aggregate a persisted entity: URL, request shape and body templates."""
    templates = snapshot.templates if include_templates else None
    return aggregate(url=snapshot.url, request=snapshot.request, templates=templates)


def serialize_template(value: Any, *, label: str = "template") -> Optional[str]:
    """Return ``value`` as text for scanning, or ``None`` when it cannot be read.

    Strings are scanned as they are; structured templates are serialized to
    JSON. A template that cannot be serialized counts as an empty source.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            _LOGGER.debug("Template %s is not valid UTF-8; skipping", label)
            return None
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        _LOGGER.debug("Template %s could not be serialized (%s); skipping", label, exc)
        return None


__all__ = [
    "Aggregation",
    "SourceReport",
    "aggregate",
    "detect_from_form",
    "detect_from_snapshot",
    "serialize_template",
]
