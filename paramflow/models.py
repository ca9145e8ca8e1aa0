"""Core data models shared across paramflow components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

DEFAULT_TEMPLATE_FIELDS: Tuple[str, ...] = ("requestTemplate", "responseTemplate")


class ParameterSource(str, Enum):
    """Where a placeholder was found. Used for diagnostics only."""

    URL = "URL"
    QUERY = "QUERY"
    HEADER = "HEADER"
    PATH = "PATH"
    BODY_TEMPLATE = "BODY_TEMPLATE"


# Fixed scan order; determines first-seen order of the canonical set.
SCAN_ORDER: Tuple[ParameterSource, ...] = (
    ParameterSource.URL,
    ParameterSource.QUERY,
    ParameterSource.HEADER,
    ParameterSource.PATH,
    ParameterSource.BODY_TEMPLATE,
)


@dataclass(frozen=True)
class ConfiguredVariable:
    """A user-supplied value for one placeholder."""

    name: str
    value: str = ""


@dataclass(frozen=True)
class RequestShape:
    """Query, header and path parameter inputs of an API request.

    Values are kept as received; the scanner decides how to read them.
    """

    query_params: Any = None
    headers: Any = None
    path_params: Any = None

    @classmethod
    def from_payload(cls, payload: object) -> "RequestShape":
        """Build a shape from an API-metadata or entity ``request`` payload.

        Accepts the request mapping itself or a wrapper holding it under
        ``request``.
        """
        data = _as_dict(payload)
        if isinstance(data.get("request"), Mapping):
            data = _as_dict(data["request"])
        return cls(
            query_params=data.get("queryParams"),
            headers=data.get("headers"),
            path_params=data.get("pathParams"),
        )

    def is_empty(self) -> bool:
        return not any((self.query_params, self.headers, self.path_params))


@dataclass
class EntitySnapshot:
    """The fields of a persisted test case that parameter discovery reads."""

    url: Optional[str] = None
    request: RequestShape = field(default_factory=RequestShape)
    templates: Dict[str, Any] = field(default_factory=dict)
    variables: List[ConfiguredVariable] = field(default_factory=list)
    identifier: Optional[str] = None
    api_id: Optional[str] = None

    @classmethod
    def from_payload(
        cls,
        payload: object,
        *,
        template_fields: Sequence[str] = DEFAULT_TEMPLATE_FIELDS,
    ) -> "EntitySnapshot":
        """Read an entity-load response leniently; wrong types become empty."""
        data = _as_dict(payload)
        if isinstance(data.get("data"), Mapping) and "url" not in data:
            data = _as_dict(data["data"])

        request_payload = data.get("request")
        if not isinstance(request_payload, Mapping):
            # Test cases loaded with their API embed the shape under api.request.
            request_payload = _as_dict(data.get("api")).get("request")

        templates: Dict[str, Any] = {}
        for name in template_fields:
            value = data.get(name)
            if value is not None and value != "":
                templates[name] = value

        identifier = _as_str(data.get("testCaseId") or data.get("id"))
        api_id = _as_str(data.get("apiId")) or _as_str(_as_dict(data.get("api")).get("apiId"))

        return cls(
            url=_as_str(data.get("url")),
            request=RequestShape.from_payload(request_payload),
            templates=templates,
            variables=parse_configured_variables(data.get("variables")),
            identifier=identifier,
            api_id=api_id,
        )

    @property
    def configured_names(self) -> List[str]:
        return [variable.name for variable in self.variables]


def parse_configured_variables(payload: object) -> List[ConfiguredVariable]:
    """Return configured variables from a persisted list.

    Entries may be ``{"name": ..., "value": ...}`` mappings (``variableName``
    and ``variableValue`` are accepted as well), bare names, or
    ``ConfiguredVariable`` instances. Entries without a usable name are skipped.
    """
    if isinstance(payload, Mapping):
        return [
            ConfiguredVariable(name=str(key), value=_value_text(value))
            for key, value in payload.items()
            if str(key)
        ]
    if not isinstance(payload, (list, tuple)):
        return []

    variables: List[ConfiguredVariable] = []
    for entry in payload:
        if isinstance(entry, ConfiguredVariable):
            variables.append(entry)
        elif isinstance(entry, str):
            if entry:
                variables.append(ConfiguredVariable(name=entry))
        elif isinstance(entry, Mapping):
            name = _as_str(entry.get("name")) or _as_str(entry.get("variableName"))
            if not name:
                continue
            value = entry.get("value")
            if value is None:
                value = entry.get("variableValue")
            variables.append(ConfiguredVariable(name=name, value=_value_text(value)))
    return variables


def variable_names(variables: Iterable[object]) -> List[str]:
    """Return the names of configured variables in any accepted entry form."""
    return [variable.name for variable in parse_configured_variables(list(variables))]


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _value_text(value: Any) -> str:
    return "" if value is None else str(value)


__all__ = [
    "ConfiguredVariable",
    "DEFAULT_TEMPLATE_FIELDS",
    "EntitySnapshot",
    "ParameterSource",
    "RequestShape",
    "SCAN_ORDER",
    "parse_configured_variables",
    "variable_names",
]
