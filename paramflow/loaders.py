"""Contracts for the collaborators that supply parameter sources."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class EntityLoader(Protocol):
    """Loads a persisted test case by identifier."""

    def load_entity(self, entity_id: str) -> Mapping[str, Any]:
        """Return the entity payload (``url``, ``request``, templates, ``variables``)."""


class ApiMetadataLoader(Protocol):
    """Loads the request shape of an API definition."""

    def fetch_api_metadata(self, api_id: str) -> Mapping[str, Any]:
        """Return the API payload; its ``request`` holds query, header and path params."""


__all__ = ["ApiMetadataLoader", "EntityLoader"]
