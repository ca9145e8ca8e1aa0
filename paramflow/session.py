"""Editing-session state for the create and edit test-case flows."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .engine import EngineResult, HydrationResult, ParameterEngine
from .errors import LoadError
from .logging import get_logger
from .models import ConfiguredVariable, EntitySnapshot, RequestShape, parse_configured_variables


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one API-metadata request and the selection it was issued for."""

    api_id: str
    sequence: int


class EditingSession:
    """Latest known values of every parameter source in one form session.

    Each change recomputes the whole parameter pipeline from the current
    values; nothing is patched incrementally and there are no timers.
    API-metadata responses are applied only while the API they were requested
    for is still the selected one and no newer request has been issued.
    """

    def __init__(
        self,
        engine: ParameterEngine | None = None,
        *,
        url: Optional[str] = None,
        api_id: Optional[str] = None,
        request: Optional[RequestShape] = None,
        templates: Optional[Mapping[str, Any]] = None,
        variables: Iterable[object] = (),
    ) -> None:
        self.engine = engine or ParameterEngine()
        self.logger = get_logger("session")
        self._url = url
        self._api_id = api_id
        self._request = request
        self._templates: Dict[str, Any] = dict(templates or {})
        self._variables: Dict[str, ConfiguredVariable] = {}
        for variable in parse_configured_variables(list(variables)):
            self._variables.setdefault(variable.name, variable)
        self._sequence = 0
        self._result = self._recompute()

    @classmethod
    def from_hydration(
        cls,
        snapshot: EntitySnapshot,
        result: HydrationResult,
        engine: ParameterEngine | None = None,
    ) -> "EditingSession":
        """Start an edit session seeded with reconciled variables only."""
        return cls(
            engine,
            url=snapshot.url,
            api_id=snapshot.api_id,
            request=snapshot.request,
            templates=snapshot.templates,
            variables=result.variables,
        )

    @property
    def result(self) -> EngineResult:
        return self._result

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def api_id(self) -> Optional[str]:
        return self._api_id

    @property
    def request(self) -> Optional[RequestShape]:
        return self._request

    @property
    def variables(self) -> List[ConfiguredVariable]:
        return list(self._variables.values())

    def set_url(self, url: Optional[str]) -> EngineResult:
        self._url = url
        return self._refresh()

    def set_templates(self, templates: Optional[Mapping[str, Any]]) -> EngineResult:
        self._templates = dict(templates or {})
        return self._refresh()

    def configure(self, name: str, value: str = "") -> EngineResult:
        self._variables[name] = ConfiguredVariable(name=name, value=value)
        return self._refresh()

    def unconfigure(self, name: str) -> EngineResult:
        self._variables.pop(name, None)
        return self._refresh()

    def set_variables(self, variables: Iterable[object]) -> EngineResult:
        self._variables = {}
        for variable in parse_configured_variables(list(variables)):
            self._variables.setdefault(variable.name, variable)
        return self._refresh()

    def select_api(self, api_id: Optional[str]) -> Optional[FetchTicket]:
        """Select an API; its previous request shape no longer applies.

        Returns the ticket a metadata fetch for the new selection must carry,
        or ``None`` when the selection was cleared.
        """
        self._sequence += 1
        if api_id != self._api_id:
            self._api_id = api_id
            self._request = None
            self._refresh()
        if api_id is None:
            return None
        return FetchTicket(api_id=api_id, sequence=self._sequence)

    def is_current(self, ticket: FetchTicket) -> bool:
        return ticket.api_id == self._api_id and ticket.sequence == self._sequence

    def apply_api_metadata(self, ticket: FetchTicket, payload: object) -> bool:
        """Apply a metadata response if ``ticket`` is still current.

        ``payload`` may be a ``RequestShape`` or a raw API payload. Stale
        responses are discarded and ``False`` is returned.
        """
        if not self.is_current(ticket):
            self.logger.debug(
                "Discarding stale metadata for API %s (request #%d)",
                ticket.api_id,
                ticket.sequence,
            )
            return False
        if isinstance(payload, RequestShape):
            self._request = payload
        else:
            self._request = RequestShape.from_payload(payload)
        self._refresh()
        return True

    async def refresh_api_metadata(self, api_id: str) -> bool:
        """Select ``api_id`` and load its request shape through the engine.

        The blocking loader runs in the default executor. A ``LoadError``
        propagates only while ``api_id`` is still the latest selection and
        leaves the session as it was after the selection. Failures of a
        superseded fetch are discarded like stale responses.
        """
        ticket = self.select_api(api_id)
        if ticket is None:
            return False
        loop = asyncio.get_running_loop()
        try:
            shape = await loop.run_in_executor(None, self.engine.fetch_request_shape, api_id)
        except LoadError as exc:
            if self.is_current(ticket):
                raise
            self.logger.debug(
                "Discarding stale metadata failure for API %s (request #%d): %s",
                ticket.api_id,
                ticket.sequence,
                exc,
            )
            return False
        return self.apply_api_metadata(ticket, shape)

    def _refresh(self) -> EngineResult:
        self._result = self._recompute()
        return self._result

    def _recompute(self) -> EngineResult:
        return self.engine.recompute(
            self._url,
            self._request,
            self._templates or None,
            self._variables.values(),
        )


__all__ = ["EditingSession", "FetchTicket"]
