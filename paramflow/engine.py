"""Recomputation and hydration entry points used by the test-case form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from .aggregator import Aggregation, detect_from_form
from .completion import CompletionState
from .config import ParamflowConfig, ScanConfig
from .errors import LoadError
from .hydration import Reconciliation, hydrate_snapshot
from .lifecycle import LifecycleState, ParameterLifecycle
from .loaders import ApiMetadataLoader, EntityLoader
from .logging import get_logger
from .models import ConfiguredVariable, EntitySnapshot, RequestShape


@dataclass(frozen=True)
class EngineResult:
    """Canonical parameter set and the completion derived from it."""

    parameters: Tuple[str, ...]
    configured: Tuple[str, ...]
    pending: Tuple[str, ...]
    state: LifecycleState
    completion: CompletionState

    @classmethod
    def from_lifecycle(cls, lifecycle: ParameterLifecycle) -> "EngineResult":
        return cls(
            parameters=lifecycle.parameters,
            configured=lifecycle.configured_names,
            pending=lifecycle.pending,
            state=lifecycle.state,
            completion=lifecycle.completion,
        )


@dataclass(frozen=True)
class HydrationResult(EngineResult):
    """Edit-mode starting point: the result plus what reconciliation changed."""

    dropped: Tuple[str, ...] = ()
    variables: Tuple[ConfiguredVariable, ...] = ()

    @classmethod
    def from_reconciliation(cls, reconciliation: Reconciliation) -> "HydrationResult":
        lifecycle = reconciliation.lifecycle()
        return cls(
            parameters=lifecycle.parameters,
            configured=lifecycle.configured_names,
            pending=lifecycle.pending,
            state=lifecycle.state,
            completion=lifecycle.completion,
            dropped=reconciliation.dropped,
            variables=reconciliation.variables,
        )


def recompute(
    url: Optional[str] = None,
    request: Optional[RequestShape] = None,
    templates: Optional[Mapping[str, Any]] = None,
    configured: Iterable[object] = (),
) -> EngineResult:
    """Recompute the parameter set and completion from the latest source values."""
    aggregation = detect_from_form(url, request, templates)
    return result_for(aggregation, configured)


def result_for(aggregation: Aggregation, configured: Iterable[object] = ()) -> EngineResult:
    return EngineResult.from_lifecycle(
        ParameterLifecycle.create(aggregation.parameters, configured)
    )


def hydrate(
    entity: Union[EntitySnapshot, Mapping[str, Any]],
    persisted: Optional[Iterable[object]] = None,
    *,
    scan: Optional[ScanConfig] = None,
) -> HydrationResult:
    """Seed edit mode from a persisted entity.

    ``persisted`` overrides the variables stored on the entity, for callers
    that load configured variables separately.
    """
    scan = scan or ScanConfig()
    snapshot = _as_snapshot(entity, scan)
    _, reconciliation = hydrate_snapshot(
        snapshot, persisted, include_templates=scan.include_templates
    )
    return HydrationResult.from_reconciliation(reconciliation)


class ParameterEngine:
    """Binds the pure pipeline to the loaders and configuration of a deployment."""

    def __init__(
        self,
        entity_loader: EntityLoader | None = None,
        metadata_loader: ApiMetadataLoader | None = None,
        config: ParamflowConfig | None = None,
    ) -> None:
        self.entity_loader = entity_loader
        self.metadata_loader = metadata_loader
        self.scan = config.scan if config is not None else ScanConfig()
        self.logger = get_logger("engine")

    def recompute(
        self,
        url: Optional[str] = None,
        request: Optional[RequestShape] = None,
        templates: Optional[Mapping[str, Any]] = None,
        configured: Iterable[object] = (),
    ) -> EngineResult:
        if not self.scan.include_templates:
            templates = None
        result = recompute(url, request, templates, configured)
        self.logger.debug(
            "Recomputed %d parameters (%s)", result.completion.total, result.state.value
        )
        return result

    def hydrate(
        self,
        entity: Union[EntitySnapshot, Mapping[str, Any]],
        persisted: Optional[Iterable[object]] = None,
    ) -> HydrationResult:
        result = hydrate(entity, persisted, scan=self.scan)
        if result.dropped:
            self.logger.info(
                "Ignoring %d configured parameter(s) no longer referenced: %s",
                len(result.dropped),
                ", ".join(result.dropped),
            )
        return result

    def load_snapshot(self, entity_id: str) -> EntitySnapshot:
        if self.entity_loader is None:
            raise LoadError(
                "No entity loader configured", resource="entity", identifier=entity_id
            )
        try:
            payload = self.entity_loader.load_entity(entity_id)
        except LoadError:
            raise
        except Exception as exc:
            self.logger.warning("Entity load failed for %s: %s", entity_id, exc)
            raise LoadError.from_exception(exc, resource="entity", identifier=entity_id) from exc
        return EntitySnapshot.from_payload(payload, template_fields=self.scan.template_fields)

    def load_for_edit(
        self, entity_id: str, persisted: Optional[Iterable[object]] = None
    ) -> Tuple[EntitySnapshot, HydrationResult]:
        """Load an entity and compute its edit-mode starting state."""
        snapshot = self.load_snapshot(entity_id)
        return snapshot, self.hydrate(snapshot, persisted)

    def fetch_request_shape(self, api_id: str) -> RequestShape:
        """Fetch the request shape of ``api_id``; failures become ``LoadError``."""
        if self.metadata_loader is None:
            raise LoadError(
                "No API metadata loader configured", resource="api", identifier=api_id
            )
        try:
            payload = self.metadata_loader.fetch_api_metadata(api_id)
        except LoadError:
            raise
        except Exception as exc:
            self.logger.warning("API metadata fetch failed for %s: %s", api_id, exc)
            raise LoadError.from_exception(exc, resource="api", identifier=api_id) from exc
        return RequestShape.from_payload(payload)


def _as_snapshot(
    entity: Union[EntitySnapshot, Mapping[str, Any]], scan: ScanConfig
) -> EntitySnapshot:
    if isinstance(entity, EntitySnapshot):
        return entity
    return EntitySnapshot.from_payload(entity, template_fields=scan.template_fields)


__all__ = [
    "EngineResult",
    "HydrationResult",
    "ParameterEngine",
    "hydrate",
    "recompute",
    "result_for",
]
