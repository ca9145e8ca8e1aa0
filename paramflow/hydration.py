"""Edit-mode reconciliation of persisted configuration against current sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .aggregator import Aggregation, detect_from_snapshot
from .extraction import unique
from .lifecycle import ParameterLifecycle
from .logging import get_logger
from .models import ConfiguredVariable, EntitySnapshot, parse_configured_variables

_LOGGER = get_logger("hydration")


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of matching previously configured names to the current set."""

    parameters: Tuple[str, ...]
    configured: Tuple[str, ...]
    dropped: Tuple[str, ...]
    variables: Tuple[ConfiguredVariable, ...] = ()

    def lifecycle(self) -> ParameterLifecycle:
        return ParameterLifecycle(parameters=self.parameters, configured=self.configured)


def reconcile(
    parameters: Sequence[str], persisted: Iterable[object]
) -> Reconciliation:
    """Keep persisted names the canonical set still uses and drop the rest.

    ``persisted`` may hold names, ``ConfiguredVariable`` objects or the raw
    persisted variable payload. Kept names follow canonical order; names the
    set requires but nobody configured stay pending.
    """
    canonical = tuple(unique(parameters))
    variables = parse_configured_variables(list(persisted))
    by_name: Dict[str, ConfiguredVariable] = {}
    for variable in variables:
        by_name.setdefault(variable.name, variable)

    required = set(canonical)
    kept = tuple(name for name in canonical if name in by_name)
    dropped = tuple(name for name in by_name if name not in required)
    if dropped:
        _LOGGER.debug("Dropping obsolete configured parameters: %s", ", ".join(dropped))

    return Reconciliation(
        parameters=canonical,
        configured=kept,
        dropped=dropped,
        variables=tuple(by_name[name] for name in kept),
    )


def hydrate_snapshot(
    snapshot: EntitySnapshot,
    persisted: Optional[Iterable[object]] = None,
    *,
    include_templates: bool = True,
) -> Tuple[Aggregation, Reconciliation]:
    """Recompute the canonical set for ``snapshot`` and reconcile its variables.

    Any parameter list cached alongside the entity is ignored; the current
    template sources are the only authority for what must be configured.
    ``persisted`` defaults to the variables stored on the snapshot.
    """
    aggregation = detect_from_snapshot(snapshot, include_templates=include_templates)
    previous = snapshot.variables if persisted is None else persisted
    return aggregation, reconcile(aggregation.parameters, previous)


__all__ = ["Reconciliation", "hydrate_snapshot", "reconcile"]
