"""Workflow state derived from detected and configured parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

from .completion import CompletionState, calculate_completion
from .extraction import unique
from .models import variable_names


class LifecycleState(str, Enum):
    EMPTY = "Empty"
    DETECTED = "Detected"
    PARTIALLY_CONFIGURED = "PartiallyConfigured"
    COMPLETE = "Complete"


def derive_state(total: int, configured: int) -> LifecycleState:
    if total <= 0:
        return LifecycleState.EMPTY
    if configured <= 0:
        return LifecycleState.DETECTED
    if configured < total:
        return LifecycleState.PARTIALLY_CONFIGURED
    return LifecycleState.COMPLETE


@dataclass(frozen=True)
class ParameterLifecycle:
    """Canonical parameter set together with the names configured so far.

    Instances are immutable; every change produces a new lifecycle whose
    state is recomputed from the current totals alone.
    """

    parameters: Tuple[str, ...] = ()
    configured: Tuple[str, ...] = ()

    @classmethod
    def create(
        cls, parameters: Iterable[str] = (), configured: Iterable[object] = ()
    ) -> "ParameterLifecycle":
        """Build a lifecycle; ``configured`` may hold names or ``ConfiguredVariable``."""
        return cls(
            parameters=tuple(unique(parameters)),
            configured=tuple(unique(variable_names(configured))),
        )

    def with_parameters(self, parameters: Iterable[str]) -> "ParameterLifecycle":
        return ParameterLifecycle.create(parameters, self.configured)

    def with_configured(self, configured: Iterable[object]) -> "ParameterLifecycle":
        return ParameterLifecycle.create(self.parameters, configured)

    @property
    def configured_names(self) -> Tuple[str, ...]:
        """Configured names that the canonical set requires, in canonical order."""
        chosen = set(self.configured)
        return tuple(name for name in self.parameters if name in chosen)

    @property
    def pending(self) -> Tuple[str, ...]:
        chosen = set(self.configured)
        return tuple(name for name in self.parameters if name not in chosen)

    @property
    def completion(self) -> CompletionState:
        return calculate_completion(len(self.parameters), len(self.configured_names))

    @property
    def state(self) -> LifecycleState:
        return derive_state(len(self.parameters), len(self.configured_names))


__all__ = ["LifecycleState", "ParameterLifecycle", "derive_state"]
