"""Completion-state calculation for configured parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CompletionState:
    """How many canonical parameters have a configured variable."""

    total: int
    configured: int
    rate: int
    is_complete: bool


def calculate_completion(total: int, configured: int) -> CompletionState:
    """Return the completion state for ``configured`` out of ``total``.

    Out-of-range counts are clamped into ``0 <= configured <= total``. The
    rate is rounded half up and is 100 when there is nothing to configure.
    """
    total = max(int(total), 0)
    configured = min(max(int(configured), 0), total)
    if total == 0:
        return CompletionState(total=0, configured=0, rate=100, is_complete=True)
    # round(configured / total * 100) with halves rounded up, in integers.
    rate = (configured * 200 + total) // (2 * total)
    return CompletionState(
        total=total,
        configured=configured,
        rate=rate,
        is_complete=configured == total,
    )


@dataclass(frozen=True)
class ParameterStatus:
    name: str
    configured: bool


@dataclass(frozen=True)
class CompletionSummary:
    """Per-parameter view of completion shown next to the test-case form."""

    parameters: Tuple[ParameterStatus, ...]
    state: CompletionState
    message: str


def summarize(
    parameters: Sequence[str],
    configured: Iterable[str],
    *,
    subject: Optional[str] = None,
) -> Optional[CompletionSummary]:
    """Describe completion for display; ``None`` when nothing was detected."""
    if not parameters:
        return None
    configured_set = set(configured)
    statuses = tuple(ParameterStatus(name=name, configured=name in configured_set) for name in parameters)
    done = sum(1 for status in statuses if status.configured)
    state = calculate_completion(len(statuses), done)
    return CompletionSummary(parameters=statuses, state=state, message=_message(state, subject))


def _message(state: CompletionState, subject: Optional[str]) -> str:
    suffix = f' for "{subject}"' if subject else ""
    plural = state.total > 1
    if state.is_complete:
        verb = "parameters have" if plural else "parameter has"
        return f"All {state.total} {verb} been configured{suffix}"
    noun = "parameters" if plural else "parameter"
    return f"{state.configured} of {state.total} {noun} configured{suffix}"


__all__ = [
    "CompletionState",
    "CompletionSummary",
    "ParameterStatus",
    "calculate_completion",
    "summarize",
]
