"""Error types raised by paramflow."""

from __future__ import annotations

from typing import Optional


class ParamflowError(RuntimeError):
    """Base class for errors surfaced to paramflow callers."""


class LoadError(ParamflowError):
    """Raised when an upstream fetch supplying parameter sources fails.

    Parameter discovery itself never raises for malformed input; only the
    collaborators that load entities or API metadata can fail. Those failures
    are reported as retryable so the caller can retry or fall back to the
    values the user already entered.
    """

    def __init__(
        self,
        message: str,
        *,
        resource: str,
        identifier: object,
        retryable: bool = True,
    ) -> None:
        super().__init__(message)
        self.resource = resource
        self.identifier = identifier
        self.retryable = retryable

    @classmethod
    def from_exception(
        cls, exc: BaseException, *, resource: str, identifier: object
    ) -> "LoadError":
        detail: Optional[str] = str(exc).strip() or exc.__class__.__name__
        return cls(
            f"Failed to load {resource} '{identifier}': {detail}",
            resource=resource,
            identifier=identifier,
        )


__all__ = ["LoadError", "ParamflowError"]
