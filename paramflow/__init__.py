"""Parameter lifecycle engine for API test cases.

Finds ``${name}`` placeholders across a test case's URL, query parameters,
headers, path parameters and body templates, and tracks which of them have
configured values.
"""

from .aggregator import Aggregation, SourceReport, aggregate, detect_from_form, detect_from_snapshot
from .completion import CompletionState, CompletionSummary, calculate_completion, summarize
from .engine import EngineResult, HydrationResult, ParameterEngine, hydrate, recompute
from .errors import LoadError, ParamflowError
from .extraction import MappingSource, StringSource, extract_parameters, scan_source
from .hydration import Reconciliation, reconcile
from .lifecycle import LifecycleState, ParameterLifecycle
from .models import ConfiguredVariable, EntitySnapshot, ParameterSource, RequestShape
from .session import EditingSession, FetchTicket

__all__ = [
    "Aggregation",
    "CompletionState",
    "CompletionSummary",
    "ConfiguredVariable",
    "EditingSession",
    "EngineResult",
    "EntitySnapshot",
    "FetchTicket",
    "HydrationResult",
    "LifecycleState",
    "LoadError",
    "MappingSource",
    "ParameterEngine",
    "ParameterLifecycle",
    "ParameterSource",
    "ParamflowError",
    "Reconciliation",
    "RequestShape",
    "SourceReport",
    "StringSource",
    "aggregate",
    "calculate_completion",
    "detect_from_form",
    "detect_from_snapshot",
    "extract_parameters",
    "hydrate",
    "reconcile",
    "recompute",
    "scan_source",
    "summarize",
]
