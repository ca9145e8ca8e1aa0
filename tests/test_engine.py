"""Tests for paramflow.engine."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from paramflow.config import ParamflowConfig, ScanConfig
from paramflow.engine import ParameterEngine, hydrate, recompute
from paramflow.errors import LoadError
from paramflow.lifecycle import LifecycleState
from paramflow.models import ConfiguredVariable, RequestShape


def test_create_flow_detects_url_parameter() -> None:
    result = recompute("/api/orders/${userId}")

    assert result.parameters == ("userId",)
    assert result.configured == ()
    assert result.state is LifecycleState.DETECTED
    assert result.completion.rate == 0


def test_create_flow_completes_once_configured() -> None:
    result = recompute("/api/orders/${userId}", configured=["userId"])

    assert result.state is LifecycleState.COMPLETE
    assert result.completion.rate == 100


def test_create_flow_starts_empty_without_sources() -> None:
    result = recompute()

    assert result.state is LifecycleState.EMPTY
    assert result.completion.is_complete is True


def test_recompute_counts_empty_values_as_configured() -> None:
    result = recompute(
        "/a/${x}",
        RequestShape(headers={"X": "${y}"}),
        configured=[ConfiguredVariable("x", ""), {"name": "y", "value": ""}],
    )
    assert result.state is LifecycleState.COMPLETE


def test_hydrate_edit_flow_from_payload() -> None:
    result = hydrate(
        {
            "url": "/api/orders/${userId}/${orderId}",
            "variables": [{"name": "userId", "value": "7"}],
        }
    )

    assert result.parameters == ("userId", "orderId")
    assert result.configured == ("userId",)
    assert result.state is LifecycleState.PARTIALLY_CONFIGURED
    assert result.completion.rate == 50
    assert result.variables == (ConfiguredVariable("userId", "7"),)


def test_hydrate_prefers_explicit_persisted_list() -> None:
    result = hydrate(
        {"url": "/api/orders/${userId}", "variables": []},
        ["userId", "legacyFlag"],
    )

    assert result.configured == ("userId",)
    assert result.dropped == ("legacyFlag",)


def test_engine_honours_template_scan_setting(order_entity: Dict[str, Any]) -> None:
    config = ParamflowConfig(root=Path("."), scan=ScanConfig(include_templates=False))
    engine = ParameterEngine(config=config)

    hydrated = engine.hydrate(order_entity)
    recomputed = engine.recompute("/a", templates={"requestTemplate": "${body}"})

    assert "note" not in hydrated.parameters
    assert recomputed.parameters == ()


def test_load_for_edit_uses_entity_loader(entity_loader: Any) -> None:
    engine = ParameterEngine(entity_loader=entity_loader)

    snapshot, result = engine.load_for_edit("tc-1")

    assert entity_loader.calls == ["tc-1"]
    assert snapshot.identifier == "tc-1"
    assert result.configured == ("userId",)
    assert result.dropped == ("legacyFlag",)
    assert result.state is LifecycleState.PARTIALLY_CONFIGURED


def test_load_failure_is_reported_as_retryable_load_error(entity_loader: Any) -> None:
    engine = ParameterEngine(entity_loader=entity_loader)

    with pytest.raises(LoadError) as excinfo:
        engine.load_for_edit("missing")

    assert excinfo.value.retryable is True
    assert excinfo.value.resource == "entity"
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_missing_loader_raises_load_error() -> None:
    with pytest.raises(LoadError):
        ParameterEngine().fetch_request_shape("api-1")


def test_fetch_request_shape(metadata_loader: Any) -> None:
    engine = ParameterEngine(metadata_loader=metadata_loader)

    shape = engine.fetch_request_shape("api-7")

    assert shape.query_params == {"region": "${region}"}
    assert shape.headers == {"X-Tenant": "${tenantId}"}
    with pytest.raises(LoadError) as excinfo:
        engine.fetch_request_shape("api-404")
    assert excinfo.value.identifier == "api-404"
