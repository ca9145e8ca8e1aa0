"""Tests for paramflow.session."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Dict

import pytest

from paramflow.engine import ParameterEngine
from paramflow.errors import LoadError
from paramflow.lifecycle import LifecycleState
from paramflow.models import RequestShape
from paramflow.session import EditingSession


def test_session_recomputes_on_every_change() -> None:
    session = EditingSession()
    assert session.result.state is LifecycleState.EMPTY

    result = session.set_url("/api/orders/${userId}")
    assert result.state is LifecycleState.DETECTED

    result = session.configure("userId", "42")
    assert result.state is LifecycleState.COMPLETE
    assert result.completion.rate == 100

    result = session.set_url("/api/orders/${userId}/${orderId}")
    assert result.state is LifecycleState.PARTIALLY_CONFIGURED
    assert result.pending == ("orderId",)

    result = session.unconfigure("userId")
    assert result.state is LifecycleState.DETECTED


def test_stale_metadata_response_is_discarded() -> None:
    session = EditingSession(url="/users/${userId}")
    first = session.select_api("api-7")
    second = session.select_api("api-8")
    assert first is not None and second is not None

    applied_stale = session.apply_api_metadata(
        first, {"request": {"headers": {"X-Tenant": "${tenantId}"}}}
    )
    assert applied_stale is False
    assert session.result.parameters == ("userId",)

    applied = session.apply_api_metadata(second, RequestShape(headers={"${headerName}": "x"}))
    assert applied is True
    assert session.result.parameters == ("userId", "headerName")


def test_reselecting_same_api_supersedes_older_request() -> None:
    session = EditingSession()
    older = session.select_api("api-7")
    newer = session.select_api("api-7")
    assert older is not None and newer is not None

    assert session.is_current(older) is False
    assert session.is_current(newer) is True


def test_url_edits_during_fetch_are_kept() -> None:
    session = EditingSession(url="/v1/${a}")
    ticket = session.select_api("api-7")
    session.set_url("/v2/${b}")
    assert ticket is not None

    session.apply_api_metadata(ticket, {"request": {"queryParams": {"q": "${c}"}}})

    assert session.url == "/v2/${b}"
    assert session.result.parameters == ("b", "c")


def test_selecting_new_api_clears_previous_shape() -> None:
    session = EditingSession(request=RequestShape(headers={"X": "${old}"}), api_id="api-1")
    assert session.result.parameters == ("old",)

    assert session.select_api(None) is None
    assert session.request is None
    assert session.result.parameters == ()


def test_refresh_api_metadata_applies_latest(metadata_loader: Any) -> None:
    session = EditingSession(ParameterEngine(metadata_loader=metadata_loader), url="/o/${id}")

    applied = asyncio.run(session.refresh_api_metadata("api-7"))

    assert applied is True
    assert session.result.parameters == ("id", "region", "tenantId")


def test_refresh_failure_keeps_last_valid_state(metadata_loader: Any) -> None:
    session = EditingSession(ParameterEngine(metadata_loader=metadata_loader), url="/o/${id}")
    session.configure("id", "1")

    with pytest.raises(LoadError):
        asyncio.run(session.refresh_api_metadata("api-404"))

    assert session.result.parameters == ("id",)
    assert session.result.state is LifecycleState.COMPLETE


class GatedMetadataLoader:
    """Fails ``slow-broken`` only after ``release`` is set."""

    def __init__(self) -> None:
        self.release = threading.Event()

    def fetch_api_metadata(self, api_id: str) -> Dict[str, Any]:
        if api_id == "slow-broken":
            self.release.wait(timeout=5)
            raise TimeoutError("old request timed out")
        return {"request": {"headers": {"X-Tenant": "${tenantId}"}}}


def test_superseded_fetch_failure_is_discarded() -> None:
    loader = GatedMetadataLoader()
    session = EditingSession(ParameterEngine(metadata_loader=loader), url="/o/${id}")

    async def scenario() -> tuple[bool, bool]:
        older = asyncio.create_task(session.refresh_api_metadata("slow-broken"))
        await asyncio.sleep(0)
        newer = await session.refresh_api_metadata("api-new")
        loader.release.set()
        return newer, await older

    newer_applied, older_applied = asyncio.run(scenario())

    assert newer_applied is True
    assert older_applied is False
    assert session.api_id == "api-new"
    assert session.result.parameters == ("id", "tenantId")


def test_from_hydration_seeds_edit_session(entity_loader: Any) -> None:
    engine = ParameterEngine(entity_loader=entity_loader)
    snapshot, hydrated = engine.load_for_edit("tc-1")

    session = EditingSession.from_hydration(snapshot, hydrated, engine)

    assert session.api_id == "api-7"
    assert [variable.name for variable in session.variables] == ["userId"]
    assert session.result.parameters == hydrated.parameters
    assert session.result.completion == hydrated.completion
