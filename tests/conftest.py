from __future__ import annotations

from typing import Any, Dict

import pytest


class StubEntityLoader:
    """Loader double returning canned entity payloads."""

    def __init__(self, entities: Dict[str, Dict[str, Any]]) -> None:
        self.entities = entities
        self.calls: list[str] = []

    def load_entity(self, entity_id: str) -> Dict[str, Any]:
        self.calls.append(entity_id)
        if entity_id not in self.entities:
            raise ConnectionError("backend unavailable")
        return self.entities[entity_id]


class StubMetadataLoader:
    """Loader double returning canned API payloads."""

    def __init__(self, apis: Dict[str, Dict[str, Any]]) -> None:
        self.apis = apis
        self.calls: list[str] = []

    def fetch_api_metadata(self, api_id: str) -> Dict[str, Any]:
        self.calls.append(api_id)
        if api_id not in self.apis:
            raise TimeoutError("timed out")
        return self.apis[api_id]


@pytest.fixture
def order_entity() -> Dict[str, Any]:
    """Persisted test case whose templates reference several parameters."""
    return {
        "testCaseId": "tc-1",
        "apiId": "api-7",
        "url": "/api/orders/${userId}/${orderId}",
        "request": {
            "queryParams": {"page": "${page}", "limit": "10"},
            "headers": {"Authorization": "Bearer ${authToken}"},
            "pathParams": {"orderId": "${orderId}"},
        },
        "requestTemplate": '{"note": "${note}", "user": "${userId}"}',
        "responseTemplate": {"status": "${expectedStatus}"},
        "variables": [
            {"name": "userId", "value": "42"},
            {"name": "legacyFlag", "value": "true"},
        ],
    }


@pytest.fixture
def entity_loader(order_entity: Dict[str, Any]) -> StubEntityLoader:
    return StubEntityLoader({"tc-1": order_entity})


@pytest.fixture
def metadata_loader() -> StubMetadataLoader:
    return StubMetadataLoader(
        {
            "api-7": {
                "apiId": "api-7",
                "request": {
                    "queryParams": {"region": "${region}"},
                    "headers": {"X-Tenant": "${tenantId}"},
                },
            },
            "api-8": {
                "apiId": "api-8",
                "request": {"headers": {"${headerName}": "static"}},
            },
        }
    )
