"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from stay_ledger.dependencies import Caller, get_caller, get_db_engine


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine yields the engine instance."""
    engine = next(get_db_engine())

    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_dependency_injection_can_be_overridden() -> None:
    """Test that the engine dependency can be overridden for testing."""
    app = FastAPI()

    @app.get("/test")
    def test_endpoint(engine: Engine = Depends(get_db_engine)) -> dict[str, str]:
        return {"engine_type": type(engine).__name__}

    mock_engine = Mock(spec=Engine)
    app.dependency_overrides[get_db_engine] = lambda: mock_engine

    response = TestClient(app).get("/test")

    assert response.status_code == 200
    assert response.json()["engine_type"] == "Mock"


@pytest.fixture
def caller_app() -> FastAPI:
    app = FastAPI()

    @app.get("/whoami")
    def whoami(caller: Caller = Depends(get_caller)) -> dict[str, object]:
        return {"user_id": caller.user_id, "role": caller.role}

    return app


@pytest.mark.unit
def test_get_caller_reads_identity_headers(caller_app: FastAPI) -> None:
    response = TestClient(caller_app).get(
        "/whoami", headers={"X-User-Id": "u-42", "X-User-Role": " manager "}
    )

    assert response.status_code == 200
    assert response.json() == {"user_id": "u-42", "role": "MANAGER"}


@pytest.mark.unit
def test_get_caller_requires_role_header(caller_app: FastAPI) -> None:
    response = TestClient(caller_app).get("/whoami", headers={"X-User-Id": "u-42"})

    assert response.status_code == 401
