"""Unit tests for the structured error responses."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi.exceptions import RequestValidationError

from media_sync.exceptions import SessionNotFoundException, TransportUnavailableException
from media_sync.middleware.error_handlers import (
    general_exception_handler,
    media_sync_exception_handler,
    validation_exception_handler,
)


@pytest.fixture
def mock_request():
    request = MagicMock()
    request.url.path = "/api/media/sessions/nope"
    return request


@pytest.mark.asyncio
async def test_session_not_found_body(mock_request):
    """Test domain exceptions keep their status, code and details."""
    response = await media_sync_exception_handler(mock_request, SessionNotFoundException("nope"))

    assert response.status_code == 404
    assert json.loads(response.body) == {
        "error": {"code": "SESSION_NOT_FOUND", "message": "Session not found: nope", "details": {"session_id": "nope"}}
    }


@pytest.mark.asyncio
async def test_transport_unavailable_body(mock_request):
    """Test an unreachable endpoint surfaces as 503."""
    response = await media_sync_exception_handler(mock_request, TransportUnavailableException())

    assert response.status_code == 503
    assert json.loads(response.body)["error"]["code"] == "TRANSPORT_UNAVAILABLE"


@pytest.mark.asyncio
async def test_validation_error_body(mock_request):
    """Test request validation errors use the same envelope."""
    exc = RequestValidationError(
        [{"loc": ("path", "code"), "msg": "Input should be >= 0", "type": "greater_than_equal"}]
    )

    response = await validation_exception_handler(mock_request, exc)

    assert response.status_code == 422
    error = json.loads(response.body)["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"] == {"errors": [{"loc": ["path", "code"], "msg": "Input should be >= 0"}]}


@pytest.mark.asyncio
async def test_unhandled_error_hides_details(mock_request):
    """Test internal error text never reaches the client."""
    response = await general_exception_handler(mock_request, RuntimeError("db password is hunter2"))

    assert response.status_code == 500
    assert json.loads(response.body) == {"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}
