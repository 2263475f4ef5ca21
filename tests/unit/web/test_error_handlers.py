"""Tests for mapping errors to HTTP responses."""

import asyncio
import json

import pytest
from starlette.requests import Request

from gogrind.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    UserError,
    ValidationError,
)
from gogrind.web.error_handlers import general_exception_handler, resolve_error_status, user_error_handler


def make_request():
    return Request({"type": "http", "method": "POST", "path": "/api/spaces", "headers": [], "query_string": b""})


def render(handler, exc):
    response = asyncio.run(handler(make_request(), exc))
    return response.status_code, json.loads(response.body)


class TestUserErrorHandler:
    """Tests for user_error_handler."""

    @pytest.mark.parametrize(
        ("exc", "status_code", "error_type"),
        [
            (ValidationError("Grinding topic is required"), 400, "validation_error"),
            (InvalidTransitionError("completed", "live"), 400, "validation_error"),
            (AuthenticationError("Unauthorized - Token expired"), 401, "authentication_error"),
            (AccessDeniedError("Only members can join the stream"), 403, "access_denied"),
            (NotFoundError("Space not found"), 404, "not_found"),
            (ConflictError(), 409, "conflict"),
        ],
    )
    def test_status_mapping(self, exc, status_code, error_type):
        """Test that each user error maps to its status code and type."""
        status, body = render(user_error_handler, exc)
        assert status == status_code
        assert body == {"message": str(exc), "type": error_type}

    def test_transition_message(self):
        """Test that transition errors name both statuses."""
        _, body = render(user_error_handler, InvalidTransitionError("completed", "live"))
        assert body["message"] == "Cannot change status from 'completed' to 'live'"


class TestResolveErrorStatus:
    """Tests for resolve_error_status."""

    def test_subclass_before_base(self):
        """Test that subclasses resolve before their base classes."""
        assert resolve_error_status(InvalidTransitionError("live", "scheduled")) == (400, "validation_error")

    def test_unknown_user_error(self):
        """Test that unmapped user errors fall back to 400."""

        class QuotaError(UserError):
            pass

        assert resolve_error_status(QuotaError("Too many spaces")) == (400, "bad_request")


class TestGeneralExceptionHandler:
    """Tests for general_exception_handler."""

    def test_hides_details(self):
        """Test that unexpected errors hide their details."""
        status, body = render(general_exception_handler, RuntimeError("database password is hunter2"))
        assert status == 500
        assert body == {"message": "Internal Server Error", "type": "internal_server_error"}
