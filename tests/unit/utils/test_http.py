import pytest
from flask import Flask

from app.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
    RepositoryError,
)
from app.utils.http import safe_route


@pytest.fixture()
def flask_app():
    return Flask(__name__)


def _call(flask_app, exc):
    @safe_route("Failed to do thing")
    def handler():
        raise exc

    with flask_app.test_request_context():
        response = handler()
    return response.status_code, response.get_json()["error"]["message"]


@pytest.mark.parametrize(
    "exc, expected",
    [
        (NotFoundError("Plant not found"), (404, "Plant not found")),
        (RepositoryError("Failed to update area"), (500, "An internal error occurred")),
        (ExternalServiceError("Invalid API key"), (502, "Invalid API key")),
        (ExternalServiceError(), (502, "Upstream service error")),
        (ConfigurationError("Key missing"), (503, "Key missing")),
        (RuntimeError("boom"), (500, "An internal error occurred")),
    ],
)
def test_safe_route_maps_exceptions(flask_app, exc, expected):
    assert _call(flask_app, exc) == expected
