"""Centralized exception hierarchy for the garden tracker.

All domain and service exceptions inherit from :class:`GardenError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    GardenError (base, maps to 500)
    ├── ValidationError          (400: bad input from caller)
    ├── NotFoundError            (404: entity does not exist)
    ├── ServiceError             (500: business-logic failure)
    │   ├── RepositoryError      (500: database / persistence)
    │   └── ExternalServiceError (502: third-party / network)
    └── ConfigurationError       (503: feature not configured)
"""

from __future__ import annotations


class GardenError(Exception):
    """Base exception for all garden tracker errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class opts in).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500
    #: 5xx messages are replaced by a generic one unless this is set
    public: bool = False

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(GardenError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class NotFoundError(GardenError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(GardenError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class ExternalServiceError(ServiceError):
    """Third-party or network dependency failure (HTTP 502).

    The message comes from the upstream service and is meant for the client.
    """

    http_status: int = 502
    public: bool = True


class ConfigurationError(GardenError):
    """A feature is unavailable because its configuration is missing (HTTP 503)."""

    http_status: int = 503
    public: bool = True
