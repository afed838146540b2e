"""Engine error taxonomy.

Services raise these; ``challenge_engine.main`` turns them into JSON
responses. ``AlreadyRewarded`` is deliberately absent: a duplicate credit is
reported through the ``already_rewarded`` flag of a ledger result.
"""

from __future__ import annotations

from fastapi import status


class EngineError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "engine_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthenticated(EngineError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"


class NotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidState(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_state"


class ValidationFailed(EngineError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class TransientStoreError(EngineError):
    """Timeout or connection failure; safe to retry with the same input."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "transient_store_error"
