"""Unit tests for the service error taxonomy."""
import pytest

from convention_voting.core.exceptions import (
    ConflictError,
    ExternalFailureError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ServiceError,
    ValidationError,
)


@pytest.mark.unit
class TestServiceErrors:

    @pytest.mark.parametrize("error_class,status_code", [
        (NotFoundError, 404),
        (ForbiddenError, 403),
        (ConflictError, 409),
        (InvalidTransitionError, 409),
        (ValidationError, 400),
        (ExternalFailureError, 503),
    ])
    def test_status_codes(self, error_class, status_code):
        error = error_class("nope")
        assert isinstance(error, ServiceError)
        assert isinstance(error, ValueError)
        assert error.status_code == status_code

    def test_to_dict(self):
        error = ForbiddenError("You are not eligible to vote on this motion", reason="not_in_pool")
        assert error.to_dict() == {
            "code": "forbidden",
            "message": "You are not eligible to vote on this motion",
            "reason": "not_in_pool",
        }

    def test_invalid_transition_keeps_states(self):
        error = InvalidTransitionError("no", current="voting_complete", requested="voting_active")
        assert (error.current, error.requested) == ("voting_complete", "voting_active")
