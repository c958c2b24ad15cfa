"""Tests for application error types."""

import pytest

from onetime.platform.exceptions import (
    FormError,
    LimitExceeded,
    MissingSecret,
    NotFoundError,
    OnetimeError,
    RateLimitStoreError,
    Redirect,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("error", "status_code", "error_code"),
    [
        (FormError("bad input"), 400, "FORM_ERROR"),
        (NotFoundError(), 404, "NOT_FOUND"),
        (MissingSecret(), 404, "MISSING_SECRET"),
        (Redirect("/"), 303, "REDIRECT"),
        (LimitExceeded("create_secret", "ip", 251, 250), 429, "RATE_LIMITED"),
        (RateLimitStoreError("down"), 503, "RATE_LIMIT_UNAVAILABLE"),
    ],
)
def test_status_and_code(error, status_code, error_code):
    assert isinstance(error, OnetimeError)
    assert error.status_code == status_code
    assert error.to_dict()["error_code"] == error_code


def test_limit_exceeded_is_not_a_store_error():
    assert not isinstance(LimitExceeded("e", "i", 2), RateLimitStoreError)
    assert not isinstance(RateLimitStoreError("down"), LimitExceeded)


def test_limit_exceeded_details():
    error = LimitExceeded("create_secret", "203.0.113.7", 251, 250)
    assert str(error) == "[create_secret] 203.0.113.7 (251)"
    assert error.retry_after is None
    # The identifier stays out of the client-facing body
    assert error.to_dict()["context"] == {"event": "create_secret", "count": 251, "limit": 250}


def test_form_error_echoes_fields():
    error = FormError("Password is too short", form_fields={"custid": "a@example.com"})
    assert error.to_dict()["context"] == {"form_fields": {"custid": "a@example.com"}}
