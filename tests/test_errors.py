"""
Tests for the error taxonomy
"""

import pytest

from storefront.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    InvalidCredentials,
    InvalidOrExpiredToken,
    NotFound,
    StorefrontError,
    ValidationFailed,
)


@pytest.mark.parametrize(
    ("error_class", "code"),
    [
        (AuthenticationRequired, "UNAUTHENTICATED"),
        (AuthorizationDenied, "FORBIDDEN"),
        (NotFound, "NOT_FOUND"),
        (ValidationFailed, "BAD_USER_INPUT"),
        (InvalidCredentials, "INVALID_CREDENTIALS"),
        (InvalidOrExpiredToken, "INVALID_RESET_TOKEN"),
    ],
)
def test_codes(error_class, code):
    err = error_class("boom")

    assert isinstance(err, StorefrontError)
    assert err.code == code
    assert err.extensions == {"code": code}
    assert str(err) == "boom"


def test_details_are_exposed_as_extensions():
    err = NotFound("No item found", id="123")

    assert err.extensions == {"code": "NOT_FOUND", "id": "123"}
    assert err.message == "No item found"
