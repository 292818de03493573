"""Error Hierarchy — status codes and response envelope."""

from soundlike.core.errors import (
    AuthorizationError,
    DisplayNameTakenError,
    EmailNotVerifiedError,
    ResourceNotFoundError,
    TransactionError,
    ValidationError,
)


def test_to_response_envelope():
    body = ValidationError("Title is required", "title").to_response()
    error = body["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Title is required"
    assert error["category"] == "validation"
    assert "timestamp" in error


def test_http_statuses():
    assert ValidationError("x", "f").http_status == 400
    assert EmailNotVerifiedError("upload").http_status == 403
    assert AuthorizationError("no").http_status == 403
    assert ResourceNotFoundError("Track", "7").http_status == 404
    assert DisplayNameTakenError("Ana").http_status == 409
    assert TransactionError("boom", "commit").http_status == 500


def test_email_not_verified_message_names_action():
    error = EmailNotVerifiedError("like tracks")
    assert error.message == "Email verification is required to like tracks."
    assert error.code == "EMAIL_NOT_VERIFIED"


def test_not_found_message():
    assert ResourceNotFoundError("Track", "7").message == "Track '7' not found"
