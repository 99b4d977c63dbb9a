"""Tests for core exceptions."""

from keyset_relay.core import exceptions as exc


def test_app_exception_defaults_title() -> None:
    error = exc.AppException(status_code=400, detail="bad")
    assert error.title == "Bad Request"
    assert error.extra == {}
    assert str(error) == "bad"


def test_app_exception_unknown_status_title() -> None:
    error = exc.AppException(status_code=418, detail="teapot")
    assert error.title == "Error"


def test_invalid_argument_error_fields() -> None:
    error = exc.InvalidArgumentError("first must be non-negative", extra={"first": -1})
    assert isinstance(error, exc.BadRequestException)
    assert error.status_code == 400
    assert error.type == "invalid-argument"
    assert error.extra == {"first": -1}


def test_malformed_cursor_error_fields() -> None:
    error = exc.MalformedCursorError("Invalid cursor")
    assert error.status_code == 400
    assert error.type == "malformed-cursor"
    assert error.title == "Bad Request"


def test_data_source_error_is_service_unavailable() -> None:
    error = exc.DataSourceError("down", extra={"operation": "fetch"})
    assert isinstance(error, exc.ServiceUnavailableException)
    assert error.status_code == 503
    assert error.type == "data-source-error"


def test_cursor_encode_error_is_type_error() -> None:
    error = exc.CursorEncodeError("Cannot encode value of type set")
    assert isinstance(error, TypeError)
    assert isinstance(error, exc.AppException)
    assert error.status_code == 500
    assert error.type == "cursor-encode-error"
