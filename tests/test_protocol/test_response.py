# tests/test_protocol/test_response.py
import pytest

from communigate_core.exceptions import ProtocolError, ServerError
from communigate_core.protocol.response import (
    Fatal,
    RawResponse,
    Success,
    classify,
    expect_success,
)


@pytest.mark.parametrize(
    "line, code, body",
    [
        ("200 OK", 200, "OK"),
        ("201 (example.com,example.org)", 201, "(example.com,example.org)"),
        ("300 Expecting more input", 300, "Expecting more input"),
        ("201 ", 201, ""),
        ("200 OK\r\n", 200, "OK"),
    ],
)
def test_whitelisted_codes_are_success(line, code, body):
    assert classify(RawResponse(line)) == Success(code, body)


@pytest.mark.parametrize(
    "line, code, message",
    [
        ("515 Incorrect password", 515, "Incorrect password"),
        ("513 Unknown user account", 513, "Unknown user account"),
        ("520 Account with this name already exists", 520, "Account with this name already exists"),
        ("202 Something new", 202, "Something new"),
    ],
)
def test_other_codes_are_fatal(line, code, message):
    assert classify(RawResponse(line)) == Fatal(code, message)


@pytest.mark.parametrize("line", ["garbage", "20 OK", "200OK", "", "abc OK"])
def test_malformed_line_raises_protocol_error(line):
    with pytest.raises(ProtocolError, match="malformed response"):
        classify(RawResponse(line))


def test_expect_success_returns_success():
    assert expect_success(RawResponse("201 {a=1;}")) == Success(201, "{a=1;}")


def test_expect_success_raises_server_error_with_code():
    with pytest.raises(ServerError) as exc_info:
        expect_success(RawResponse("513 Unknown user account"))

    assert exc_info.value.code == 513
    assert exc_info.value.message == "Unknown user account"


def test_fatal_to_error():
    error = Fatal(500, "Unknown command").to_error()

    assert isinstance(error, ServerError)
    assert error.code == 500
