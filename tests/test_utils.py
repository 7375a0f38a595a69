# tests/test_utils.py
import pytest

from communigate_core import utils


def test_escape_doubles_backslash_then_quotes():
    assert utils.escape('pa"ss\\word') == 'pa\\"ss\\\\word'


def test_escape_plain_text_unchanged():
    assert utils.escape("hello world") == "hello world"


@pytest.mark.parametrize("raw", ['pa"ss\\word', "plain", '\\"', "a\\\\b"])
def test_unescape_reverses_escape(raw):
    assert utils.unescape(utils.escape(raw)) == raw


@pytest.mark.parametrize(
    "value, expected",
    [
        ("50M", 50),
        ("100m", 100),
        ("512K", 512),  # 带单位字母即视为已带单位
        ("1048576", 1),
        (3145728, 3),
        ("0", 0),
        ("unlimited", 0),
        (None, 0),
        ("", 0),
    ],
)
def test_to_megabytes(value, expected):
    assert utils.to_megabytes(value) == expected


def test_unescape_continuation_marker():
    assert utils.unescape("line1\\eline2", continuation="\n") == "line1\nline2"
    assert utils.unescape("a@b.com\\ec@d.com", continuation=";") == "a@b.com;c@d.com"


def test_unescape_escaped_backslash_before_e_is_not_continuation():
    assert utils.unescape("C:\\\\every day", continuation="\n") == "C:\\every day"
