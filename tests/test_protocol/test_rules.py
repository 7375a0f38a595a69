# tests/test_protocol/test_rules.py
"""
测试邮件规则的提取、合并与查找。
"""

from communigate_core.protocol.constants import RuleConst
from communigate_core.protocol.rules import (
    decode_rules,
    encode_rules,
    extract_rule_value,
    find_rule,
    rule_spans,
)

BLOB = (
    'Rules=((1,"#Redirect",(),(("Mirror to","x@y.com"),(Discard,"---"))),'
    '(2,"#Vacation",(),()))'
)
REDIRECT = '1,"#Redirect",(),(("Mirror to","x@y.com"),(Discard,"---"))'
VACATION = '2,"#Vacation",(),()'


def test_decode_yields_records_in_order():
    assert decode_rules(BLOB) == [REDIRECT, VACATION]


def test_decode_from_decoded_settings():
    settings = ["MaxAccountSize=50M", BLOB, "RealName=Bob"]

    assert decode_rules(settings) == [REDIRECT, VACATION]


def test_decode_from_raw_settings_dictionary():
    raw = "{MaxAccountSize=50M; " + BLOB + "; RealName=Bob;}"

    assert decode_rules(raw) == [REDIRECT, VACATION]


def test_decode_without_rules_field():
    assert decode_rules(["MaxAccountSize=50M"]) == []
    assert decode_rules("") == []


def test_decode_drops_fragments_without_record_shape():
    blob = 'Rules=((1,"#Keep",(),()),(junk),(x,"#Bad",()))'

    assert decode_rules(blob) == ['1,"#Keep",(),()']


def test_decode_turns_line_breaks_into_continuation_marker():
    blob = 'Rules=((2,"#Vacation",(),(("Reply with","line1\r\nline2"))))'

    rules = decode_rules(blob)

    assert rules == ['2,"#Vacation",(),(("Reply with","line1\\eline2"))']


def test_scanner_ignores_parentheses_inside_strings():
    text = '((1,"#A",(),(("Reply with","smile :)"))),(2,"#B",(),()))'

    spans = rule_spans(text)

    assert len(spans) == 2
    assert text[spans[0][0] + 1 : spans[0][1]] == '1,"#A",(),(("Reply with","smile :)"))'


def test_round_trip_with_untouched_marker():
    rules = decode_rules(BLOB)

    encoded = encode_rules(rules, "#NoSuchRule", RuleConst.REDIRECT_STRUCT, "")

    assert decode_rules(RuleConst.RULES_FIELD + encoded) == rules


def test_encode_removes_target_and_keeps_others():
    encoded = encode_rules([REDIRECT, VACATION], RuleConst.REDIRECT_MARKER, RuleConst.REDIRECT_STRUCT, "")

    assert encoded == f"(({VACATION}))"
    assert "Mirror to" not in encoded


def test_encode_without_rules_is_default():
    encoded = encode_rules([REDIRECT], RuleConst.REDIRECT_MARKER, RuleConst.REDIRECT_STRUCT, "")

    assert encoded == "Default"
    assert encode_rules([], RuleConst.REDIRECT_MARKER, RuleConst.REDIRECT_STRUCT, "") == "Default"


def test_encode_replaces_target_in_place():
    encoded = encode_rules(
        [REDIRECT, VACATION], RuleConst.REDIRECT_MARKER, RuleConst.REDIRECT_STRUCT, "new@y.com"
    )

    assert encoded == (
        '((1,"#Redirect",(),(("Mirror to","new@y.com"),(Discard,"---"))),'
        f"({VACATION}))"
    )


def test_encode_appends_when_missing():
    encoded = encode_rules([VACATION], RuleConst.REDIRECT_MARKER, RuleConst.REDIRECT_STRUCT, "a@b.com")

    assert encoded == (
        f"(({VACATION}),"
        '(1,"#Redirect",(),(("Mirror to","a@b.com"),(Discard,"---"))))'
    )


def test_find_rule_is_case_insensitive():
    rules = [REDIRECT, VACATION]

    assert find_rule(rules, "#Vacation") == VACATION
    assert find_rule(rules, "redirect") == REDIRECT
    assert find_rule(rules, "#Other") is None


def test_extract_rule_value():
    assert extract_rule_value(REDIRECT, "Mirror to") == "x@y.com"
    assert extract_rule_value(REDIRECT, "Reply with") is None


def test_extract_rule_value_keeps_escapes():
    rule = '2,"#Vacation",(),(("Reply with","say \\"hi\\"\\eBye"))'

    assert extract_rule_value(rule, "Reply with") == 'say \\"hi\\"\\eBye'
