# src/communigate_core/protocol/__init__.py
"""
CommuniGate CLI 协议层 (Protocol Layer)

本包负责命令的纯粹构建 (Build) 与应答的解析 (Parse)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何会话状态 (State)。
- 不依赖于 session 或 network 层。
"""

from . import commands, constants
from .commands import Command, Verbatim, build_command
from .decoder import DecodedBody, Scalar, Sequence, decode
from .response import Fatal, RawResponse, Success, classify, expect_success
from .rules import (
    RuleRecord,
    RuleSet,
    decode_rules,
    encode_rules,
    extract_rule_value,
    find_rule,
    rule_spans,
)

# 公共 API
__all__ = [
    "commands",
    "constants",
    "Command",
    "Verbatim",
    "build_command",
    "DecodedBody",
    "Scalar",
    "Sequence",
    "decode",
    "RawResponse",
    "Success",
    "Fatal",
    "classify",
    "expect_success",
    "RuleRecord",
    "RuleSet",
    "decode_rules",
    "encode_rules",
    "find_rule",
    "extract_rule_value",
    "rule_spans",
]
