# src/communigate_core/protocol/response.py
"""
应答行分类器 (Response Classifier)

把一行原始应答解析为状态码 + 内容，并对照成功白名单给出分类结果。
"""

import re
from dataclasses import dataclass

from ..exceptions import ProtocolError, ServerError
from .constants import SUCCESS_CODES

_LINE_PATTERN = re.compile(r"^(\d{3}) (.*)$", re.DOTALL)


@dataclass(frozen=True)
class RawResponse:
    """服务器返回的一行原始文本 (不含行尾换行符)。"""

    line: str


@dataclass(frozen=True)
class Success:
    code: int
    body: str


@dataclass(frozen=True)
class Fatal:
    code: int
    message: str

    def to_error(self) -> ServerError:
        return ServerError(self.code, self.message)


def classify(raw: RawResponse) -> Success | Fatal:
    """对应答行进行分类。

    Args:
        raw: 原始应答。

    Returns:
        Success | Fatal: 状态码在白名单中返回 Success，否则返回 Fatal。

    Raises:
        ProtocolError: 应答行不符合 `<3位数字><空格><内容>` 格式。
    """
    line = raw.line.rstrip("\r\n")
    match = _LINE_PATTERN.match(line)
    if not match:
        raise ProtocolError(f"malformed response: {line!r}")

    code = int(match.group(1))
    rest = match.group(2)

    if code in SUCCESS_CODES:
        return Success(code, rest)
    return Fatal(code, rest)


def expect_success(raw: RawResponse) -> Success:
    """分类并在失败时抛出 ServerError。

    Raises:
        ProtocolError: 应答行格式错误。
        ServerError: 状态码不在成功白名单中。
    """
    result = classify(raw)
    if isinstance(result, Fatal):
        raise result.to_error()
    return result
