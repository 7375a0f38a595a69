# File: src/communigate_core/utils.py
"""
CommuniGate CLI 核心库 - 通用工具箱

本模块汇集了协议字符串转义与存储单位换算等无状态算法。
"""

import re


def escape(value: str) -> str:
    """按 CLI 字符串规则转义。

    算法逻辑:
    1. 反斜杠加倍 (\\ -> \\\\)。
    2. 双引号前加反斜杠 (" -> \\")。

    顺序不可颠倒，否则第 2 步插入的反斜杠会被第 1 步再次加倍。

    Args:
        value: 原始字符串。

    Returns:
        str: 可安全放入双引号内的字符串。
    """
    return value.replace("\\", "\\\\").replace('"', '\\"')


def unescape(value: str, continuation: str | None = None) -> str:
    """escape 的逆运算。

    所有转义序列在一次扫描中处理，`\\\\e` (转义的反斜杠 + e) 不会被误认为续行标记。

    Args:
        value: 从服务器字符串中取出的转义文本。
        continuation: 续行标记 `\\e` 的替换文本 (如 "\\n" 或 ";")；为 None 时按普通转义处理为 "e"。

    Returns:
        str: 原始字符串。
    """

    def _replace(match: re.Match) -> str:
        char = match.group(1)
        if char == "e" and continuation is not None:
            return continuation
        return char

    return re.sub(r"\\(.)", _replace, value, flags=re.DOTALL)


def to_megabytes(value: str | int | None) -> int:
    """将存储字段换算为 MB。

    服务器不提供单位元数据，仅凭末尾是否带单位字母判断:
    - 以 M/K 结尾: 视为已带单位，直接取数字部分。
    - 否则: 视为字节数，换算为 MB (保留两位小数后取整)。
    - 非数字 (如 "unlimited"): 返回 0。

    Args:
        value: 原始字段值，如 "50M"、"1048576"。

    Returns:
        int: 以 MB 计的整数值。
    """
    if value is None:
        return 0

    text = str(value).strip()
    match = re.match(r"^\d+(\.\d+)?", text)
    if not match:
        return 0

    number = float(match.group(0))
    if re.search(r"(M|K)$", text, re.IGNORECASE):
        return int(number)

    return int(round(number / 1024 / 1024, 2))
