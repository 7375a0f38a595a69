# src/communigate_core/protocol/decoder.py
"""
结构化应答解码器 (Structural Decoder)

根据应答内容的括号形状把它解码为有序字符串序列或单个标量。
形状匹配器按优先级排列，每个都是纯函数，可单独测试。
"""

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .constants import SUCCESS_CODES


@dataclass(frozen=True)
class Scalar:
    """单值应答，如 `201 mail.example.com`。"""

    value: str

    def as_list(self) -> list[str]:
        return [self.value]


@dataclass(frozen=True)
class Sequence:
    """有序序列应答。字典形状的应答也解码为 `key=value` 原始字符串序列。"""

    items: tuple[str, ...] = ()

    def as_list(self) -> list[str]:
        return list(self.items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> str:
        return self.items[index]


DecodedBody = Scalar | Sequence

# 标量形状下可能残留的成功状态码
_CODE_REMNANT = re.compile(
    r"^(?:" + "|".join(str(code) for code in SUCCESS_CODES) + r")(?:\s+|$)"
)


def _finish(parts: list[str]) -> list[str]:
    """逐项去空白，并丢弃末尾的空元素 (服务器会以分隔符结尾)。"""
    items = [part.strip() for part in parts]
    if items and not items[-1]:
        items.pop()
    return items


def _strip_wrapper(body: str, opening: str, closing: str) -> str:
    inner = body[len(opening) :]
    if inner.endswith(closing):
        inner = inner[: -len(closing)]
    return inner


def _split_top_level(text: str) -> list[str]:
    """只在括号深度为 0 的逗号处切分，双引号内的字符不计入深度。"""
    parts: list[str] = []
    depth = 0
    start = 0
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(text[start:i])
            start = i + 1

    parts.append(text[start:])
    return parts


def match_nested_list(body: str) -> Sequence | None:
    """`((a,(b)),(c,d))` -> ["(a,(b))", "(c,d)"]，每个元素都是括号平衡的顶层记录。"""
    if not body.startswith("(("):
        return None

    inner = _strip_wrapper(body, "(", ")")
    return Sequence(tuple(_finish(_split_top_level(inner))))


def match_flat_list(body: str) -> Sequence | None:
    """`(a,b,c)` -> ["a", "b", "c"]"""
    if not body.startswith("("):
        return None

    inner = _strip_wrapper(body, "(", ")")
    return Sequence(tuple(_finish(inner.split(","))))


def match_field_list(body: str) -> Sequence | None:
    """`{K1=V1; K2=V2;}` -> ["K1=V1", "K2=V2"]"""
    if not body.startswith("{"):
        return None

    inner = _strip_wrapper(body, "{", "}")
    return Sequence(tuple(_finish(inner.split(";"))))


def match_scalar(body: str) -> DecodedBody:
    """兜底形状：按单个空格切分。"""
    text = _CODE_REMNANT.sub("", body, count=1).strip()
    items = _finish(text.split(" "))

    if len(items) == 1:
        return Scalar(items[0])
    return Sequence(tuple(items))


# 优先级从高到低
SHAPE_MATCHERS: tuple[Callable[[str], DecodedBody | None], ...] = (
    match_nested_list,
    match_flat_list,
    match_field_list,
    match_scalar,
)


def decode(body: str) -> DecodedBody:
    """解码一条成功应答的内容部分。

    Args:
        body: 状态码之后的文本。

    Returns:
        DecodedBody: Scalar 或 Sequence。空内容 (`{}`、`()`、空串) 返回空 Sequence。
    """
    text = body.replace("\r", "").replace("\n", "").strip()

    for matcher in SHAPE_MATCHERS:
        result = matcher(text)
        if result is not None:
            return result

    # match_scalar 总会返回结果
    return Sequence()
