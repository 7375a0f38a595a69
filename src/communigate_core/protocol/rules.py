# src/communigate_core/protocol/rules.py
"""
邮件规则编解码器 (Rule Codec)

账户设置中的 `Rules` 字段是一个嵌套括号列表:

    Rules=((1,"#Redirect",(),(("Mirror to","x@y.com"),(Discard,"---"))),(2,"#Vacation",(),()))

本模块只理解顶层记录的边界与规则类型，不解析条件/动作语法。
每条规则作为不透明字符串 (RuleRecord) 按原顺序保存，编辑时原样保留其它规则。
"""

import logging
import re
from collections.abc import Iterable

from .constants import RuleConst, Wire
from .decoder import decode

logger = logging.getLogger(__name__)

RuleRecord = str
RuleSet = list[RuleRecord]

_RECORD_SHAPE = re.compile(RuleConst.RECORD_SHAPE)


def rule_spans(text: str) -> list[tuple[int, int]]:
    """扫描括号深度，返回每条顶层规则的 (start, end) 位置。

    深度 1 是整个规则列表的外层括号，深度 2 是单条规则。
    start 为深度首次达到 2 时左括号的位置，end 为深度回到 1 时右括号的位置。

    与单纯数括号的扫描不同，这里有意跳过双引号字符串 (含 `\\"` 转义) 内的括号，
    因此自动回复正文中的 `:)` 之类不会提前结束一条记录。

    Args:
        text: 去掉 `Rules=` 前缀后的规则列表文本。

    Returns:
        list[tuple[int, int]]: 记录内容为 text[start + 1 : end]。
    """
    spans: list[tuple[int, int]] = []
    depth = 0
    start: int | None = None
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
            continue

        if ch == '"':
            in_string = True
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1

        if depth == 2 and start is None:
            start = i
        elif depth == 1 and start is not None:
            spans.append((start, i))
            start = None

    return spans


def _normalize(record: str) -> str:
    """去掉回车，把换行替换为服务器的续行标记。"""
    return record.replace("\r", "").replace("\n", Wire.CONTINUATION_MARKER)


def _find_rules_field(source: str | Iterable[str]) -> str | None:
    if isinstance(source, str):
        text = source.strip()
        fields: Iterable[str] = decode(text).as_list() if text.startswith("{") else [text]
    else:
        fields = source

    body = None
    for field in fields:
        if field.lower().startswith(RuleConst.RULES_FIELD.lower()):
            body = field
    return body


def decode_rules(source: str | Iterable[str]) -> RuleSet:
    """从账户设置中提取规则列表。

    Args:
        source: 已解码的设置序列 (`key=value` 字符串)，或原始设置/规则文本。

    Returns:
        RuleSet: 按原顺序排列的规则记录；没有 Rules 字段时返回空列表。
    """
    body = _find_rules_field(source)
    if not body:
        return []

    # 去掉 `Rules=` 外层包装
    body = body[len(RuleConst.RULES_FIELD) :].strip()

    records = [_normalize(body[start + 1 : end]) for start, end in rule_spans(body)]

    rules = []
    for record in records:
        if _RECORD_SHAPE.match(record):
            rules.append(record)
        else:
            logger.debug(f"丢弃不完整的规则片段: {record!r}")
    return rules


def encode_rules(
    existing: Iterable[RuleRecord],
    type_marker: str,
    template: str,
    new_value: str,
) -> str:
    """把修改后的规则合并回嵌套括号语法。

    - 不含 type_marker 的规则原样保留。
    - 含 type_marker 的规则: new_value 非空则替换为填充后的模板，为空则删除。
    - 没有任何规则命中且 new_value 非空时，在末尾追加新规则。

    注意: type_marker 直接作为正则表达式使用。

    Args:
        existing: 当前规则集。
        type_marker: 用于识别目标规则的标记，如 '"Mirror to",'。
        template: 规则结构模板，`$$` 为值占位符。
        new_value: 新值 (调用方负责转义)。

    Returns:
        str: `(...)` 包裹的规则列表；没有任何规则时返回 `Default`。
    """
    parts: list[str] = []
    found = False

    for record in existing:
        if not re.search(type_marker, record):
            parts.append(f"({record})")
        elif new_value:
            found = True
            parts.append(template.replace(RuleConst.PLACEHOLDER, new_value))

    if not found and new_value:
        parts.append(template.replace(RuleConst.PLACEHOLDER, new_value))

    rules = ",".join(parts)

    if rules.endswith(","):
        rules = rules[:-1]
    if rules.startswith(","):
        rules = rules[1:]

    if not rules:
        return RuleConst.DEFAULT
    return f"({rules})"


def find_rule(rules: Iterable[RuleRecord], name: str) -> RuleRecord | None:
    """按规则名 (如 `#Redirect`、`redirect`) 查找第一条匹配的规则，不区分大小写。"""
    pattern = "#" + name.replace("#", "")
    for rule in rules:
        if re.search(pattern, rule, re.IGNORECASE):
            return rule
    return None


def extract_rule_value(rule: RuleRecord, key: str) -> str | None:
    """读取规则中 `("Key","value")` 形式的动作参数。

    Returns:
        str | None: 原始 (仍带转义) 的参数值；未找到时返回 None。
    """
    pattern = (
        r"\(\s*\"" + re.escape(key) + r"\"\s*,\s*"
        r"(?:\"((?:[^\"\\]|\\.)*)\"|([^,)]*))"
    )
    match = re.search(pattern, rule, re.IGNORECASE)
    if not match:
        return None

    if match.group(1) is not None:
        return match.group(1)
    return match.group(2).strip()
