# File: src/communigate_core/cache.py
"""
CommuniGate CLI 核心库 - 命令缓存

在单个会话内按命令原文缓存最近一次的原始应答。
缓存不会自动过期，由 Session 在写操作成功、连接和断开时显式清空。
"""

import hashlib

from .protocol.commands import Command
from .protocol.response import RawResponse


class CommandCache:
    """命令文本 -> 原始应答行。"""

    def __init__(self) -> None:
        self._entries: dict[str, RawResponse] = {}

    @staticmethod
    def _key(command: Command | str) -> str:
        return hashlib.md5(str(command).encode("utf-8")).hexdigest()

    def get(self, command: Command | str) -> RawResponse | None:
        return self._entries.get(self._key(command))

    def put(self, command: Command | str, response: RawResponse) -> None:
        self._entries[self._key(command)] = response

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, command: Command | str) -> bool:
        return self._key(command) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
