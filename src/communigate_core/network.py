# src/communigate_core/network.py
"""
CommuniGate CLI 核心库 - 网络模块 (Line Transport)

封装 TCP Socket 的连接、按行写入和按行读取。
该模块不理解协议语义，只向会话层提供 "写一行、读一行" 的接口。
"""

import logging
import socket
from collections.abc import Callable
from enum import Enum
from typing import Any, BinaryIO

from .config import CliConfig
from .exceptions import NetworkError, ProtocolError
from .protocol.commands import Command
from .protocol.constants import Wire
from .protocol.response import RawResponse

logger = logging.getLogger(__name__)


class Direction(Enum):
    SEND = "SEND"
    RECEIVE = "RECEIVE"


# 观察者回调：(方向, 文本)
Observer = Callable[[Direction, str], Any]


class LineTransport:
    """同步、非流水线的行传输。

    每次 send() 写入一行命令并阻塞读取恰好一行应答。
    读到 EOF 时会静默重试一次；连续两次 EOF 视为连接被提前终止。
    """

    def __init__(self, config: CliConfig, observers: list[Observer] | None = None):
        self.config = config
        self.observers: list[Observer] = observers if observers is not None else []
        self.sock: socket.socket | None = None
        self._reader: BinaryIO | None = None

    @property
    def is_open(self) -> bool:
        return self.sock is not None

    def open(self) -> None:
        """建立 TCP 连接。

        Raises:
            NetworkError: 主机不可达、端口拒绝或连接超时。
        """
        target = (self.config.host, self.config.port)
        try:
            self.sock = socket.create_connection(target, timeout=self.config.timeout)
            self._reader = self.sock.makefile("rb")
        except OSError as e:
            self.close()
            raise NetworkError(f"无法连接到 {target[0]}:{target[1]}: {e}") from e

        logger.debug(f"Socket 已连接: {target[0]}:{target[1]}")

    def write(self, command: Command) -> None:
        """只写入一行命令，不读取应答。

        Raises:
            NetworkError: Transport 未打开或发送失败。
        """
        if self.sock is None:
            raise NetworkError("Transport 未打开")

        data = (command.text + Wire.LINE_TERMINATOR).encode(Wire.ENCODING)
        try:
            self.sock.sendall(data)
        except OSError as e:
            self.close()
            raise NetworkError(f"发送失败: {e}") from e

        self._emit(Direction.SEND, command.display)

    def send(self, command: Command) -> RawResponse:
        """发送一条命令并读取一行应答。

        Raises:
            NetworkError: 发送失败或读取超时。
            ProtocolError: 连接被提前终止或应答行被截断。
        """
        self.write(command)
        return self.read_line()

    def read_line(self) -> RawResponse:
        """阻塞读取一行应答。

        Raises:
            NetworkError: 读取超时或 Socket 错误。
            ProtocolError: 连续两次 EOF，或应答行在换行符前被截断。
        """
        data = self._readline()
        if not data:
            # 服务器偶尔会发出一次伪 EOF，吞掉后再读一次
            logger.debug("读到 EOF，重试读取一次")
            data = self._readline()
        if not data:
            self.close()
            raise ProtocolError("Socket 被提前终止 (连续两次 EOF)")

        if not data.endswith(b"\n"):
            self.close()
            raise ProtocolError(f"应答行被截断: {data!r}")

        line = data.decode(Wire.ENCODING, errors="replace").rstrip("\r\n")
        self._emit(Direction.RECEIVE, line)
        return RawResponse(line)

    def _readline(self) -> bytes:
        if self._reader is None:
            raise NetworkError("Transport 未打开")

        try:
            return self._reader.readline()
        except socket.timeout:
            # 迟到的应答会让后续命令错位，超时后必须重连
            self.close()
            raise NetworkError(f"接收超时 ({self.config.timeout}s)") from None
        except OSError as e:
            self.close()
            raise NetworkError(f"接收错误: {e}") from e

    def close(self) -> None:
        """关闭 Socket。可重复调用。"""
        if self._reader is not None:
            try:
                self._reader.close()
            except OSError as e:
                logger.debug(f"关闭读取流时出错: {e}")
            self._reader = None

        if self.sock is not None:
            try:
                self.sock.close()
            except OSError as e:
                logger.debug(f"关闭 Socket 时出错: {e}")
            self.sock = None
            logger.debug("Socket 已关闭")

    def _emit(self, direction: Direction, text: str) -> None:
        """写日志并通知所有观察者。观察者异常不影响传输。"""
        arrow = ">>>" if direction is Direction.SEND else "<<<"
        logger.debug(f"[CommuniGate {self.config.host}] {arrow} {text}")

        for callback in self.observers:
            try:
                callback(direction, text)
            except Exception as e:
                logger.error(f"观察者回调异常: {e}")
