# File: src/communigate_core/session.py
"""
CommuniGate CLI 会话 (Session)

职责：
1. 资源组装：Config + Transport + Cache + State。
2. 生命周期：Connect (USER -> PASS -> INLINE) -> Execute -> Disconnect。
3. 命令管线：Cache -> Transport -> Classifier -> Decoder。

会话不是线程安全的。并行任务请为每个 worker 各开一个会话。
"""

import logging
from dataclasses import replace

from . import protocol
from .cache import CommandCache
from .config import CliConfig
from .exceptions import CommunigateError, StateError
from .network import LineTransport, Observer
from .protocol.commands import Command
from .protocol.decoder import DecodedBody
from .protocol.response import RawResponse, Success
from .state import SessionState, SessionStatus

logger = logging.getLogger(__name__)


class CliSession:
    """CommuniGate CLI 同步会话。"""

    def __init__(
        self,
        config: CliConfig | None = None,
        observer: Observer | None = None,
    ) -> None:
        """初始化会话，不会立即连接。

        Args:
            config: 连接配置。可延后到 connect() 时再提供。
            observer: 可选的 (方向, 文本) 事件观察者。
        """
        self.config = config
        self.cache = CommandCache()
        self.transport: LineTransport | None = None

        self._listeners: list[Observer] = []
        if observer:
            self.add_listener(observer)

        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    @property
    def is_connected(self) -> bool:
        return self._state.is_connected

    def add_listener(self, callback: Observer) -> None:
        """注册收发事件观察者。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Observer) -> None:
        """移除收发事件观察者。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def connect(self, config: CliConfig | None = None) -> None:
        """打开连接并完成 USER / PASS / INLINE 握手。

        任一阶段失败都会关闭连接、回到 DISCONNECTED，并原样抛出原始异常。

        Args:
            config: 新的连接配置；省略时使用上一次的配置。

        Raises:
            StateError: 从未提供过配置。
            NetworkError: Socket 无法打开或读写失败。
            ProtocolError: 应答格式错误或连接被提前终止。
            ServerError: 服务器拒绝了登录 (如密码错误)。
        """
        if config is not None:
            self.config = config
        if self.config is None:
            raise StateError("未提供连接配置")

        if self.transport is not None:
            self._teardown()

        self._set_status(SessionStatus.CONNECTING)
        self.cache.clear()

        transport = LineTransport(self.config, self._listeners)
        try:
            transport.open()
            self.transport = transport

            greeting = transport.read_line()
            logger.debug(f"服务器欢迎信息: {greeting.line}")

            self._round_trip(protocol.commands.user(self.config.login))
            self._round_trip(protocol.commands.password(self.config.password))
            # 切换为单行应答模式
            self._round_trip(protocol.commands.inline())

        except CommunigateError as e:
            self._state.last_error = str(e)
            transport.close()
            self.transport = None
            self._set_status(SessionStatus.DISCONNECTED)
            raise

        self.cache.clear()
        self._set_status(SessionStatus.CONNECTED)
        logger.info(f"已登录 CommuniGate CLI: {self.config.host}:{self.config.port}")

    def execute(self, command: Command) -> DecodedBody:
        """执行一条命令并返回解码后的应答。

        未连接时使用上一次的配置自动连接。
        只读命令优先从缓存读取；写命令成功后清空缓存。

        Raises:
            NetworkError / ProtocolError / ServerError: 原样向上传播，不会返回部分结果。
        """
        if not self._state.is_connected or self.transport is None:
            self.connect()

        cacheable = not (command.mutating or command.sensitive)

        raw = self.cache.get(command) if cacheable else None
        if raw is not None:
            logger.debug(f"缓存命中: {command.display}")
            success = protocol.expect_success(raw)
        else:
            raw, success = self._round_trip(command)
            if cacheable:
                self.cache.put(command, raw)

        if command.mutating:
            self.cache.clear()

        return protocol.decode(success.body)

    def disconnect(self) -> None:
        """断开连接。

        尽力发送 QUIT (忽略失败)，关闭 Socket，清空缓存。可重复调用。
        """
        if self.transport is not None:
            try:
                self.transport.write(protocol.commands.quit_())
            except CommunigateError as e:
                logger.warning(f"发送 QUIT 失败 (已忽略): {e}")
            self._teardown()
            logger.info("已断开 CommuniGate CLI")

        self.cache.clear()
        if self._state.status is not SessionStatus.DISCONNECTED:
            self._set_status(SessionStatus.DISCONNECTED)

    def _round_trip(self, command: Command) -> tuple[RawResponse, Success]:
        """Transport -> Classifier。失败时记录错误并原样抛出。"""
        assert self.transport is not None

        try:
            raw = self.transport.send(command)
            self._state.round_trips += 1
            return raw, protocol.expect_success(raw)
        except CommunigateError as e:
            self._state.last_error = str(e)
            if not self.transport.is_open:
                # 传输层已自行关闭 (超时或 EOF)，会话需要重连
                self._teardown()
                self._set_status(SessionStatus.DISCONNECTED)
            raise

    def _teardown(self) -> None:
        if self.transport is not None:
            self.transport.close()
            self.transport = None
        self.cache.clear()

    def _set_status(self, status: SessionStatus) -> None:
        self._state.status = status
        logger.debug(f"[{status.name}] 会话状态变更")

    def __enter__(self) -> "CliSession":
        if not self.is_connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def __del__(self) -> None:
        # 解释器退出时属性可能已被回收
        if getattr(self, "transport", None) is not None:
            self.disconnect()
