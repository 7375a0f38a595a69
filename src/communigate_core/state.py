# File: src/communigate_core/state.py
"""
CommuniGate CLI 核心库 - 状态模块

负责定义会话生命周期状态。
本模块不包含业务逻辑，仅作为数据容器供 Session 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto


class SessionStatus(Enum):
    """会话的生命周期状态枚举。

    状态流转示意:
    DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED
                        |
                        v
                  DISCONNECTED (握手失败)
    """

    DISCONNECTED = auto()
    """未连接。初始状态，或已断开 (可重新连接)。"""

    CONNECTING = auto()
    """正在打开 Socket 并执行 USER/PASS/INLINE 握手。"""

    CONNECTED = auto()
    """握手完成，可以执行命令。"""


@dataclass
class SessionState:
    """会话的易变状态数据。

    Attributes:
        status: 当前生命周期状态。
        last_error: 最近一次错误的描述，用于上层显示。
        round_trips: 本会话实际发生的网络往返次数 (缓存命中不计)。
    """

    status: SessionStatus = SessionStatus.DISCONNECTED
    last_error: str = ""
    round_trips: int = 0

    @property
    def is_connected(self) -> bool:
        return self.status == SessionStatus.CONNECTED
