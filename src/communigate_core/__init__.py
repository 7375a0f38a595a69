# src/communigate_core/__init__.py
"""
communigate-core v1.0.0
CommuniGate Pro CLI 协议的同步客户端核心库。
"""

# 暴露核心配置
from .client import CommunigateClient
from .config import (
    CliConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    CommunigateError,
    ConfigError,
    NetworkError,
    ProtocolError,
    ServerError,
    ServerErrorCode,
    StateError,
    ValidationError,
)
from .network import Direction, LineTransport

# 暴露协议编解码
from .protocol import (
    Command,
    Scalar,
    Sequence,
    Verbatim,
    build_command,
    classify,
    decode,
    decode_rules,
    encode_rules,
)

# 暴露会话与状态
from .session import CliSession
from .state import SessionState, SessionStatus

__version__ = "1.0.0"

__all__ = [
    "CliSession",
    "CommunigateClient",
    "CliConfig",
    "SessionState",
    "SessionStatus",
    "Direction",
    "LineTransport",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "Command",
    "Verbatim",
    "build_command",
    "classify",
    "decode",
    "Scalar",
    "Sequence",
    "decode_rules",
    "encode_rules",
    "CommunigateError",
    "ConfigError",
    "NetworkError",
    "ProtocolError",
    "ServerError",
    "ServerErrorCode",
    "StateError",
    "ValidationError",
]
