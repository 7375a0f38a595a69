"""
CommuniGate CLI 核心库 - 配置模块

负责连接配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (含 .env 文件) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 106
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class CliConfig:
    """CliSession 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        login: CLI 管理员账户。
        password: CLI 管理员密码。
        host: 服务器地址。
        port: CLI 端口 (通常为 106)。
        timeout: 连接与读取超时 (秒)。
    """

    login: str
    password: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT

    def __repr__(self) -> str:
        """隐藏密码字段，防止日志泄露敏感信息。"""
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"login='{self.login}', "
            f"password='******', "
            f"timeout={self.timeout}>"
        )


def create_config_from_dict(raw_data: dict[str, Any]) -> CliConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        CliConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """

    def _req(key: str) -> Any:
        """获取必要字段，缺失则报错"""
        if key not in raw_data or raw_data[key] in (None, ""):
            raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
        return raw_data[key]

    def _get(key: str, default: Any) -> Any:
        """获取可选字段，缺失则使用默认值"""
        val = raw_data.get(key)
        return default if val in (None, "") else val

    def _to_int(key: str, default: int) -> int:
        val = _get(key, default)
        try:
            port = int(val)
        except (TypeError, ValueError):
            raise ConfigError(f"端口格式无效 '{key}': {val}") from None
        if not 0 < port < 65536:
            raise ConfigError(f"端口超出范围 '{key}': {port}")
        return port

    def _to_float(key: str, default: float) -> float:
        val = _get(key, default)
        try:
            timeout = float(val)
        except (TypeError, ValueError):
            raise ConfigError(f"超时格式无效 '{key}': {val}") from None
        if timeout <= 0:
            raise ConfigError(f"超时必须为正数 '{key}': {timeout}")
        return timeout

    return CliConfig(
        login=str(_req("login")),
        password=str(_req("password")),
        host=str(_get("host", DEFAULT_HOST)),
        port=_to_int("port", DEFAULT_PORT),
        timeout=_to_float("timeout", DEFAULT_TIMEOUT),
    )


def load_config_from_toml(file_path: Path, profile: str = "default") -> CliConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [communigate]: 单服务器配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        CliConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    raw_config = {}

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]

    elif "communigate" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [communigate] 节，忽略 profile='{profile}'。")
        raw_config = data["communigate"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env(dotenv_path: Path | None = None) -> CliConfig:
    """从环境变量加载配置 (Docker/Cloud Friendly)。

    读取所有以 `CGP_` 开头的环境变量并映射到配置字段，
    例如: `CGP_LOGIN` -> `login`。
    若提供了 dotenv_path (或当前目录存在 .env)，会先将其载入环境变量，
    已存在的环境变量不会被覆盖。

    Returns:
        CliConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise ConfigError(f".env 文件未找到: {dotenv_path}")
        load_dotenv(dotenv_path=dotenv_path, override=False)
    else:
        found = find_dotenv(usecwd=True)
        if found:
            load_dotenv(dotenv_path=found, override=False)

    env_map = {
        "host": "HOST",
        "port": "PORT",
        "login": "LOGIN",
        "password": "PASSWORD",
        "timeout": "TIMEOUT",
    }

    raw_data = {}

    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"CGP_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 CGP_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
