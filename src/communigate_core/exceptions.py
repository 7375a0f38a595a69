# File: src/communigate_core/exceptions.py
"""
CommuniGate CLI 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CRUD 封装、运维脚本）能进行精细的错误处理。
"""

from enum import IntEnum


class CommunigateError(Exception):
    """CommuniGate CLI 核心库所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 communigate-core 抛出的已知错误。
    """

    pass


class ConfigError(CommunigateError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 login/password)。
    2. 字段格式错误 (如端口不是整数)。
    3. 找不到配置文件或环境变量。
    """

    pass


class NetworkError(CommunigateError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. Socket 无法连接 (主机不可达、端口拒绝)。
    2. 读取应答超时。
    3. 发送过程中连接中断。

    注意: 发生此类错误后会话已不可用，需要重新连接。
    """

    pass


class ProtocolError(CommunigateError):
    """协议交互错误 (逻辑级别)。

    触发场景:
    1. 应答行不符合 `<3位状态码><空格><内容>` 格式。
    2. 连续两次读到流结束 (EOF)。
    3. 应答行在换行符之前被截断。
    """

    pass


class StateError(CommunigateError):
    """会话状态错误。

    触发场景:
    1. 会话从未获得过连接配置，却被要求执行命令。
    """

    pass


class ValidationError(CommunigateError):
    """本地输入校验失败，命令尚未发送。

    例如账户名包含不允许的字符。
    """

    pass


class ServerErrorCode(IntEnum):
    """CLI 常见的失败状态码。

    服务器可能返回任意不在成功白名单中的状态码，这里只列出调用方常需区分的部分。
    """

    UNKNOWN_COMMAND = 500
    UNKNOWN_DOMAIN = 512
    UNKNOWN_ACCOUNT = 513
    BAD_PASSWORD = 515
    ALREADY_EXISTS = 520

    @property
    def description(self) -> str:
        """获取状态码对应的可读描述。"""
        _DESC_MAP = {
            500: "未知命令",
            512: "未知的二级域名",
            513: "未知的用户账户",
            515: "密码错误",
            520: "账户名已存在",
        }
        return _DESC_MAP.get(self.value, f"未知 CLI 错误 (Code: {self.value})")


class ServerError(CommunigateError):
    """服务器以非成功状态码拒绝了命令。

    `code` 与 `message` 原样保留服务器应答，调用方可以据此区分
    "账户已存在"、"未知账户"、"密码错误" 等情况。
    """

    def __init__(self, code: int, message: str) -> None:
        """初始化服务器错误。

        Args:
            code: 应答行中的 3 位状态码。
            message: 状态码之后的原始文本。
        """
        self.code = code
        self.message = message
        self.code_enum: ServerErrorCode | None = None

        try:
            self.code_enum = ServerErrorCode(code)
        except ValueError:
            pass

        super().__init__(f"CLI 错误 {code} - {message}")
