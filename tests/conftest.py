# tests/conftest.py
import socket
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from communigate_core.config import CliConfig

# 欢迎语 + USER / PASS / INLINE 三次握手的应答
HANDSHAKE = [
    b"200 mail.example.com CommuniGate Pro CLI is ready\r\n",
    b"300 Please send the password\r\n",
    b"200 OK\r\n",
    b"200 OK\r\n",
]


class FakeReader:
    """模拟 socket.makefile("rb")：按顺序吐出预设的行。

    预设项可以是 bytes，也可以是要抛出的异常。读完后返回 b"" (EOF)。
    """

    def __init__(self, lines):
        self.lines = list(lines)
        self.reads = 0
        self.closed = False

    def readline(self):
        self.reads += 1
        if not self.lines:
            return b""
        item = self.lines.pop(0)
        if isinstance(item, BaseException) or (
            isinstance(item, type) and issubclass(item, BaseException)
        ):
            raise item
        return item

    def close(self):
        self.closed = True


class FakeSocket:
    """记录发送内容的假 Socket。"""

    def __init__(self, lines):
        self.reader = FakeReader(lines)
        self.sent: list[str] = []
        self.closed = False
        self.send_error: Exception | None = None

    def makefile(self, mode):
        return self.reader

    def sendall(self, data: bytes):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data.decode("utf-8"))

    def close(self):
        self.closed = True

    @property
    def sent_lines(self) -> list[str]:
        return [line.rstrip("\n") for line in self.sent]


@pytest.fixture
def valid_config():
    """[Fixture] 返回一个有效的 CliConfig 对象。"""
    return CliConfig(
        login="postmaster",
        password="secret",
        host="mail.example.com",
        port=106,
        timeout=5.0,
    )


@pytest.fixture
def fake_server(monkeypatch):
    """[Fixture] 替换 socket.create_connection，返回一个安装假 Socket 的工厂函数。

    用法: sock = fake_server(b"201 OK\\r\\n", ...)
    """
    def _install(*lines, handshake=True):
        sock = FakeSocket((HANDSHAKE if handshake else []) + list(lines))

        def _create_connection(address, timeout=None):
            sock.address = address
            sock.timeout = timeout
            return sock

        monkeypatch.setattr(socket, "create_connection", _create_connection)
        return sock

    return _install
