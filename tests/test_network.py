# tests/test_network.py
import socket

import pytest

from communigate_core.exceptions import NetworkError, ProtocolError
from communigate_core.network import Direction, LineTransport
from communigate_core.protocol import commands
from communigate_core.protocol.commands import Command


def _open(valid_config, fake_server, *lines, observers=None):
    sock = fake_server(*lines, handshake=False)
    transport = LineTransport(valid_config, observers)
    transport.open()
    return transport, sock


def test_open_uses_config_address(valid_config, fake_server):
    transport, sock = _open(valid_config, fake_server)

    assert transport.is_open
    assert sock.address == ("mail.example.com", 106)
    assert sock.timeout == 5.0


def test_open_failure_raises_network_error(valid_config, monkeypatch):
    def _refuse(address, timeout=None):
        raise ConnectionRefusedError("Connection refused")

    monkeypatch.setattr(socket, "create_connection", _refuse)
    transport = LineTransport(valid_config)

    with pytest.raises(NetworkError, match="无法连接"):
        transport.open()
    assert not transport.is_open


def test_send_writes_one_line_and_reads_one_reply(valid_config, fake_server):
    transport, sock = _open(valid_config, fake_server, b"201 (a,b)\r\n", b"201 extra\r\n")

    raw = transport.send(Command("ListDomains"))

    assert raw.line == "201 (a,b)"
    assert sock.sent == ["ListDomains\n"]
    assert sock.reader.reads == 1


def test_single_eof_is_tolerated(valid_config, fake_server):
    """一次伪 EOF 之后的有效行应被正常返回"""
    transport, sock = _open(valid_config, fake_server, b"", b"200 OK\r\n")

    raw = transport.send(Command("ListDomains"))

    assert raw.line == "200 OK"
    assert sock.reader.reads == 2
    assert transport.is_open


def test_double_eof_raises_without_third_read(valid_config, fake_server):
    transport, sock = _open(valid_config, fake_server, b"", b"", b"200 OK\r\n")

    with pytest.raises(ProtocolError, match="提前终止"):
        transport.send(Command("ListDomains"))

    assert sock.reader.reads == 2
    assert not transport.is_open
    assert sock.closed


def test_truncated_line_raises_protocol_error(valid_config, fake_server):
    transport, _ = _open(valid_config, fake_server, b"201 (a,b")

    with pytest.raises(ProtocolError, match="截断"):
        transport.send(Command("ListDomains"))
    assert not transport.is_open


def test_receive_timeout_closes_transport(valid_config, fake_server):
    transport, _ = _open(valid_config, fake_server, socket.timeout("timed out"))

    with pytest.raises(NetworkError, match="超时"):
        transport.send(Command("ListDomains"))
    assert not transport.is_open


def test_send_failure_raises_network_error(valid_config, fake_server):
    transport, sock = _open(valid_config, fake_server)
    sock.send_error = BrokenPipeError("Broken pipe")

    with pytest.raises(NetworkError, match="发送失败"):
        transport.send(Command("ListDomains"))
    assert not transport.is_open


def test_send_before_open_raises(valid_config):
    transport = LineTransport(valid_config)

    with pytest.raises(NetworkError, match="未打开"):
        transport.send(Command("ListDomains"))


def test_observers_receive_masked_events(valid_config, fake_server):
    events = []
    transport, _ = _open(
        valid_config,
        fake_server,
        b"200 OK\r\n",
        observers=[lambda direction, text: events.append((direction, text))],
    )

    transport.send(commands.password("secret"))

    assert events == [(Direction.SEND, "PASS ******"), (Direction.RECEIVE, "200 OK")]


def test_failing_observer_does_not_change_behavior(valid_config, fake_server):
    def _broken(direction, text):
        raise RuntimeError("observer bug")

    transport, _ = _open(valid_config, fake_server, b"201 x\r\n", observers=[_broken])

    assert transport.send(Command("GetCurrentController")).line == "201 x"


def test_close_is_idempotent(valid_config, fake_server):
    transport, sock = _open(valid_config, fake_server)

    transport.close()
    transport.close()

    assert sock.closed
    assert sock.reader.closed
    assert not transport.is_open
