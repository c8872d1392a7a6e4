import logging
import socket

import pytest

from packetlink.client import (
    build_packet,
    create_connection,
    load_config,
    main,
    read_console,
    send_message,
    send_packet,
    start_logger,
)
from packetlink.protocol import OpCode, Packet, decode_values, receive_buffer, receive_operation


def reader(lines):
    it = iter(lines)
    return lambda: next(it, None)


@pytest.fixture
def listener():
    server = socket.create_server(("127.0.0.1", 0))
    yield server
    server.close()


def test_load_config(tmp_path):
    path = tmp_path / "cliente.config"
    path.write_text("# comment\nIP=127.0.0.1\n\nPUERTO=4444\nCLAVE=a=b\n")
    assert load_config(path) == {"IP": "127.0.0.1", "PUERTO": "4444", "CLAVE": "a=b"}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.config")


def test_start_logger_writes_file(tmp_path):
    path = tmp_path / "cliente.log"
    logger = start_logger(path)
    logger.info("first entry")
    for handler in logger.handlers:
        handler.flush()
    assert "first entry" in path.read_text()
    assert logger.level == logging.INFO


def test_read_console_logs_until_empty(caplog):
    logger = logging.getLogger("test_read_console")
    caplog.set_level(logging.INFO, logger="test_read_console")
    result = read_console(logger, reader(["one", "two", "", "never"]))
    assert result == ["one", "two"]
    assert caplog.messages == [">> one", ">> two", ">> "]


def test_read_console_stops_at_eof(caplog):
    logger = logging.getLogger("test_read_console_eof")
    caplog.set_level(logging.INFO, logger="test_read_console_eof")
    assert read_console(logger, reader(["only"])) == ["only"]
    assert caplog.messages[0] == ">> only"


def test_build_packet_collects_lines():
    packet = build_packet(reader(["x", "y", "", "z"]))
    assert packet.op_code == OpCode.PACKET
    assert decode_values(bytes(packet.payload)) == ["x", "y"]


def test_build_packet_empty():
    assert build_packet(reader([""])).payload == bytearray()


def test_send_message_and_packet(listener):
    port = listener.getsockname()[1]
    conn = create_connection("127.0.0.1", str(port))
    accepted, _ = listener.accept()
    with conn, accepted:
        send_message(conn, "clave")
        packet = Packet()
        packet.add("a")
        packet.add("b")
        send_packet(conn, packet)
        assert receive_operation(accepted) == OpCode.MESSAGE
        assert receive_buffer(accepted) == b"clave\0"
        assert receive_operation(accepted) == OpCode.PACKET
        assert decode_values(receive_buffer(accepted)) == ["a", "b"]


def test_create_connection_refused(listener):
    port = listener.getsockname()[1]
    listener.close()
    with pytest.raises(OSError):
        create_connection("127.0.0.1", port)


def test_main_sends_key_and_packet(tmp_path, listener, monkeypatch):
    port = listener.getsockname()[1]
    config = tmp_path / "cliente.config"
    config.write_text(f"IP=127.0.0.1\nPUERTO={port}\nCLAVE=hello\n")
    inputs = iter(["console", "", "p1", "p2", ""])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))

    code = main(["--config", str(config), "--log", str(tmp_path / "c.log")])
    assert code == 0

    accepted, _ = listener.accept()
    with accepted:
        assert receive_operation(accepted) == OpCode.MESSAGE
        assert receive_buffer(accepted) == b"hello\0"
        assert receive_operation(accepted) == OpCode.PACKET
        assert decode_values(receive_buffer(accepted)) == ["p1", "p2"]
    assert ">> console" in (tmp_path / "c.log").read_text()


def test_main_missing_key(tmp_path):
    config = tmp_path / "cliente.config"
    config.write_text("IP=127.0.0.1\n")
    assert main(["--config", str(config), "--log", str(tmp_path / "c.log")]) == 1