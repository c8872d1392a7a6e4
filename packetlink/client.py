"""Client: read settings and console lines, then send them to the server."""

from __future__ import annotations

import argparse
import logging
import socket
import sys
from collections.abc import Callable
from pathlib import Path

from packetlink.protocol import Packet, encode_message

LineReader = Callable[[], "str | None"]


def load_config(path: str | Path) -> dict[str, str]:
    """Parse a ``KEY=VALUE`` file; blank lines and ``#`` comments are ignored."""
    config: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            config[key.strip()] = value.strip()
    return config


def start_logger(path: str | Path) -> logging.Logger:
    """Return the client logger, writing to ``path`` and to the console."""
    logger = logging.getLogger("CL_LOG")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.INFO)
    formatter = logging.Formatter("[%(levelname)s] %(asctime)s %(name)s - %(message)s")
    for handler in (logging.FileHandler(path, encoding="utf-8"), logging.StreamHandler(sys.stdout)):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def create_connection(host: str, port: str | int) -> socket.socket:
    """Open an IPv4 TCP connection to ``host:port``."""
    family, socktype, proto, _, address = socket.getaddrinfo(
        host, int(port), socket.AF_INET, socket.SOCK_STREAM
    )[0]
    sock = socket.socket(family, socktype, proto)
    try:
        sock.connect(address)
    except OSError:
        sock.close()
        raise
    return sock


def send_message(sock: socket.socket, message: str) -> None:
    """Send one text message frame."""
    sock.sendall(encode_message(message))


def send_packet(sock: socket.socket, packet: Packet) -> None:
    """Send a packet frame."""
    sock.sendall(packet.serialize())


def _lines(read_line: LineReader):
    """Yield lines from ``read_line`` up to and excluding the first empty one."""
    while True:
        line = read_line()
        if not line:
            return
        yield line


def read_console(logger: logging.Logger, read_line: LineReader) -> list[str]:
    """Log every line read until an empty one, which is logged too; return the others."""
    lines = []
    while True:
        line = read_line()
        logger.info(">> %s", line if line is not None else "")
        if not line:
            return lines
        lines.append(line)


def build_packet(read_line: LineReader) -> Packet:
    """Collect lines into a packet until an empty one is read."""
    packet = Packet()
    for line in _lines(read_line):
        packet.add(line)
    return packet


def _prompt() -> str | None:
    try:
        return input("> ")
    except EOFError:
        return None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send console input to the packet server.")
    parser.add_argument("--config", default="cliente.config", help="settings file")
    parser.add_argument("--log", default="cliente.log", help="log file")
    args = parser.parse_args(argv)

    try:
        logger = start_logger(args.log)
    except OSError as exc:
        print(f"Could not create the log file: {exc}", file=sys.stderr)
        return 1
    logger.info("Hello, I am a log")

    try:
        config = load_config(args.config)
        host, port, key = config["IP"], config["PUERTO"], config["CLAVE"]
    except OSError as exc:
        print(f"Could not read the configuration file: {exc}", file=sys.stderr)
        return 1
    except KeyError as exc:
        print(f"Missing configuration key: {exc.args[0]}", file=sys.stderr)
        return 1
    logger.info("Value read from config: %s", key)

    read_console(logger, _prompt)

    with create_connection(host, port) as conn:
        send_message(conn, key)
        send_packet(conn, build_packet(_prompt))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())