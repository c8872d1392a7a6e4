"""Server: accept one client and log every frame it sends."""

from __future__ import annotations

import argparse
import logging
import socket
import sys

from packetlink.protocol import (
    OpCode,
    ProtocolError,
    decode_values,
    receive_buffer,
    receive_operation,
)

PORT = 4444


def start_server(host: str = "", port: int | str = PORT) -> socket.socket:
    """Return an IPv4 TCP socket listening on ``host:port``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, int(port)))
        sock.listen(socket.SOMAXCONN)
    except OSError:
        sock.close()
        raise
    return sock


def wait_for_client(server_sock: socket.socket, logger: logging.Logger) -> socket.socket:
    """Accept one client connection."""
    client, _ = server_sock.accept()
    logger.info("A client connected!")
    return client


def receive_message(sock: socket.socket) -> str:
    """Read the body of a message frame and return its text."""
    raw = receive_buffer(sock)
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def receive_packet(sock: socket.socket) -> list[str]:
    """Read the body of a packet frame and return its values."""
    return decode_values(receive_buffer(sock))


def serve(client_sock: socket.socket, logger: logging.Logger) -> int:
    """Log frames from the client until it disconnects; return the exit status."""
    while True:
        code = receive_operation(client_sock)
        try:
            if code is None:
                break
            if code == OpCode.MESSAGE:
                logger.info("Received message %s", receive_message(client_sock))
            elif code == OpCode.PACKET:
                values = receive_packet(client_sock)
                logger.info("Received the following values:")
                for value in values:
                    logger.info("%s", value)
            else:
                logger.warning("Unknown operation %d", code)
        except (ProtocolError, ConnectionError):
            client_sock.close()
            break
    logger.error("The client disconnected. Shutting down server")
    return 1


def _make_logger(path: str) -> logging.Logger:
    logger = logging.getLogger("Servidor")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter("[%(levelname)s] %(asctime)s %(name)s - %(message)s")
    for handler in (logging.FileHandler(path, encoding="utf-8"), logging.StreamHandler(sys.stdout)):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Receive and log frames from one client.")
    parser.add_argument("--port", type=int, default=PORT, help="port to listen on")
    parser.add_argument("--log", default="log.log", help="log file")
    args = parser.parse_args(argv)

    logger = _make_logger(args.log)
    with start_server("", args.port) as server_sock:
        logger.debug("Ready to listen for my client")
        logger.info("Server ready to receive the client")
        client = wait_for_client(server_sock, logger)
        with client:
            return serve(client, logger)


if __name__ == "__main__":
    raise SystemExit(main())