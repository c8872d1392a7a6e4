# packetlink

A small TCP client and server pair that speak a simple binary protocol.
The client sends one text message and then a packet of several text
values. The server logs everything it receives.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Commands

Start the server first:

```
packetlink-server [--port PORT] [--log FILE]
```

- `--port`: the port to listen on. The default is 4444. The server listens
  on all IPv4 interfaces.
- `--log`: the log file. The default is `log.log`. Log records also go to
  standard output.

Then start the client:

```
packetlink-client [--config FILE] [--log FILE]
```

- `--config`: the settings file. The default is `cliente.config` in the
  current directory.
- `--log`: the log file. The default is `cliente.log`. Log records also go
  to standard output.

The settings file holds `KEY=VALUE` lines. Blank lines and lines that
start with `#` are ignored.

```
IP=127.0.0.1
PUERTO=4444
CLAVE=hello
```

- `IP` and `PUERTO` give the address of the server.
- `CLAVE` is the value that is logged and then sent to the server as a
  message.

If the log file cannot be created, or if the settings file cannot be read
or lacks one of these keys, the client prints an error and exits with
status 1.

Once it is running, the client does the following:

1. It reads lines from the console at a `> ` prompt and logs each one. An
   empty line, or end of input, ends this step.
2. It connects to the server and sends the `CLAVE` value as a message.
3. It reads more lines at the prompt and collects them into a packet. An
   empty line, or end of input, ends this step, and the packet is sent.

The server accepts a single client. For each message it logs the text.
For each packet it logs every value. If it gets an operation code it does
not know, it logs a warning and keeps reading. When the client
disconnects, or a frame arrives cut short or malformed, the server logs an
error and exits with status 1.

## Wire format

Every frame starts with two little-endian signed 32-bit integers. The
payload follows them.

| field     | size         | meaning                                          |
|-----------|--------------|--------------------------------------------------|
| operation | 4 bytes      | `OpCode.MESSAGE` (0) or `OpCode.PACKET` (1)      |
| size      | 4 bytes      | length of the payload in bytes                   |
| payload   | `size` bytes | the data                                         |

- For a message, the payload is the UTF-8 text followed by a NUL byte.
- For a packet, the payload holds one entry per value. Each entry is a
  4-byte length, followed by that many bytes. For text, those bytes are
  the UTF-8 text followed by a NUL byte.

## Library use

The protocol pieces live in `packetlink.protocol`:

- `OpCode`: the operation codes, `MESSAGE` and `PACKET`.
- `Packet`: a frame under construction. `Packet.add` appends a value,
  which may be `str` or `bytes`. Text gets a NUL terminator. Bytes are sent
  as given. `Packet.serialize` returns the complete frame.
- `encode_message(message)`: returns the frame for a single text message.
- `decode_values(payload)`: splits a packet payload into its text values.
  It raises `ProtocolError` on a bad length.
- `recv_exact(sock, size)`: reads exactly `size` bytes. It raises
  `ProtocolError` if the connection closes first.
- `receive_operation(sock)`: reads the next operation code. Once the peer
  is gone, it closes the socket and returns `None`.
- `receive_buffer(sock)`: reads a size-prefixed payload.
- `ProtocolError`: raised when a frame is malformed or cut short.

```python
from packetlink.protocol import Packet, decode_values

packet = Packet()
packet.add("first")
packet.add("second")
frame = packet.serialize()
assert decode_values(frame[8:]) == ["first", "second"]
```

`packetlink.client` provides the following:

- `load_config`
- `start_logger`
- `create_connection`
- `send_message`
- `send_packet`
- `read_console`
- `build_packet`

`read_console` and `build_packet` take a callable that returns one line
per call. An empty string or `None` ends the input.

`packetlink.server` provides the following:

- `start_server`
- `wait_for_client`
- `receive_message`
- `receive_packet`
- `serve`

`serve(client_sock, logger)` logs frames until the client goes away and
then returns 1.

## Limits

The server handles one client connection and then exits. It sends nothing
back to the client. There is no reply, acknowledgement or persistent
storage of what it receives, apart from the log file.