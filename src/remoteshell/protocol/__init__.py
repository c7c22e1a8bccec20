"""Line-oriented wire protocol shared by the remoteshell server and client.

Public API:
    LineAssembler -- Reassembles newline-terminated lines from a byte stream
    send_all -- Writes a whole buffer, retrying short and interrupted writes
    ProtocolError -- Base error type
    ConnectionClosedError -- The peer is gone
"""

from remoteshell.protocol.framing import (
    ConnectionClosedError,
    LineAssembler,
    ProtocolError,
    send_all,
    trim_command,
)

__all__ = [
    "ConnectionClosedError",
    "LineAssembler",
    "ProtocolError",
    "send_all",
    "trim_command",
]
