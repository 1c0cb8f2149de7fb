"""
echo-node — a single node of a JSON message-passing test harness.

Reads protocol messages from stdin and answers every ``echo`` request
with a correlated ``echo_ok`` reply on stdout.
"""

from echo_node.errors import EchoNodeError, MalformedMessage, SerializationFailure, ChannelFailure
from echo_node.models.message import Body, Echo, EchoOk, InitOk, Message
from echo_node.node import EchoNode
from echo_node.runner import run
from echo_node.transport.codec import decode_message, encode_message, parse_message, dump_message

__version__ = "0.1.0"
__all__ = [
    "EchoNode",
    "run",
    "Message",
    "Body",
    "Echo",
    "EchoOk",
    "InitOk",
    "decode_message",
    "encode_message",
    "parse_message",
    "dump_message",
    "EchoNodeError",
    "MalformedMessage",
    "SerializationFailure",
    "ChannelFailure",
]
