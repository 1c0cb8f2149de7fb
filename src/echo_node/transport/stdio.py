"""
Stream transport — JSON values in, one JSON object per line out.

Input values may be separated by any whitespace, and a value may span
several lines. Output is written with a single ``write`` per message and
flushed, so a reply is never partially written.
"""

import json
import logging
from typing import Any, Iterator, TextIO

from echo_node.errors import ChannelFailure, MalformedMessage
from echo_node.models.message import Message
from echo_node.transport.codec import dump_message

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def _incomplete(buffer: str, err: json.JSONDecodeError) -> bool:
    """True when the decode error is caused by running out of input."""
    return err.pos >= len(buffer.rstrip()) or err.msg.startswith("Unterminated string")


def iter_json_values(stream: TextIO) -> Iterator[Any]:
    """Yield JSON values from a text stream in order until end of stream."""
    buffer = ""
    while True:
        try:
            line = stream.readline()
        except (OSError, ValueError) as e:
            raise ChannelFailure(f"Read from input failed: {e}", stage="read") from e
        buffer += line
        while True:
            buffer = buffer.lstrip()
            if not buffer:
                break
            try:
                value, end = _decoder.raw_decode(buffer)
            except json.JSONDecodeError as e:
                if line and _incomplete(buffer, e):
                    break
                raise MalformedMessage(f"Invalid JSON: {e}", details={"input": buffer[:200]}) from e
            buffer = buffer[end:]
            yield value
        if not line:
            return


def write_message(stream: TextIO, message: Message) -> None:
    text = dump_message(message) + "\n"
    try:
        stream.write(text)
        stream.flush()
    except (OSError, ValueError) as e:
        raise ChannelFailure(f"Write to output failed: {e}", stage="write") from e
    logger.debug("Sent %s", text.rstrip())
