"""
Run loop — read a message, step the node, write the reply, repeat.
"""

import logging
from typing import TextIO

from echo_node.node import EchoNode
from echo_node.transport.codec import decode_message
from echo_node.transport.stdio import iter_json_values, write_message

logger = logging.getLogger(__name__)


def run(node: EchoNode, input_stream: TextIO, output_stream: TextIO) -> int:
    """Process messages until end of input. Returns the number processed.

    The first decode, encode or channel error propagates and ends the run.
    """
    processed = 0
    for raw in iter_json_values(input_stream):
        message = decode_message(raw)
        logger.debug("Received %s from %s", message.body.payload.type, message.source)
        reply = node.step(message)
        if reply is not None:
            write_message(output_stream, reply)
        processed += 1
    logger.info("Input exhausted after %d message(s)", processed)
    return processed
