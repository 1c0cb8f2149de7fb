"""
Echo node — per-node id counter and the message transition rule.
"""

import logging
from typing import Optional

from echo_node.models.message import Body, Echo, EchoOk, InitOk, Message

logger = logging.getLogger(__name__)

DEFAULT_NODE_ID = "n0"


class EchoNode:
    """A single protocol node.

    ``step`` performs no I/O: it maps one inbound message to at most one
    reply and advances ``next_id`` by exactly one. Every instance owns its
    own counter.
    """

    def __init__(self, node_id: str = DEFAULT_NODE_ID, next_id: int = 0):
        if next_id < 0:
            raise ValueError("next_id must be non-negative")
        self.node_id = node_id
        self._next_id = next_id

    @property
    def next_id(self) -> int:
        return self._next_id

    def step(self, message: Message) -> Optional[Message]:
        payload = message.body.payload
        if message.destination != self.node_id:
            logger.debug("Message for %s handled by %s", message.destination, self.node_id)
        reply: Optional[Message] = None

        if isinstance(payload, Echo):
            reply = Message(
                source=message.destination,
                destination=message.source,
                body=Body(
                    message_id=self._next_id,
                    in_reply_to=message.body.message_id,
                    payload=EchoOk(echo=payload.echo),
                ),
            )
        elif isinstance(payload, (EchoOk, InitOk)):
            logger.debug("No reply for %s from %s", payload.type, message.source)
        else:
            raise TypeError(f"Unhandled payload type: {type(payload).__name__}")

        self._next_id += 1
        return reply

    def __repr__(self) -> str:
        return f"EchoNode(node_id={self.node_id!r}, next_id={self._next_id})"
