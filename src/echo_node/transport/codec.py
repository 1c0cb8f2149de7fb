"""
Message codec — wire dicts and JSON text to and from ``Message``.
"""

import json
from typing import Any

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from echo_node.errors import MalformedMessage, SerializationFailure
from echo_node.models.message import Message


def decode_message(raw: Any) -> Message:
    """Validate a decoded JSON value as a Message. Raises MalformedMessage.

    Only wire key names (``src``, ``dest``, ``msg_id``) are accepted.
    """
    try:
        return Message.model_validate(raw, by_alias=True, by_name=False)
    except ValidationError as e:
        raise MalformedMessage(
            f"Invalid message: {e.error_count()} validation error(s)",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def encode_message(message: Message) -> dict[str, Any]:
    """Serialize a Message to its flat wire dict. Absent fields are omitted."""
    try:
        return message.model_dump(mode="json", by_alias=True, exclude_none=True)
    except PydanticSerializationError as e:
        raise SerializationFailure(f"Could not encode message: {e}") from e


def parse_message(text: str) -> Message:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedMessage(f"Invalid JSON: {e}") from e
    return decode_message(raw)


def dump_message(message: Message) -> str:
    try:
        return json.dumps(encode_message(message))
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"Could not encode message: {e}") from e
