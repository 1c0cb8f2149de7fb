"""
Echo node error types.

Each error records the stage of message processing it came from
(decode, encode, read, write) in ``details["stage"]``.
"""

from typing import Any, Optional


class EchoNodeError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details

    @property
    def stage(self) -> Optional[str]:
        return (self.details or {}).get("stage")


class MalformedMessage(EchoNodeError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_message", message, {"stage": "decode", **(details or {})})


class SerializationFailure(EchoNodeError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("serialization_failure", message, {"stage": "encode", **(details or {})})


class ChannelFailure(EchoNodeError):
    def __init__(self, message: str, stage: str):
        super().__init__("channel_failure", message, {"stage": stage})
