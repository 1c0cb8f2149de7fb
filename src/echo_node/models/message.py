"""
Message model — envelope, body and payload variants.

Wire shape::

    {"src": "c1", "dest": "n1",
     "body": {"msg_id": 1, "in_reply_to": 0, "type": "echo", "echo": "hi"}}

Payload fields share the body object with ``msg_id`` / ``in_reply_to`` and
are selected by the ``type`` discriminator.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    StrictInt,
    StrictStr,
    model_serializer,
    model_validator,
)

BODY_ID_FIELDS = ("msg_id", "in_reply_to")
MessageId = Annotated[StrictInt, Field(ge=0)]


class Echo(BaseModel):
    """echo request"""
    model_config = ConfigDict(extra="forbid")

    type: Literal["echo"] = "echo"
    echo: StrictStr


class EchoOk(BaseModel):
    """echo_ok response"""
    model_config = ConfigDict(extra="forbid")

    type: Literal["echo_ok"] = "echo_ok"
    echo: StrictStr


class InitOk(BaseModel):
    """init_ok acknowledgment. Its message id is the body's msg_id."""
    model_config = ConfigDict(extra="forbid")

    type: Literal["init_ok"] = "init_ok"
    node_id: StrictInt
    node_ids: list[StrictInt]


Payload = Annotated[Union[Echo, EchoOk, InitOk], Field(discriminator="type")]


class Body(BaseModel):
    model_config = ConfigDict(validate_by_alias=True, validate_by_name=True)

    message_id: Optional[MessageId] = Field(default=None, alias="msg_id")
    in_reply_to: Optional[MessageId] = None
    payload: Payload

    @model_validator(mode="before")
    @classmethod
    def _split_payload(cls, data: Any) -> Any:
        # Flat wire form: everything that is not an id field belongs to the payload.
        # Only a payload that is already a model instance is taken as nested.
        if isinstance(data, dict) and not isinstance(data.get("payload"), BaseModel):
            ids = {k: v for k, v in data.items() if k in BODY_ID_FIELDS}
            ids["payload"] = {k: v for k, v in data.items() if k not in BODY_ID_FIELDS}
            return ids
        return data

    @model_validator(mode="after")
    def _check_init_ok_id(self) -> "Body":
        if isinstance(self.payload, InitOk) and self.message_id is None:
            raise ValueError("init_ok requires msg_id")
        return self

    @model_serializer(mode="wrap")
    def _flatten_payload(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        payload = data.pop("payload")
        return {**data, **payload}


class Message(BaseModel):
    model_config = ConfigDict(validate_by_alias=True, validate_by_name=True)

    source: StrictStr = Field(alias="src")
    destination: StrictStr = Field(alias="dest")
    body: Body

    @property
    def payload(self) -> Union[Echo, EchoOk, InitOk]:
        return self.body.payload
