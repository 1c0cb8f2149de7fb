"""Run loop and stream transport tests."""

import io
import json

import pytest
from pydantic_core import PydanticSerializationError

from echo_node import ChannelFailure, EchoNode, MalformedMessage, SerializationFailure, run
from echo_node.models.message import Message
from echo_node.transport.stdio import iter_json_values, write_message


def lines(*messages):
    return io.StringIO("".join(json.dumps(m) + "\n" for m in messages))


def echo(msg_id, text):
    return {"src": "c1", "dest": "n1", "body": {"msg_id": msg_id, "type": "echo", "echo": text}}


def read_output(out):
    return [json.loads(line) for line in out.getvalue().splitlines()]


class TestRun:
    def test_replies_in_order(self):
        node, out = EchoNode("n1"), io.StringIO()
        count = run(node, lines(echo(1, "hello"), echo(2, "again")), out)
        assert count == 2
        assert read_output(out) == [
            {"src": "n1", "dest": "c1", "body": {"msg_id": 0, "in_reply_to": 1, "type": "echo_ok", "echo": "hello"}},
            {"src": "n1", "dest": "c1", "body": {"msg_id": 1, "in_reply_to": 2, "type": "echo_ok", "echo": "again"}},
        ]
        assert node.next_id == 2

    def test_acknowledgments_write_nothing(self):
        node, out = EchoNode("n1"), io.StringIO()
        ack = {"src": "c1", "dest": "n1", "body": {"type": "echo_ok", "echo": "hello"}}
        assert run(node, lines(ack, echo(5, "x")), out) == 2
        assert [m["body"]["msg_id"] for m in read_output(out)] == [1]

    def test_empty_input(self):
        out = io.StringIO()
        assert run(EchoNode(), io.StringIO(""), out) == 0
        assert out.getvalue() == ""

    def test_malformed_message_stops_run(self):
        node, out = EchoNode("n1"), io.StringIO()
        bad = {"src": "c1", "dest": "n1", "body": {"msg_id": 2, "type": "shout", "echo": "x"}}
        with pytest.raises(MalformedMessage):
            run(node, lines(echo(1, "hello"), bad, echo(3, "never")), out)
        assert len(read_output(out)) == 1
        assert node.next_id == 1

    def test_invalid_json_stops_run(self):
        out = io.StringIO()
        with pytest.raises(MalformedMessage) as exc:
            run(EchoNode(), io.StringIO("not json\n"), out)
        assert exc.value.stage == "decode"

    def test_closed_output_is_channel_failure(self):
        out = io.StringIO()
        out.close()
        with pytest.raises(ChannelFailure):
            run(EchoNode(), lines(echo(1, "hello")), out)


    def test_lone_surrogate_reply_on_utf8_output(self):
        out = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
        raw = '{"src": "c1", "dest": "n1", "body": {"msg_id": 1, "type": "echo", "echo": "\\ud800"}}\n'
        assert run(EchoNode("n1"), io.StringIO(raw), out) == 1
        out.flush()
        reply = json.loads(out.buffer.getvalue().decode("utf-8"))
        assert reply["body"]["echo"] == "\ud800"

    def test_encode_failure_writes_nothing(self, monkeypatch):
        def fail(*args, **kwargs):
            raise PydanticSerializationError("cannot serialize")

        monkeypatch.setattr(Message, "model_dump", fail)
        node, out = EchoNode("n1"), io.StringIO()
        with pytest.raises(SerializationFailure) as exc:
            run(node, lines(echo(1, "hello")), out)
        assert exc.value.stage == "encode"
        assert out.getvalue() == ""


class BrokenStream(io.StringIO):
    def write(self, s):
        raise BrokenPipeError("pipe closed")

    def readline(self, size=-1):
        raise OSError("read failed")


class TestStreams:
    def test_values_separated_by_whitespace(self):
        stream = io.StringIO('{"a": 1} {"b": 2}\n\n  [3]\n')
        assert list(iter_json_values(stream)) == [{"a": 1}, {"b": 2}, [3]]

    def test_value_spanning_lines(self):
        stream = io.StringIO('{"src": "c1",\n "dest": "n1",\n "body": {"type": "echo",\n "echo": "a\\nb"}}\n')
        assert list(iter_json_values(stream)) == [
            {"src": "c1", "dest": "n1", "body": {"type": "echo", "echo": "a\nb"}}
        ]

    def test_last_value_without_newline(self):
        assert list(iter_json_values(io.StringIO('{"a": 1}'))) == [{"a": 1}]

    def test_truncated_value_at_end_of_stream(self):
        with pytest.raises(MalformedMessage):
            list(iter_json_values(io.StringIO('{"a": 1,')))

    def test_read_failure(self):
        with pytest.raises(ChannelFailure) as exc:
            list(iter_json_values(BrokenStream()))
        assert exc.value.stage == "read"

    def test_write_failure(self):
        from echo_node import Body, EchoOk, Message
        msg = Message(source="n1", destination="c1", body=Body(payload=EchoOk(echo="x")))
        with pytest.raises(ChannelFailure) as exc:
            write_message(BrokenStream(), msg)
        assert exc.value.stage == "write"
