"""Tests for the streaming record emitter."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from vmgateway.domain.models import StreamRecord
from vmgateway.errors import ErrorKind, StreamEmitError
from vmgateway.streaming.emitter import DEMO_RECORDS, RecordEmitter, encode_record


async def _collect(emitter: RecordEmitter, alias: str) -> list[bytes]:
    return [chunk async for chunk in emitter.stream(alias)]


class TestEncodeRecord:
    def test_single_newline_terminated_document(self) -> None:
        assert encode_record(StreamRecord(H=2, W=7)) == b'{"H":2,"W":7}\n'

    def test_serialization_error_wrapped(self) -> None:
        record = StreamRecord(H=1, W=1)
        with patch.object(StreamRecord, "model_dump_json", side_effect=ValueError("bad")):
            with pytest.raises(StreamEmitError) as exc_info:
                encode_record(record)
        assert exc_info.value.kind is ErrorKind.IO


class TestRecordEmitter:
    @pytest.mark.asyncio
    async def test_demo_stream_in_order(self) -> None:
        chunks = await _collect(RecordEmitter(), "web1")
        assert len(chunks) == 3
        docs = [json.loads(chunk) for chunk in chunks]
        assert docs == [{"H": 2, "W": 7}, {"H": 4, "W": 7}, {"H": 8, "W": 7}]

    @pytest.mark.asyncio
    async def test_one_document_per_chunk(self) -> None:
        for chunk in await _collect(RecordEmitter(), "web1"):
            assert chunk.endswith(b"\n")
            assert chunk.count(b"\n") == 1

    @pytest.mark.asyncio
    async def test_custom_records(self) -> None:
        emitter = RecordEmitter(records=[StreamRecord(H=1, W=1)])
        assert await _collect(emitter, "db1") == [b'{"H":1,"W":1}\n']

    @pytest.mark.asyncio
    async def test_empty_stream(self) -> None:
        assert await _collect(RecordEmitter(records=[]), "db1") == []

    @pytest.mark.asyncio
    async def test_failure_keeps_already_sent_records(self) -> None:
        emitter = RecordEmitter()
        received: list[bytes] = []
        side_effect = [b'{"H":2,"W":7}\n', StreamEmitError("encode failed")]
        with patch("vmgateway.streaming.emitter.encode_record", side_effect=side_effect):
            with pytest.raises(StreamEmitError):
                async for chunk in emitter.stream("web1"):
                    received.append(chunk)
        assert received == [b'{"H":2,"W":7}\n']

    @pytest.mark.asyncio
    async def test_closing_early_stops_stream(self) -> None:
        stream = RecordEmitter().stream("web1")
        assert await stream.__anext__() == b'{"H":2,"W":7}\n'
        await stream.aclose()
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    def test_default_records_are_demo(self) -> None:
        assert tuple(RecordEmitter().records("any")) == DEMO_RECORDS
