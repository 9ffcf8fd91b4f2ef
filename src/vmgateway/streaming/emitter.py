"""Emits streamed operation results as newline-delimited JSON.

Each record becomes its own JSON document followed by ``\n``. The HTTP
layer sends every yielded chunk as a separate body message, so the
client receives each record without waiting for the next one. Records
are never collected into an array or wrapped in a response envelope.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Iterable, Sequence

from vmgateway.domain.models import StreamRecord
from vmgateway.errors import StreamEmitError

logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/json"

DEMO_RECORDS: tuple[StreamRecord, ...] = (
    StreamRecord(H=2, W=7),
    StreamRecord(H=4, W=7),
    StreamRecord(H=8, W=7),
)


def encode_record(record: StreamRecord) -> bytes:
    """Serialize one record as a newline-terminated JSON document.

    Raises:
        StreamEmitError: If the record cannot be serialized.
    """
    try:
        return record.model_dump_json().encode() + b"\n"
    except (ValueError, TypeError) as e:
        raise StreamEmitError(f"Failed to serialize record {record!r}: {e}") from e


class RecordEmitter:
    """Produces the record stream for a per-machine operation.

    By default every alias yields the fixed demonstration sequence; pass
    ``records`` to stream something else.
    """

    def __init__(self, records: Sequence[StreamRecord] | None = None) -> None:
        self._records = tuple(records) if records is not None else DEMO_RECORDS

    def records(self, alias: str) -> Iterable[StreamRecord]:
        """Return the ordered records for ``alias``."""
        return self._records

    async def stream(self, alias: str) -> AsyncIterator[bytes]:
        """Yield one encoded JSON document per record, in order.

        Records already yielded stay delivered if a later one fails. Only
        serialization failures raise :class:`StreamEmitError` here; a failed
        send to a disconnected client is raised by the HTTP server, which
        then cancels or closes this generator.
        """
        sent = 0
        try:
            for record in self.records(alias):
                chunk = encode_record(record)
                sent += 1
                yield chunk
        except (asyncio.CancelledError, GeneratorExit):
            logger.info("Stream for %s stopped after %d records", alias, sent)
            raise
        except StreamEmitError:
            logger.error("Stream for %s aborted after %d records", alias, sent)
            raise
        logger.debug("Stream for %s finished (%d records)", alias, sent)
