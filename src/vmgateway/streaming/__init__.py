"""Streaming Record Emitter module for vmgateway.

Produces an ordered sequence of records for a named operation and
encodes each one as an independent JSON document.
"""

from vmgateway.streaming.emitter import DEMO_RECORDS, RecordEmitter, encode_record

__all__ = ["DEMO_RECORDS", "RecordEmitter", "encode_record"]
