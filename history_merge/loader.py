"""Reads a whole history log into a timestamp-sorted snapshot."""

from __future__ import annotations

import logging
from typing import BinaryIO

from history_merge.errors import LogIOError, RecordError
from history_merge.parser import read_record
from history_merge.record import Record, timestamp_key

logger = logging.getLogger(__name__)


def read_snapshot(stream: BinaryIO, source: str = "<stream>") -> tuple[Record, ...]:
    """Parse every record in *stream* and return them sorted by timestamp.

    The sort is stable, so records sharing a timestamp keep their order from
    the stream. Clients sometimes write status records with a stale
    timestamp, which is why the input is not trusted to be sorted already.

    Raises:
        RecordError: (subclass preserved) for the first bad record, with
            *source* and the 1-based record index in the message. Nothing is
            returned for a log that fails part-way.
    """
    records = []
    while True:
        try:
            record = read_record(stream)
        except RecordError as e:
            raise type(e)(f"record {len(records) + 1}: {e}", path=source) from e
        if record is None:
            break
        records.append(record)

    ordered = sorted(records, key=timestamp_key)
    moved = sum(1 for before, after in zip(records, ordered) if before is not after)
    if moved:
        logger.debug("%s: %d of %d record(s) were out of timestamp order",
                     source, moved, len(records))
    return tuple(ordered)


def load_snapshot(path: str) -> tuple[Record, ...]:
    """Open *path* and load it with :func:`read_snapshot`.

    Raises:
        LogIOError: the file cannot be opened or read.
        RecordError: the file holds a malformed or truncated record.
    """
    try:
        with open(path, "rb") as f:
            snapshot = read_snapshot(f, source=path)
    except OSError as e:
        raise LogIOError(e.strerror or str(e), path=path) from e
    logger.debug("Loaded %d record(s) from %s", len(snapshot), path)
    return snapshot
