"""Record parser — decodes history records from a binary stream."""

from __future__ import annotations

from typing import BinaryIO, Iterator

from history_merge.errors import MalformedRecordError, TruncatedRecordError
from history_merge.record import (
    COUNT_PATTERN,
    COUNT_WIDTH,
    HEADER_WIDTH,
    KIND_PATTERN,
    KIND_WIDTH,
    SEPARATOR,
    TIMESTAMP_PATTERN,
    TIMESTAMP_WIDTH,
    Record,
)

# Offsets inside the header remainder that follows the kind token.
_TS_START = 1
_TS_END = _TS_START + TIMESTAMP_WIDTH
_COUNT_START = _TS_END + 1
_COUNT_END = _COUNT_START + COUNT_WIDTH
_SEPARATOR_OFFSETS = (0, _TS_END, _COUNT_END)


def read_record(stream: BinaryIO) -> Record | None:
    """Read the next record from *stream*.

    Returns None at clean end-of-stream, i.e. when the kind read stops
    short of two bytes. The kind read stops at a newline, so a blank line
    where a record should start also ends the log.

    Raises:
        MalformedRecordError: a header field is ill-formed.
        TruncatedRecordError: input ends inside the header or before all
            declared lines have been read.
    """
    kind = stream.readline(KIND_WIDTH)
    if len(kind) < KIND_WIDTH:
        return None
    if not KIND_PATTERN.fullmatch(kind):
        raise MalformedRecordError(f"invalid record kind {kind!r}")

    rest = stream.read(HEADER_WIDTH - KIND_WIDTH)
    if len(rest) < HEADER_WIDTH - KIND_WIDTH:
        raise TruncatedRecordError(f"header cut short after {kind!r}")

    for offset in _SEPARATOR_OFFSETS:
        if rest[offset:offset + 1] != SEPARATOR:
            raise MalformedRecordError(
                f"expected separator at header column {KIND_WIDTH + offset}, "
                f"got {rest[offset:offset + 1]!r}"
            )

    timestamp = rest[_TS_START:_TS_END]
    if not TIMESTAMP_PATTERN.fullmatch(timestamp):
        raise MalformedRecordError(f"invalid timestamp {timestamp!r}")

    count_token = rest[_COUNT_START:_COUNT_END]
    if not COUNT_PATTERN.fullmatch(count_token):
        raise MalformedRecordError(f"invalid line count {count_token!r}")
    continuation_count = int(count_token)

    body = []
    for _ in range(continuation_count + 1):
        line = stream.readline()
        if not line:
            raise TruncatedRecordError(
                f"record at {timestamp.decode('ascii')} declares "
                f"{continuation_count + 1} line(s), found {len(body)}"
            )
        body.append(line)

    return Record(
        kind=kind.decode("ascii"),
        timestamp=timestamp.decode("ascii"),
        continuation_count=continuation_count,
        body_lines=tuple(body),
        header=kind + rest,
    )


def iter_records(stream: BinaryIO) -> Iterator[Record]:
    """Yield records from *stream* until clean end-of-stream."""
    while True:
        record = read_record(stream)
        if record is None:
            return
        yield record
