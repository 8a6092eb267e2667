"""History record model: frozen dataclass, timestamp ordering, duplicate test.

A record on disk looks like::

    MR 20100901T13:39:14Z 001 first line of the message
    second line of the message

The 26-byte header holds the kind, the timestamp and the number of lines
that follow the first one. Body lines are kept as raw bytes so a record can
be written back exactly as it was read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from history_merge.errors import MalformedRecordError

KIND_WIDTH = 2
TIMESTAMP_WIDTH = 18
COUNT_WIDTH = 3
SEPARATOR = b" "

# kind + SP + timestamp + SP + count + SP
HEADER_WIDTH = KIND_WIDTH + TIMESTAMP_WIDTH + COUNT_WIDTH + 3
MAX_CONTINUATION = 10 ** COUNT_WIDTH - 1

KIND_PATTERN = re.compile(rb"[!-~]{2}")
TIMESTAMP_PATTERN = re.compile(rb"\d{8}T\d{2}:\d{2}:\d{2}Z")
COUNT_PATTERN = re.compile(rb"\d{3}")


@dataclass(frozen=True)
class Record:
    kind: str
    timestamp: str
    continuation_count: int
    body_lines: tuple[bytes, ...]
    header: bytes = field(repr=False)

    def __post_init__(self):
        if len(self.body_lines) != self.continuation_count + 1:
            raise MalformedRecordError(
                f"record at {self.timestamp} declares {self.continuation_count + 1} "
                f"line(s) but holds {len(self.body_lines)}"
            )

    @property
    def raw(self) -> bytes:
        """The record exactly as it appeared in its source log."""
        return self.header + b"".join(self.body_lines)


def timestamp_key(record: Record) -> str:
    """Sort key: lexical timestamp order is chronological order."""
    return record.timestamp


def is_duplicate(a: Record, b: Record) -> bool:
    """True if both records are byte-identical in kind, timestamp and body."""
    return (
        a.kind == b.kind
        and a.timestamp == b.timestamp
        and a.continuation_count == b.continuation_count
        and a.body_lines == b.body_lines
    )


def _to_bytes(value) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def encode_record(kind: str, timestamp: str, lines: Iterable[str | bytes]) -> Record:
    """Build a Record from its fields, validating them like the parser does.

    Each line gets a trailing newline if it lacks one. A line may not contain
    a newline anywhere but at its end.
    """
    kind_b = _to_bytes(kind)
    ts_b = _to_bytes(timestamp)
    if not KIND_PATTERN.fullmatch(kind_b):
        raise MalformedRecordError(f"invalid kind {kind!r}")
    if not TIMESTAMP_PATTERN.fullmatch(ts_b):
        raise MalformedRecordError(f"invalid timestamp {timestamp!r}")

    body = []
    for line in lines:
        line_b = _to_bytes(line)
        if not line_b.endswith(b"\n"):
            line_b += b"\n"
        if b"\n" in line_b[:-1]:
            raise MalformedRecordError(f"embedded newline in line {line!r}")
        body.append(line_b)

    if not body:
        raise MalformedRecordError("a record needs at least one line")
    count = len(body) - 1
    if count > MAX_CONTINUATION:
        raise MalformedRecordError(
            f"{len(body)} lines exceed the {MAX_CONTINUATION + 1}-line limit"
        )

    header = SEPARATOR.join([kind_b, ts_b, b"%03d" % count]) + SEPARATOR
    return Record(
        kind=kind_b.decode("ascii"),
        timestamp=ts_b.decode("ascii"),
        continuation_count=count,
        body_lines=tuple(body),
        header=header,
    )
