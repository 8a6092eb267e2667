"""Merge engine — order-preserving, duplicate-eliminating merge of two snapshots."""

from __future__ import annotations

import logging
import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from typing import BinaryIO, Sequence

from history_merge.errors import LogIOError
from history_merge.loader import load_snapshot
from history_merge.record import Record, is_duplicate

logger = logging.getLogger(__name__)

STDOUT_PATH = "-"


@dataclass
class MergeStats:
    from_first: int = 0
    from_second: int = 0
    duplicates: int = 0

    @property
    def written(self) -> int:
        return self.from_first + self.from_second


def merge_records(a: Sequence[Record], b: Sequence[Record], sink: BinaryIO) -> MergeStats:
    """Write the merge of two timestamp-sorted sequences to *sink*.

    When timestamps tie, the record from *a* goes first. If the *b* record
    at that position is an exact duplicate it is dropped; otherwise it stays
    and is written on a later step.
    """
    stats = MergeStats()
    i_a = i_b = 0

    while i_a < len(a) and i_b < len(b):
        rec_a, rec_b = a[i_a], b[i_b]
        if rec_a.timestamp <= rec_b.timestamp:
            if rec_a.timestamp == rec_b.timestamp and is_duplicate(rec_a, rec_b):
                i_b += 1
                stats.duplicates += 1
            sink.write(rec_a.raw)
            i_a += 1
            stats.from_first += 1
        else:
            sink.write(rec_b.raw)
            i_b += 1
            stats.from_second += 1

    for rec in a[i_a:]:
        sink.write(rec.raw)
        stats.from_first += 1
    for rec in b[i_b:]:
        sink.write(rec.raw)
        stats.from_second += 1

    return stats


def _merge_to_path(a: Sequence[Record], b: Sequence[Record], output: str) -> MergeStats:
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=os.path.dirname(os.path.abspath(output)),
            prefix=f".{os.path.basename(output)}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = tmp.name
            stats = merge_records(a, b, tmp)
        if os.path.exists(output):
            shutil.copymode(output, tmp_path)
        else:
            # NamedTemporaryFile creates 0600; give new outputs the umask default
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(tmp_path, 0o666 & ~umask)
        os.replace(tmp_path, output)
    except OSError as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise LogIOError(e.strerror or str(e), path=output) from e
    return stats


def merge_files(first: str, second: str, output: str) -> MergeStats:
    """Merge two history files into *output*.

    Both inputs are loaded completely before anything is written, so
    *output* may be either input. The result goes to a temporary file next
    to *output* that replaces it only once fully written; a failed write
    leaves *output* as it was. ``"-"`` writes to standard output.
    """
    logger.info("Merging: %s + %s -> %s", first, second, output)
    snapshot_a = load_snapshot(first)
    snapshot_b = load_snapshot(second)

    if output == STDOUT_PATH:
        try:
            stats = merge_records(snapshot_a, snapshot_b, sys.stdout.buffer)
            sys.stdout.buffer.flush()
        except OSError as e:
            raise LogIOError(e.strerror or str(e), path=output) from e
    else:
        stats = _merge_to_path(snapshot_a, snapshot_b, output)

    logger.debug("%s: wrote %d record(s) (%d + %d), dropped %d duplicate(s)",
                 output, stats.written, stats.from_first, stats.from_second,
                 stats.duplicates)
    return stats
