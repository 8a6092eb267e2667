"""Tests for history_merge/record.py"""

import dataclasses
import io
import unittest

from history_merge.errors import MalformedRecordError
from history_merge.parser import read_record
from history_merge.record import Record, encode_record, is_duplicate, timestamp_key


def _record(ts="20100901T13:39:14Z", kind="MR", lines=("hello",)) -> Record:
    return encode_record(kind, ts, lines)


class TestEncodeRecord(unittest.TestCase):
    def test_header_layout(self):
        record = _record(lines=("one", "two"))
        self.assertEqual(record.header, b"MR 20100901T13:39:14Z 001 ")
        self.assertEqual(record.raw, b"MR 20100901T13:39:14Z 001 one\ntwo\n")

    def test_round_trip_through_parser(self):
        record = _record(kind="MS", lines=("x = 1", b"\xfe\xff raw bytes\n", ""))
        parsed = read_record(io.BytesIO(record.raw))
        self.assertEqual(parsed.raw, record.raw)
        self.assertEqual(parsed, record)

    def test_keeps_existing_newline(self):
        record = _record(lines=("already\n",))
        self.assertEqual(record.body_lines, (b"already\n",))

    def test_rejects_bad_kind(self):
        with self.assertRaises(MalformedRecordError):
            _record(kind="M")

    def test_rejects_bad_timestamp(self):
        with self.assertRaises(MalformedRecordError):
            _record(ts="2010-09-01T13:39:14")

    def test_rejects_embedded_newline(self):
        with self.assertRaises(MalformedRecordError):
            _record(lines=("two\nlines",))

    def test_rejects_no_lines(self):
        with self.assertRaises(MalformedRecordError):
            _record(lines=())

    def test_rejects_too_many_lines(self):
        with self.assertRaises(MalformedRecordError):
            _record(lines=["x"] * 1001)

    def test_accepts_maximum_lines(self):
        record = _record(lines=["x"] * 1000)
        self.assertEqual(record.continuation_count, 999)


class TestRecordInvariants(unittest.TestCase):
    def test_frozen(self):
        record = _record()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.timestamp = "20200101T00:00:00Z"

    def test_line_count_must_match(self):
        with self.assertRaises(MalformedRecordError):
            Record(
                kind="MR",
                timestamp="20100901T13:39:14Z",
                continuation_count=1,
                body_lines=(b"only one\n",),
                header=b"MR 20100901T13:39:14Z 001 ",
            )


class TestIsDuplicate(unittest.TestCase):
    def test_identical(self):
        self.assertTrue(is_duplicate(_record(), _record()))

    def test_different_body(self):
        self.assertFalse(is_duplicate(_record(lines=("x",)), _record(lines=("y",))))

    def test_different_kind(self):
        self.assertFalse(is_duplicate(_record(kind="MR"), _record(kind="MS")))

    def test_different_timestamp(self):
        self.assertFalse(
            is_duplicate(_record(ts="20100901T13:39:14Z"), _record(ts="20100901T13:39:15Z"))
        )

    def test_extra_continuation_line(self):
        self.assertFalse(is_duplicate(_record(lines=("a",)), _record(lines=("a", "b"))))

    def test_line_ending_difference(self):
        self.assertFalse(is_duplicate(_record(lines=("a\n",)), _record(lines=("a\r\n",))))


class TestTimestampKey(unittest.TestCase):
    def test_lexical_order_is_chronological(self):
        records = [
            _record(ts="20110101T00:00:00Z"),
            _record(ts="20100901T13:39:14Z"),
            _record(ts="20100901T09:00:00Z"),
        ]
        ordered = sorted(records, key=timestamp_key)
        self.assertEqual(
            [r.timestamp for r in ordered],
            ["20100901T09:00:00Z", "20100901T13:39:14Z", "20110101T00:00:00Z"],
        )


if __name__ == "__main__":
    unittest.main()
