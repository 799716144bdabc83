"""
Message tests - list operations, validity and multi record codec.
"""

import logging

import pytest

from ndefcodec import message_decoder, message_encoder
from ndefcodec.message import IndexOutOfRangeError, Message
from ndefcodec.record import (
    EncodeError, InvalidCharacterError, TruncatedError,
    Record, RecordType, TNF,
)
from ndefcodec.text import create_text_record
from ndefcodec.uri import create_uri_record

TWO_TEXT_RECORDS = (b'\x91\x01\x15T\x02entest text record 1'
                    b'Q\x01\x15T\x02entest text record 2')
HELLO_RECORD = (bytes([0xd1, 0x01, 0x13, 0x54, 0x85]) + b"en-US" +
                b"Hello, World!")


# =============================================================================
# List operations
# =============================================================================

class TestMessageList:

    def test_insert_past_end_throws(self):
        message = Message()
        with pytest.raises(IndexOutOfRangeError) as excinfo:
            message.insert(Record(), 1)
        assert str(excinfo.value) == \
            "Unable to insert record. Index 1 outside of range of message"
        assert excinfo.value.index == 1
        assert excinfo.value.size == 0
        assert excinfo.value.operation == "insert"

    def test_insert_at_end_appends(self):
        message = Message(Record())
        record = Record("text/plain", b"x")
        message.insert(record, len(message))
        assert message.record(1) == record

    def test_insert_at_front(self):
        first = Record("text/plain", b"1")
        message = Message(Record("text/plain", b"2"))
        message.insert(first)
        assert message.record(0) == first
        assert len(message) == 2

    def test_remove_from_empty_throws(self):
        with pytest.raises(IndexOutOfRangeError) as excinfo:
            Message().remove(0)
        assert str(excinfo.value) == \
            "Unable to remove record. Index 0 outside of range of message"

    def test_remove_past_end_throws(self):
        with pytest.raises(IndexOutOfRangeError) as excinfo:
            Message(Record()).remove(1)
        assert str(excinfo.value) == \
            "Unable to remove record. Index 1 outside of range of message"

    def test_remove(self):
        message = Message([Record("text/plain", b"1"), Record("text/plain", b"2")])
        message.remove(0)
        assert message.records == [Record("text/plain", b"2")]

    def test_set_past_end_throws(self):
        with pytest.raises(IndexOutOfRangeError) as excinfo:
            Message(Record()).set(Record(), 1)
        assert str(excinfo.value) == \
            "Unable to set record. Index 1 outside of range of message"

    def test_set_on_empty_throws(self):
        with pytest.raises(IndexOutOfRangeError):
            Message().set(Record(), 0)

    def test_set(self):
        message = Message(Record())
        record = Record("text/plain", b"x")
        message.set(record, 0)
        assert message.record(0) == record

    def test_negative_index_throws(self):
        with pytest.raises(IndexOutOfRangeError):
            Message(Record()).record(-1)

    def test_out_of_range_is_index_error(self):
        with pytest.raises(IndexError):
            Message().record(0)

    def test_records_is_a_copy(self):
        message = Message(Record())
        message.records.append(Record())
        assert len(message) == 1

    def test_append_and_iterate(self):
        message = Message()
        message.append(Record("text/plain", b"1"))
        message.append(Record("text/plain", b"2"))
        assert [r.payload for r in message] == [b"1", b"2"]
        assert message.record_count == 2


# =============================================================================
# Validity
# =============================================================================

class TestMessageValidity:

    def test_empty_message_is_invalid(self):
        assert not Message().is_valid()

    def test_message_with_records_is_valid(self):
        assert Message([Record(), Record("text/plain", b"x")]).is_valid()

    def test_invalid_record_makes_message_invalid(self):
        message = Message([Record(), Record(RecordType.invalid())])
        assert not message.is_valid()

    def test_invalid_message_encodes_empty(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ndefcodec.message"):
            assert Message().as_bytes() == b""
        assert "not valid" in caplog.text
        assert Message(Record(RecordType.invalid())).as_bytes() == b""


# =============================================================================
# Encode / decode
# =============================================================================

class TestMessageCodec:

    def test_decode_two_records(self):
        message = Message.from_bytes(TWO_TEXT_RECORDS)
        assert len(message) == 2
        assert [r.get_text() for r in message] == \
            ["test text record 1", "test text record 2"]
        assert all(r.get_text_locale() == "en" for r in message)

    def test_encode_two_records(self):
        message = Message([create_text_record("test text record 1"),
                           create_text_record("test text record 2")])
        assert message.as_bytes() == TWO_TEXT_RECORDS

    def test_message_begin_and_end_flags(self):
        records = [Record("text/plain", bytes([i])) for i in range(3)]
        octets = Message(records).as_bytes()
        assert octets[0] == 0x92
        assert octets[14] == 0x12
        assert octets[28] == 0x52

    def test_single_record_round_trip(self):
        message = Message.from_bytes(HELLO_RECORD)
        assert len(message) == 1
        assert message.as_bytes() == HELLO_RECORD

    def test_round_trip_mixed(self):
        message = Message([
            create_text_record("Hello, World!", "en-US"),
            create_uri_record("https://www.example.com/tag"),
            Record("urn:nfc:ext:example.com:t", b"\x00" * 300, id="big"),
            Record(),
        ])
        assert Message.from_bytes(message.as_bytes()) == message

    def test_decode_with_offset(self):
        message = Message.from_bytes(b"\x03\x17" + HELLO_RECORD, 2)
        assert len(message) == 1

    def test_trailing_type_past_end_stops_softly(self, caplog):
        data = HELLO_RECORD + bytes([0x11, 0x05, 0x00, 0x00])
        with caplog.at_level(logging.WARNING, logger="ndefcodec.message"):
            message = Message.from_bytes(data)
        assert len(message) == 1
        assert message.record(0).type == RecordType.text()
        assert "ignoring 4 trailing octets" in caplog.text

    def test_trailing_short_garbage_raises(self):
        with pytest.raises(TruncatedError):
            Message.from_bytes(HELLO_RECORD + b"\xfe\x00")

    def test_corrupt_second_record_raises(self):
        corrupt = bytearray(HELLO_RECORD)
        corrupt[3] = 0x1f
        with pytest.raises(InvalidCharacterError):
            Message.from_bytes(HELLO_RECORD + bytes(corrupt))

    def test_truncated_payload_raises(self):
        with pytest.raises(TruncatedError):
            Message.from_bytes(HELLO_RECORD[:-1])

    def test_decode_empty_input(self):
        assert len(Message.from_bytes(b"")) == 0

    def test_chunk_flag_is_kept_per_record(self):
        records = [Record("text/plain", b"part 1", chunked=True),
                   Record("unchanged", b"part 2")]
        decoded = Message.from_bytes(Message(records).as_bytes())
        assert decoded.record(0).chunked
        assert not decoded.record(1).chunked
        assert decoded.record(1).type.id == TNF.UNCHANGED


# =============================================================================
# Generators
# =============================================================================

class TestGenerators:

    def test_decoder_yields_records(self):
        records = list(message_decoder(TWO_TEXT_RECORDS))
        assert records == Message.from_bytes(TWO_TEXT_RECORDS).records

    def test_encoder_yields_record_bytes(self):
        records = Message.from_bytes(TWO_TEXT_RECORDS).records
        assert b"".join(message_encoder(records)) == TWO_TEXT_RECORDS
        assert len(list(message_encoder(records))) == 2

    def test_encoder_rejects_invalid_record(self):
        with pytest.raises(EncodeError):
            list(message_encoder([Record(), Record(RecordType.invalid())]))

    def test_encoder_with_no_records(self):
        assert list(message_encoder([])) == []
