import logging

from .record import EncodeError, MB, ME, Record

log = logging.getLogger(__name__)


class IndexOutOfRangeError(IndexError):
    """A message list operation addressed a record position that does not
    exist.
    """

    def __init__(self, index, size, operation):
        errstr = "Unable to {} record. Index {} outside of range of message"
        super(IndexOutOfRangeError, self).__init__(errstr.format(operation, index))
        self.index = index
        self.size = size
        self.operation = operation


def message_decoder(data, offset=0):
    """Generate the records of the NDEF message in data.

    Decoding stops without error when the remaining octets can not hold
    another record type field. Any other decode error is raised.
    """
    if not isinstance(data, (bytes, bytearray)):
        data = bytes(data)
    end = len(data)
    while offset < end:
        record, consumed = Record.from_bytes(data, offset)
        if not record.is_valid:
            log.warning("ignoring %d trailing octets at offset %d",
                        end - offset, offset)
            return
        yield record
        offset += consumed


def message_encoder(records):
    """Generate the encoded octets of each record, with the message begin
    flag on the first and the message end flag on the last record.
    """
    records = list(records)
    for index, record in enumerate(records):
        if not record.is_valid:
            errstr = "record {} has an invalid type and can not be encoded"
            raise EncodeError(errstr.format(index))
        flags = (MB if index == 0 else 0) | (ME if index == len(records) - 1 else 0)
        yield record.as_bytes(flags)


class Message(object):
    """An ordered list of NDEF records."""

    def __init__(self, records=None):
        if records is None:
            self._records = []
        elif isinstance(records, Record):
            self._records = [records]
        else:
            self._records = list(records)

    @classmethod
    def from_bytes(cls, data, offset=0):
        return cls(message_decoder(data, offset))

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __eq__(self, other):
        if not isinstance(other, Message):
            return NotImplemented
        return self._records == other._records

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None

    def __repr__(self):
        return "Message({!r})".format(self._records)

    @property
    def records(self):
        return list(self._records)

    @property
    def record_count(self):
        return len(self._records)

    def _check_index(self, index, operation, size):
        if not 0 <= index < size:
            raise IndexOutOfRangeError(index, len(self._records), operation)

    def record(self, index=0):
        self._check_index(index, "get", len(self._records))
        return self._records[index]

    def append(self, record):
        self._records.append(record)

    def insert(self, record, index=0):
        # inserting at the end is an append
        self._check_index(index, "insert", len(self._records) + 1)
        self._records.insert(index, record)

    def remove(self, index=0):
        self._check_index(index, "remove", len(self._records))
        del self._records[index]

    def set(self, record, index=0):
        self._check_index(index, "set", len(self._records))
        self._records[index] = record

    def is_valid(self):
        """A message is valid if it has at least one record and none of
        its records has the INVALID type.
        """
        return bool(self._records) and all(r.is_valid for r in self._records)

    def as_bytes(self):
        """Encode the message. Returns empty bytes for an invalid message."""
        if not self.is_valid():
            log.warning("message with %d records is not valid, not encoded",
                        len(self._records))
            return b''
        octets = b''.join(message_encoder(self._records))
        log.debug("encoded %d records into %d octets",
                  len(self._records), len(octets))
        return octets
