import logging
import re
import struct
from enum import IntEnum

log = logging.getLogger(__name__)


class DecodeError(Exception):
    """NDEF decode error exception class."""
    pass

class EncodeError(Exception):
    """NDEF encode error exception class."""
    pass


class TruncatedError(DecodeError):
    """Not enough octets left to read a required field."""

    def __init__(self, field, required=None, available=None):
        if required is None:
            errstr = "buffer underflow at reading {}".format(field)
        else:
            errstr = "buffer underflow at reading {}, need {} octets but {} available"
            errstr = errstr.format(field, required, available)
        super(TruncatedError, self).__init__(errstr)
        self.field = field
        self.required = required
        self.available = available


class InvalidCharacterError(DecodeError, EncodeError):
    """A type field octet outside of the printable US-ASCII range [32, 126].

    Raised while decoding as well as while encoding, so it is caught by
    either of the base exception classes.
    """

    def __init__(self, code, message=None):
        if message is None:
            message = "Invalid character code {} found in type field".format(code)
        super(InvalidCharacterError, self).__init__(message)
        self.code = code


MB = 0b10000000
ME = 0b01000000
CF = 0b00100000
SR = 0b00010000
IL = 0b00001000
TNF_MASK = 0b00000111


def _is_type_char(octet):
    return 32 <= octet <= 126


class TNF(IntEnum):
    """NDEF Type Name Format, the low three bits of the record header."""
    EMPTY = 0x00
    WELL_KNOWN = 0x01
    MIME_MEDIA = 0x02
    ABSOLUTE_URI = 0x03
    EXTERNAL = 0x04
    UNKNOWN = 0x05
    UNCHANGED = 0x06
    # 0x07 is reserved by the NFC Forum, only produced by failed decodes
    INVALID = 0x07


class RecordType(object):
    """Type Name Format plus the ASCII type name of a record.

    RecordType objects are immutable. An EMPTY type never carries a name.
    """

    _prefix = {
        TNF.EMPTY: '',
        TNF.WELL_KNOWN: 'urn:nfc:wkt:',
        TNF.MIME_MEDIA: '',
        TNF.ABSOLUTE_URI: '',
        TNF.EXTERNAL: 'urn:nfc:ext:',
    }
    _fixed_names = {
        TNF.UNKNOWN: 'unknown',
        TNF.UNCHANGED: 'unchanged',
        TNF.INVALID: 'invalid',
    }

    __slots__ = ('_id', '_name')

    def __init__(self, id=TNF.EMPTY, name=''):
        id = TNF(id)
        if isinstance(name, (bytes, bytearray)):
            name = bytes(name).decode('latin')
        elif not isinstance(name, str):
            errstr = "type name may be str or bytes, but not {}"
            raise TypeError(errstr.format(type(name).__name__))
        if id == TNF.EMPTY:
            name = ''
        object.__setattr__(self, '_id', id)
        object.__setattr__(self, '_name', name)

    def __setattr__(self, name, value):
        raise AttributeError("RecordType is immutable")

    @property
    def id(self):
        """The TNF value of this record type."""
        return self._id

    @property
    def name(self):
        """The TYPE field content as str."""
        return self._name

    def __eq__(self, other):
        if not isinstance(other, RecordType):
            return NotImplemented
        return self._id == other._id and self._name == other._name

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self):
        return hash((self._id, self._name))

    def __repr__(self):
        return "RecordType({}, {!r})".format(self._id.name, self._name)

    def __str__(self):
        if self._id in self._fixed_names:
            return self._fixed_names[self._id]
        return self._prefix[self._id] + self._name

    @classmethod
    def text(cls):
        return cls(TNF.WELL_KNOWN, 'T')

    @classmethod
    def uri(cls):
        return cls(TNF.WELL_KNOWN, 'U')

    @classmethod
    def invalid(cls):
        return cls(TNF.INVALID)

    @classmethod
    def parse(cls, value):
        """Convert a record type string like 'urn:nfc:wkt:T' or 'text/plain'
        into a RecordType. None and the empty string give an EMPTY type.
        """
        if value is None:
            _value = b''
        elif isinstance(value, bytearray):
            _value = bytes(value)
        elif isinstance(value, (bytes, str)):
            _value = (value if isinstance(value, bytes)
                      else value.encode('ascii'))
        else:
            errstr = 'record type string may be str or bytes, but not {}'
            raise ValueError(errstr.format(type(value).__name__))

        if _value == b'':
            (TNF_, TYPE) = (TNF.EMPTY, b'')
        elif _value.startswith(b'urn:nfc:wkt:'):
            (TNF_, TYPE) = (TNF.WELL_KNOWN, _value[12:])
        elif re.match(b'[a-zA-Z0-9-]+/[a-zA-Z0-9-+.]+$', _value):
            (TNF_, TYPE) = (TNF.MIME_MEDIA, _value)
        elif _value.startswith(b'urn:nfc:ext:'):
            (TNF_, TYPE) = (TNF.EXTERNAL, _value[12:])
        elif _value == b'unknown':
            (TNF_, TYPE) = (TNF.UNKNOWN, b'')
        elif _value == b'unchanged':
            (TNF_, TYPE) = (TNF.UNCHANGED, b'')
        elif re.match(b'[a-zA-Z][a-zA-Z0-9+.-]*:', _value):
            (TNF_, TYPE) = (TNF.ABSOLUTE_URI, _value)
        else:
            errstr = "can not convert the record type string '{}'"
            raise ValueError(errstr.format(value))

        if len(TYPE) > 255:
            errstr = "an NDEF Record TYPE can not be more than 255 octet"
            raise ValueError(errstr)

        return cls(TNF_, TYPE)

    @classmethod
    def from_bytes(cls, data, offset=0):
        """Read the record type of the record starting at offset.

        Returns the INVALID sentinel if the header, the length fields and
        the type field can not all be read from data. A reserved TNF value
        is treated as UNKNOWN.
        """
        remaining = len(data) - offset
        if remaining < 2:
            return cls.invalid()

        octet0, type_length = data[offset], data[offset + 1]
        position = 2
        position += 1 if octet0 & SR else 4
        position += 1 if octet0 & IL else 0

        if remaining < position + type_length:
            return cls.invalid()

        start = offset + position
        TYPE = bytes(data[start:start + type_length])

        tnf = octet0 & TNF_MASK
        if tnf >= TNF.INVALID:
            tnf = TNF.UNKNOWN
        return cls(tnf, TYPE)


class RecordHeader(object):
    """Bit level view of the first octet of an NDEF record."""

    __slots__ = ('tnf', 'il', 'sr', 'cf', 'me', 'mb')

    def __init__(self, tnf=TNF.EMPTY, il=False, sr=False, cf=False,
                 me=False, mb=False):
        self.tnf = TNF(tnf)
        self.il = bool(il)
        self.sr = bool(sr)
        self.cf = bool(cf)
        self.me = bool(me)
        self.mb = bool(mb)

    def __eq__(self, other):
        if not isinstance(other, RecordHeader):
            return NotImplemented
        return self.as_byte() == other.as_byte()

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __repr__(self):
        s = "RecordHeader(tnf={}, il={}, sr={}, cf={}, me={}, mb={})"
        return s.format(self.tnf.name, self.il, self.sr, self.cf,
                        self.me, self.mb)

    @classmethod
    def from_byte(cls, octet0):
        if not 0 <= octet0 <= 255:
            raise ValueError("header octet must be in range 0..255")
        return cls(tnf=octet0 & TNF_MASK,
                   il=octet0 & IL,
                   sr=octet0 & SR,
                   cf=octet0 & CF,
                   me=octet0 & ME,
                   mb=octet0 & MB)

    def as_byte(self):
        return ((MB if self.mb else 0) | (ME if self.me else 0) |
                (CF if self.cf else 0) | (SR if self.sr else 0) |
                (IL if self.il else 0) | int(self.tnf))


class Record(object):
    """A single NDEF record.

    >>> record = Record('urn:nfc:wkt:U', b'\\x01example.com')
    >>> record.as_bytes()
    b'\\xd1\\x01\\x0cU\\x01example.com'
    """

    MAX_PAYLOAD_SIZE = 0xffffffff

    def __init__(self, type=None, payload=None, id=None, chunked=False):
        self._type = RecordType()
        self._payload = b''
        self.id = id
        self.chunked = chunked
        self.payload = payload
        self.type = type

    @property
    def type(self):
        """The RecordType of this record. May be set from a RecordType or
        a record type string as accepted by RecordType.parse().
        """
        return self._type

    @type.setter
    def type(self, value):
        if isinstance(value, RecordType):
            self._type = value
        else:
            self._type = RecordType.parse(value)
        self._validate()

    @property
    def id(self):
        """A str object representing the NDEF Record ID field. The id
        attribute is read-writable.
        """
        return self._id

    @id.setter
    def id(self, value):
        if value is None:
            _value = ''
        elif isinstance(value, str):
            _value = (value.encode('latin').decode('latin'))
        elif isinstance(value, (bytes, bytearray)):
            _value = (bytes(value).decode('latin'))
        else:
            errstr = "id may be str or None, but not {}"
            raise TypeError(errstr.format(type(value).__name__))

        if len(_value) > 255:
            errstr = 'id can not be more than 255 octets NDEF Record ID'
            raise ValueError(errstr)

        self._id = _value

    @property
    def payload(self):
        """The PAYLOAD field as bytes."""
        return self._payload

    @payload.setter
    def payload(self, value):
        if value is None:
            value = b''
        elif not isinstance(value, (bytes, bytearray, memoryview)):
            errstr = "payload may be bytes or None, but not {}"
            raise TypeError(errstr.format(type(value).__name__))
        self._payload = bytes(value)
        self._validate()

    @property
    def chunked(self):
        return self._chunked

    @chunked.setter
    def chunked(self, value):
        self._chunked = bool(value)

    @property
    def payload_length(self):
        return len(self._payload)

    @property
    def is_short(self):
        return len(self._payload) < 256

    @property
    def is_empty(self):
        return self._type.id == TNF.EMPTY

    @property
    def is_valid(self):
        return self._type.id != TNF.INVALID

    def _validate(self):
        # data on an EMPTY record makes it a record of unknown type
        if self._payload and self._type.id == TNF.EMPTY:
            self._type = RecordType(TNF.UNKNOWN)

    def header(self):
        """Header octet from the record state, without MB and ME."""
        return RecordHeader(tnf=self._type.id, il=len(self._id) > 0,
                            sr=self.is_short, cf=self._chunked).as_byte()

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented
        return (self._type == other._type and self._id == other._id and
                self._payload == other._payload and
                self._chunked == other._chunked)

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None

    def __repr__(self):
        s = "Record({!r}, {!r}, id={!r}, chunked={})"
        return s.format(self._type, self._payload, self._id, self._chunked)

    def __str__(self):
        """Return an informal representation suitable for printing."""
        s = "NDEF Record TYPE '{}' ID '{}' PAYLOAD {} byte"
        return s.format(self._type, self._id, len(self._payload))

    def as_bytes(self, flags=MB | ME):
        """Encode the record. The MB, ME and CF bits of flags are OR-ed into
        the header octet. The default encodes a single record message.
        """
        if not self.is_valid:
            raise EncodeError("can not encode a record with an invalid type")

        for char in self._type.name:
            if not _is_type_char(ord(char)):
                errstr = "Invalid type field character with code {}"
                raise InvalidCharacterError(ord(char), errstr.format(ord(char)))

        TYPE = self._type.name.encode('ascii')
        ID = self._id.encode('latin')
        PAYLOAD = self._payload

        if len(TYPE) > 255:
            errstr = "an NDEF Record TYPE can not be more than 255 octet"
            raise EncodeError(errstr)

        if len(PAYLOAD) > self.MAX_PAYLOAD_SIZE:
            errstr = "payload of more than {} octets can not be encoded"
            raise EncodeError(errstr.format(self.MAX_PAYLOAD_SIZE))

        # SR and IL always follow the record content
        octet0 = self.header() | (flags & (MB | ME | CF))
        SR_ = self.is_short
        IL_ = len(ID) > 0

        struct_format = '>BB' + ('B' if SR_ else 'L') + ('B' if IL_ else '')
        fields = (octet0, len(TYPE), len(PAYLOAD)) + ((len(ID),) if IL_ else ())

        return struct.pack(struct_format, *fields) + TYPE + ID + PAYLOAD

    @classmethod
    def from_bytes(cls, data, offset=0):
        """Decode the record starting at offset.

        Returns a (record, consumed) tuple. If the type field can not be
        read the record has the INVALID type and consumed is 0, which ends
        the decoding of a message.
        """
        if not isinstance(data, (bytes, bytearray)):
            data = bytes(data)
        available = len(data) - offset
        if available < 3:
            raise TruncatedError("header", 3, max(available, 0))

        record_type = RecordType.from_bytes(data, offset)
        if record_type.id == TNF.INVALID:
            return cls(record_type), 0

        header = RecordHeader.from_byte(data[offset])
        position = offset + 1
        type_length = data[position]
        position += 1

        if header.sr:
            payload_length = data[position]
            position += 1
        else:
            if len(data) - position < 4:
                raise TruncatedError("payload length", 4, len(data) - position)
            payload_length = struct.unpack_from('>L', data, position)[0]
            position += 4

        id_length = 0
        if header.il:
            if len(data) - position < 1:
                raise TruncatedError("ID length", 1, len(data) - position)
            id_length = data[position]
            position += 1

        if payload_length > cls.MAX_PAYLOAD_SIZE:
            errstr = "payload of more than {} octets can not be decoded"
            raise DecodeError(errstr.format(cls.MAX_PAYLOAD_SIZE))

        def read(field, length):
            nonlocal position
            if len(data) - position < length:
                raise TruncatedError(field, length, len(data) - position)
            octets = bytes(data[position:position + length])
            position += length
            return octets

        TYPE = read("type", type_length)
        for octet in TYPE:
            if not _is_type_char(octet):
                raise InvalidCharacterError(octet)

        ID = read("ID", id_length)
        PAYLOAD = read("payload", payload_length)

        record = cls(RecordType(record_type.id, TYPE), PAYLOAD, ID, header.cf)
        consumed = position - offset
        log.debug("decoded %s from %d octets", record, consumed)
        return record, consumed

    def get_text(self):
        from . import text
        return text.get_text(self._payload)

    def get_text_locale(self):
        from . import text
        return text.get_text_locale(self._payload)

    def get_uri(self):
        from . import uri
        return uri.get_uri(self._payload)

    def get_uri_protocol(self):
        from . import uri
        return uri.get_uri_protocol(self._payload)
