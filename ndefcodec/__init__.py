# NDEF record and message codec
#
# Record layout and type string handling follow ndeflib,
# https://github.com/nfcpy/ndeflib/

__version__ = "0.1.0"

from . import encoding
from . import message
from . import record
from . import text
from . import uri

from .record import (
    DecodeError,
    EncodeError,
    InvalidCharacterError,
    Record,
    RecordHeader,
    RecordType,
    TNF,
    TruncatedError,
)
from .message import IndexOutOfRangeError, Message
from .text import TextCodec, create_text_record, get_text, get_text_locale
from .uri import create_uri_record, get_uri, get_uri_protocol

message_decoder = message.message_decoder
message_encoder = message.message_encoder
