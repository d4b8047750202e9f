# On-demand decoding of single MIME parts from raw email messages

from .decoding import (
    CharsetConverter,
    ContentTransferDecoder,
    DefaultCharsetConverter,
    HeaderWordDecoder,
    MimeHeaderDecoder,
    TransferDecoder,
)
from .exceptions import InvalidPartError, MimePartError, SourceError
from .models import MimePart, PartMetadata
from .source import BufferSource, ByteRangeSource, StreamSource, as_source

__version__ = "1.0.0"

__all__ = [
    "MimePart",
    "PartMetadata",
    "ByteRangeSource",
    "BufferSource",
    "StreamSource",
    "as_source",
    "CharsetConverter",
    "DefaultCharsetConverter",
    "TransferDecoder",
    "ContentTransferDecoder",
    "HeaderWordDecoder",
    "MimeHeaderDecoder",
    "MimePartError",
    "InvalidPartError",
    "SourceError",
]
