# Decoding collaborators: transfer encoding, charset conversion, encoded words

from .charset import CHARSET_ALIASES, CharsetConverter, DefaultCharsetConverter
from .header import HeaderWordDecoder, MimeHeaderDecoder
from .transfer import (
    IDENTITY_TRANSFER_ENCODING,
    ContentTransferDecoder,
    TransferDecoder,
    decode_base64,
    decode_quoted_printable,
    decode_uuencode,
)

__all__ = [
    "CharsetConverter",
    "DefaultCharsetConverter",
    "CHARSET_ALIASES",
    "TransferDecoder",
    "ContentTransferDecoder",
    "IDENTITY_TRANSFER_ENCODING",
    "decode_base64",
    "decode_quoted_printable",
    "decode_uuencode",
    "HeaderWordDecoder",
    "MimeHeaderDecoder",
]
