"""
RFC 2047 encoded-word decoding for header values.

A header value such as

    =?iso-8859-1?Q?Caf=E9?= =?utf-8?B?w6AgbGEgY2FydGU=?= menu

is decoded word by word, each word in its own charset and encoding. Literal
text between words is kept verbatim; whitespace that only separates two
adjacent encoded words is dropped.
"""

import re
from typing import Any, List, Optional, Protocol, Tuple, Union, runtime_checkable

from .charset import CharsetConverter
from .transfer import TransferDecoder


ENCODED_WORD = re.compile(r"=\?([^?\s]+)\?([QqBb])\?([^?]*)\?=")
FOLDING = re.compile(r"\r?\n[ \t]+")

_WORD_ENCODINGS = {"B": "base64", "Q": "quoted-printable"}


@runtime_checkable
class HeaderWordDecoder(Protocol):
    """Decodes encoded words embedded in a raw header value."""

    def decode(self, value: str) -> str:
        ...


class MimeHeaderDecoder:
    """
    Default HeaderWordDecoder.

    Byte decoding is delegated to the transfer decoder and text conversion to
    the charset converter, so both can be swapped together with this decoder.
    """

    def __init__(self, charset_converter: CharsetConverter, transfer_decoder: TransferDecoder):
        self.charset_converter = charset_converter
        self.transfer_decoder = transfer_decoder

    def decode(self, value: Union[str, bytes, None]) -> Optional[str]:
        """
        Decode every encoded word in a header value.

        Adjacent encoded words in the same charset are joined as bytes before
        charset conversion, so a multi-byte character split across words
        survives.

        Args:
            value: Raw header value (str, bytes or None)

        Returns:
            Decoded text, or None when value is None
        """
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray)):
            value = self.charset_converter.convert(bytes(value), None)

        value = FOLDING.sub(" ", value)
        if "=?" not in value:
            return value

        # Each chunk is a literal str or a [charset, bytes] run of encoded words
        chunks: List[Union[str, List[Any]]] = []
        position = 0
        for match in ENCODED_WORD.finditer(value):
            literal = value[position:match.start()]
            previous = chunks[-1] if chunks else None
            previous_is_word = isinstance(previous, list)
            if literal and not (previous_is_word and literal.isspace()):
                chunks.append(literal)
                previous_is_word = False

            charset, payload = self.word_bytes(match)
            if previous_is_word and previous[0].lower() == charset.lower():
                previous[1] += payload
            else:
                chunks.append([charset, payload])
            position = match.end()

        chunks.append(value[position:])
        return "".join(
            self.charset_converter.convert(chunk[1], chunk[0]) if isinstance(chunk, list) else chunk
            for chunk in chunks
        )

    def word_bytes(self, match: "re.Match[str]") -> Tuple[str, bytes]:
        """Return the charset and transfer-decoded bytes of a matched encoded word."""
        charset, encoding, text = match.groups()
        # RFC 2231 language suffix: charset*lang
        charset = charset.split("*", 1)[0]
        encoding = _WORD_ENCODINGS[encoding.upper()]

        payload = text.encode("ascii", errors="replace")
        if encoding == "quoted-printable":
            payload = payload.replace(b"_", b" ")

        return charset, self.transfer_decoder.decode(payload, encoding)
