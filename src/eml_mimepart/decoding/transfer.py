"""
Content-Transfer-Encoding removal.

Turns body bytes as they sit on the wire back into the bytes the sender encoded.
Unknown or garbled encoding names pass the data through untouched so one
malformed part never stops the rest of the message from being read.
"""

import base64
import binascii
import re
from typing import Optional, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)

IDENTITY_TRANSFER_ENCODING = "8bit"

IDENTITY_ENCODINGS = frozenset({"", "7bit", "8bit", "binary"})
BASE64_ENCODINGS = frozenset({"base64"})
QUOTED_PRINTABLE_ENCODINGS = frozenset({"quoted-printable"})
UUENCODE_ENCODINGS = frozenset({"x-uuencode", "uuencode", "x-uue"})

_NON_BASE64 = re.compile(rb"[^A-Za-z0-9+/]")


@runtime_checkable
class TransferDecoder(Protocol):
    """Removes a content-transfer-encoding from raw bytes."""

    def decode(self, data: bytes, encoding: Optional[str]) -> bytes:
        ...


def normalize_encoding_name(encoding: Optional[str]) -> str:
    """
    Normalize a Content-Transfer-Encoding value for lookup.

    Args:
        encoding: Header value, possibly None, padded or mixed case

    Returns:
        Lowercase name, or IDENTITY_TRANSFER_ENCODING when absent
    """
    if encoding is None:
        return IDENTITY_TRANSFER_ENCODING
    name = encoding.strip().strip('"').lower()
    return name or IDENTITY_TRANSFER_ENCODING


def decode_base64(data: bytes) -> bytes:
    """
    Decode base64 leniently.

    Line breaks, stray characters and missing padding are tolerated: everything
    outside the base64 alphabet is dropped and the remainder is re-padded.
    """
    payload = data.split(b"=", 1)[0]
    payload = _NON_BASE64.sub(b"", payload)
    remainder = len(payload) % 4
    if remainder == 1:
        # A single dangling sextet cannot encode a byte
        payload = payload[:-1]
    elif remainder:
        payload += b"=" * (4 - remainder)
    return base64.b64decode(payload)


def decode_quoted_printable(data: bytes) -> bytes:
    """Decode quoted-printable, including soft line breaks."""
    return binascii.a2b_qp(data)


def decode_uuencode(data: bytes) -> bytes:
    """
    Decode a uuencoded block.

    The optional "begin <mode> <name>" line and everything from the "end" line
    on are skipped. Lines that fail to decode are dropped.
    """
    out = []
    started = False
    for line in data.splitlines():
        stripped = line.strip()
        if not started and stripped.startswith(b"begin "):
            started = True
            continue
        if stripped == b"end":
            break
        if not stripped or stripped == b"`":
            continue
        try:
            out.append(binascii.a2b_uu(line))
        except binascii.Error:
            # Workaround for broken encoders that emit extra padding characters
            nbytes = (((line[0] - 32) & 63) * 4 + 5) // 3
            try:
                out.append(binascii.a2b_uu(line[:nbytes]))
            except binascii.Error:
                logger.debug("uuencode_line_skipped", line_length=len(line))
    return b"".join(out)


class ContentTransferDecoder:
    """
    Default TransferDecoder.

    Handles base64, quoted-printable and uuencode. 7bit, 8bit, binary and
    absent encodings are identity.
    """

    def decode(self, data: bytes, encoding: Optional[str]) -> bytes:
        """
        Remove the transfer encoding from data.

        Args:
            data: Encoded bytes
            encoding: Content-Transfer-Encoding value (case-insensitive, may be None)

        Returns:
            Decoded bytes; data unchanged for identity or unknown encodings
        """
        if not data:
            return b""

        name = normalize_encoding_name(encoding)
        if name in IDENTITY_ENCODINGS:
            return data
        if name in BASE64_ENCODINGS:
            return decode_base64(data)
        if name in QUOTED_PRINTABLE_ENCODINGS:
            return decode_quoted_printable(data)
        if name in UUENCODE_ENCODINGS:
            return decode_uuencode(data)

        logger.debug("unknown_transfer_encoding", encoding=encoding)
        return data
