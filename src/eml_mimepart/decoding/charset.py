"""
Charset conversion for decoded part bodies and encoded words.

Mail in the wild declares charsets under many spellings, some of which Python's
codec registry does not know. Names are resolved through an alias table first,
then through codecs.lookup. A missing or unknown charset never raises: the
converter falls back to the default charset, a charset-normalizer guess, and
finally an 8-bit charset that decodes any byte.
"""

import codecs
from typing import Dict, Optional, Protocol, runtime_checkable

import charset_normalizer
import structlog

from ..config import settings

logger = structlog.get_logger(__name__)

# Mail charset spellings mapped to Python codec names
CHARSET_ALIASES: Dict[str, str] = {
    "ascii": "ascii",
    "us-ascii": "ascii",
    "ansi_x3.4-1968": "ascii",
    "ansi_x3.4-1986": "ascii",
    "iso646-us": "ascii",
    "latin1": "iso-8859-1",
    "latin-1": "iso-8859-1",
    "l1": "iso-8859-1",
    "iso8859-1": "iso-8859-1",
    "iso_8859-1": "iso-8859-1",
    "latin2": "iso-8859-2",
    "latin-9": "iso-8859-15",
    "latin9": "iso-8859-15",
    "iso8859-15": "iso-8859-15",
    "win-1250": "cp1250",
    "win-1251": "cp1251",
    "win-1252": "cp1252",
    "windows-1252": "cp1252",
    "x-cp1252": "cp1252",
    "cp-1252": "cp1252",
    "x-cp1250": "cp1250",
    "x-cp1251": "cp1251",
    "ks_c_5601-1987": "cp949",
    "ks_c_5601": "cp949",
    "ksc5601": "cp949",
    "x-windows-949": "cp949",
    "euc-kr": "euc_kr",
    "x-sjis": "shift_jis",
    "shift-jis": "shift_jis",
    "sjis": "shift_jis",
    "x-euc-jp": "euc_jp",
    "windows-31j": "cp932",
    "x-gbk": "gbk",
    "gb2312": "gb18030",
    "x-gb2312": "gb18030",
    "x-mac-roman": "mac_roman",
    "macintosh": "mac_roman",
    "unicode-1-1-utf-7": "utf-7",
    "x-unicode20utf8": "utf-8",
    "utf8": "utf-8",
    "unicode-1-1-utf-8": "utf-8",
    "x-user-defined": "iso-8859-1",
    "tis-620": "cp874",
    "iso-8859-8-i": "iso-8859-8",
    "iso-8859-6-i": "iso-8859-6",
    "koi8": "koi8_r",
}


@runtime_checkable
class CharsetConverter(Protocol):
    """Converts bytes in a named charset to text."""

    def convert(self, data: bytes, charset: Optional[str]) -> str:
        ...


def _lookup_codec(name: str) -> Optional[str]:
    """Return the Python codec name for a text charset, or None."""
    try:
        info = codecs.lookup(name)
    except (LookupError, ValueError):
        return None
    # bytes-to-bytes codecs (hex, base64, zlib, rot13, ...) are not charsets
    if not getattr(info, "_is_text_encoding", True):
        return None
    return info.name


class DefaultCharsetConverter:
    """
    Default CharsetConverter.

    Output is always a Python str. Unusable charset names degrade to the
    configured default charset instead of raising.
    """

    def __init__(
        self,
        default_charset: Optional[str] = None,
        fallback_charset: Optional[str] = None,
        detect: Optional[bool] = None,
        aliases: Optional[Dict[str, str]] = None,
    ):
        self.default_charset = default_charset or settings.default_charset
        self.fallback_charset = fallback_charset or settings.fallback_charset
        self.detect = settings.detect_charset if detect is None else detect
        self.aliases = dict(CHARSET_ALIASES)
        if aliases:
            self.aliases.update({k.lower(): v for k, v in aliases.items()})

    def resolve(self, charset: Optional[str]) -> Optional[str]:
        """
        Resolve a declared charset to a Python codec name.

        Args:
            charset: Charset as declared in the message (any case, may be quoted)

        Returns:
            Codec name, or None if the charset is absent or unknown
        """
        if not charset:
            return None
        name = charset.strip().strip('"').strip("'").lower()
        if not name:
            return None
        return _lookup_codec(self.aliases.get(name, name))

    def convert(self, data: bytes, charset: Optional[str]) -> str:
        """
        Decode data from charset into text.

        Args:
            data: Raw bytes
            charset: Declared charset, or None

        Returns:
            Decoded text; undecodable sequences become U+FFFD
        """
        if not data:
            return ""

        codec = self.resolve(charset)
        if codec is not None:
            return data.decode(codec, errors="replace")

        if charset:
            logger.debug("unknown_charset", charset=charset)
        return self._decode_without_charset(data)

    def _decode_without_charset(self, data: bytes) -> str:
        default_codec = _lookup_codec(self.default_charset)
        if default_codec is not None:
            try:
                return data.decode(default_codec)
            except UnicodeDecodeError:
                pass

        if self.detect:
            detected = charset_normalizer.from_bytes(data).best()
            if detected is not None:
                logger.debug("charset_detected", encoding=detected.encoding)
                return str(detected)

        logger.debug("charset_fallback", charset=self.fallback_charset)
        return data.decode(_lookup_codec(self.fallback_charset) or "iso-8859-1", errors="replace")
