"""Exceptions raised when a MIME part cannot be constructed."""


class MimePartError(Exception):
    """Base class for mime part construction errors."""


class InvalidPartError(MimePartError, ValueError):
    """Part id or metadata is unusable (empty id, missing headers, bad types)."""


class SourceError(MimePartError, TypeError):
    """Source is neither a byte buffer, a binary stream nor a ByteRangeSource."""
