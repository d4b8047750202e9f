"""
MIME part model - one body part of a raw email message.

A MimePart owns the metadata the tokenizer computed for the part (headers,
content type, disposition, byte offsets) and a handle on the raw message. It
never copies its bytes out of the message up front: header and body bytes are
read from the source on demand, then decoded in three stages:

1. content-transfer-encoding removal (TransferDecoder)
2. charset conversion (CharsetConverter)
3. encoded-word decoding for header values (HeaderWordDecoder)

Nothing decoded is cached; every call re-reads and re-decodes.

Metadata is exposed per field and as a whole mapping. Nested values (headers)
cannot be changed in place; read the mapping, modify it and assign it back:

    metadata = part.metadata
    metadata["headers"]["from"] = "modified@example.com"
    part.metadata = metadata
"""

import copy
from typing import Any, Dict, Iterator, List, Mapping, Optional

import structlog
from pydantic import ValidationError

from ..decoding.charset import CharsetConverter, DefaultCharsetConverter
from ..decoding.header import HeaderWordDecoder, MimeHeaderDecoder
from ..decoding.transfer import ContentTransferDecoder, TransferDecoder
from ..exceptions import InvalidPartError
from ..source import ByteRangeSource, as_source
from .part_metadata import HeaderValue, PartMetadata

logger = structlog.get_logger(__name__)


def _validate_metadata(metadata: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(metadata, Mapping):
        raise InvalidPartError(f"Part metadata must be a mapping, got {type(metadata).__name__}")
    try:
        return PartMetadata.model_validate(dict(metadata)).to_mapping()
    except ValidationError as e:
        raise InvalidPartError(f"Invalid part metadata: {e}") from e


class MimePart:
    """
    A single MIME part backed by a raw message source.

    Args:
        part_id: Opaque, non-empty id of the part in the message tree (e.g. "1.2")
        metadata: Field map from the tokenizer; must contain "headers"
        source: Raw message as bytes, a seekable binary stream or a ByteRangeSource

    Raises:
        InvalidPartError: If part_id is empty or metadata fails validation
        SourceError: If source is of an unsupported type
    """

    def __init__(self, part_id: str, metadata: Mapping[str, Any], source: Any):
        if not isinstance(part_id, str) or not part_id:
            raise InvalidPartError(f"Part id must be a non-empty string, got {part_id!r}")

        self._id = part_id
        self._metadata = _validate_metadata(metadata)
        self._source = as_source(source)

        self._charset_converter: CharsetConverter = DefaultCharsetConverter()
        self._transfer_decoder: TransferDecoder = ContentTransferDecoder()
        self._header_decoder: HeaderWordDecoder = MimeHeaderDecoder(
            self._charset_converter, self._transfer_decoder
        )

    def __repr__(self) -> str:
        return f"MimePart(id={self._id!r}, content_type={self.content_type!r})"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def part_id(self) -> str:
        return self._id

    def identifier(self) -> str:
        """Return the part id given at construction."""
        return self._id

    @property
    def source(self) -> ByteRangeSource:
        return self._source

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def metadata(self) -> Dict[str, Any]:
        """Copy of the whole metadata mapping; changes to it do not affect the part."""
        return copy.deepcopy(self._metadata)

    @metadata.setter
    def metadata(self, metadata: Mapping[str, Any]) -> None:
        self._metadata = _validate_metadata(metadata)
        logger.debug("mime_part_metadata_replaced", part_id=self._id)

    def field(self, name: str) -> Any:
        """Return the top-level metadata field, or None if absent."""
        return self._metadata.get(name)

    def _set_field(self, name: str, value: Optional[str]) -> None:
        metadata = dict(self._metadata)
        if value is None:
            metadata.pop(name, None)
        else:
            metadata[name] = value
        self.metadata = metadata

    @property
    def content_type(self) -> Optional[str]:
        return self.field("content-type")

    @content_type.setter
    def content_type(self, value: Optional[str]) -> None:
        self._set_field("content-type", value)

    @property
    def content_disposition(self) -> Optional[str]:
        return self.field("content-disposition")

    @content_disposition.setter
    def content_disposition(self, value: Optional[str]) -> None:
        self._set_field("content-disposition", value)

    @property
    def content_id(self) -> Optional[str]:
        return self.field("content-id")

    @content_id.setter
    def content_id(self, value: Optional[str]) -> None:
        self._set_field("content-id", value)

    @property
    def content_name(self) -> Optional[str]:
        return self.field("content-name")

    @content_name.setter
    def content_name(self, value: Optional[str]) -> None:
        self._set_field("content-name", value)

    @property
    def disposition_filename(self) -> Optional[str]:
        return self.field("disposition-filename")

    @disposition_filename.setter
    def disposition_filename(self, value: Optional[str]) -> None:
        self._set_field("disposition-filename", value)

    @property
    def transfer_encoding(self) -> Optional[str]:
        return self.field("transfer-encoding")

    @transfer_encoding.setter
    def transfer_encoding(self, value: Optional[str]) -> None:
        self._set_field("transfer-encoding", value)

    @property
    def charset(self) -> Optional[str]:
        return self.field("charset")

    @charset.setter
    def charset(self, value: Optional[str]) -> None:
        self._set_field("charset", value)

    @property
    def starting_position(self) -> Optional[int]:
        return self.field("starting-pos")

    @property
    def ending_position(self) -> Optional[int]:
        return self.field("ending-pos")

    @property
    def starting_position_body(self) -> Optional[int]:
        return self.field("starting-pos-body")

    @property
    def ending_position_body(self) -> Optional[int]:
        return self.field("ending-pos-body")

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def raw_headers(self) -> Dict[str, HeaderValue]:
        """Return all headers as stored, repeated headers as lists."""
        return copy.deepcopy(self._metadata["headers"])

    def raw_header(self, name: str) -> Optional[str]:
        """
        Return the raw value of a header (case-insensitive).

        For a repeated header the first occurrence wins; use raw_header_all()
        or raw_headers() for every occurrence.
        """
        value = self._metadata["headers"].get(name.lower())
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def raw_header_all(self, name: str) -> List[str]:
        """Return every raw occurrence of a header, in message order."""
        value = self._metadata["headers"].get(name.lower())
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        return [value]

    def headers(self) -> Dict[str, HeaderValue]:
        """Return all headers with encoded words decoded."""
        decode = self._header_decoder.decode
        return {
            name: [decode(item) for item in value] if isinstance(value, list) else decode(value)
            for name, value in self._metadata["headers"].items()
        }

    def header(self, name: str) -> Optional[str]:
        """Return the decoded value of a header, first occurrence wins."""
        raw = self.raw_header(name)
        if raw is None:
            return None
        return self._header_decoder.decode(raw)

    def header_all(self, name: str) -> List[str]:
        """Return every occurrence of a header, decoded."""
        return [self._header_decoder.decode(value) for value in self.raw_header_all(name)]

    # ------------------------------------------------------------------
    # Raw bytes
    # ------------------------------------------------------------------

    def extract_range(self, start: Optional[int], end: Optional[int]) -> bytes:
        """Read [start, end) from the message source; b"" if start >= end."""
        return self._source.read_range(start, end)

    def full_part_bytes(self) -> bytes:
        """Headers and body exactly as serialized in the message."""
        return self.extract_range(self.starting_position, self.ending_position)

    def body_bytes(self) -> bytes:
        """Body only, still transfer-encoded."""
        return self.extract_range(self.starting_position_body, self.ending_position_body)

    def iter_body(self, chunk_size: Optional[int] = None) -> Iterator[bytes]:
        """Yield the still-encoded body in chunks without reading it whole."""
        return self._source.iter_range(
            self.starting_position_body, self.ending_position_body, chunk_size
        )

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_text_subtype(self, subtype: str) -> bool:
        """
        Check whether this part is displayable text/<subtype>.

        True when the disposition is absent, empty or exactly "inline" and the
        content type is exactly "text/<subtype>". No case folding.
        """
        disposition = self.content_disposition
        if disposition and disposition != "inline":
            return False
        return self.content_type == f"text/{subtype}"

    def filename(self) -> Optional[str]:
        """Decoded filename from Content-Disposition, else from the Content-Type name."""
        name = self.disposition_filename or self.content_name
        if not name:
            return None
        return self._header_decoder.decode(name)

    def is_attachment(self) -> bool:
        """True for attachment dispositions and for inline parts that carry a filename."""
        disposition = (self.content_disposition or "").lower()
        if disposition == "attachment":
            return True
        return disposition == "inline" and bool(self.disposition_filename or self.content_name)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def transfer_decoded(self) -> bytes:
        """Body with the content-transfer-encoding removed."""
        return self._transfer_decoder.decode(self.body_bytes(), self.transfer_encoding)

    def decoded(self) -> str:
        """Body with the transfer encoding removed, then converted from its charset."""
        return self._charset_converter.convert(self.transfer_decoded(), self.charset)

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def charset_converter(self) -> CharsetConverter:
        return self._charset_converter

    @property
    def transfer_decoder(self) -> TransferDecoder:
        return self._transfer_decoder

    @property
    def header_decoder(self) -> HeaderWordDecoder:
        return self._header_decoder

    def set_charset_converter(self, charset_converter: CharsetConverter) -> None:
        self._charset_converter = charset_converter

    def set_transfer_decoder(self, transfer_decoder: TransferDecoder) -> None:
        self._transfer_decoder = transfer_decoder

    def set_header_decoder(self, header_decoder: HeaderWordDecoder) -> None:
        self._header_decoder = header_decoder
