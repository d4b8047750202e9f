"""
Part metadata model - the field map the message tokenizer hands to each part.

Keys are hyphenated as they come out of the tokenizer ("content-type",
"starting-pos-body", ...). Unknown keys are kept.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

HeaderValue = Union[str, List[str]]


class PartMetadata(BaseModel):
    """Validated metadata of a single MIME part."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    headers: Dict[str, HeaderValue] = Field(
        description="Raw header values keyed by lowercase name; repeated headers as a list"
    )

    content_type: Optional[str] = Field(None, alias="content-type")
    content_disposition: Optional[str] = Field(None, alias="content-disposition")
    content_id: Optional[str] = Field(None, alias="content-id")
    content_name: Optional[str] = Field(None, alias="content-name")
    disposition_filename: Optional[str] = Field(None, alias="disposition-filename")
    transfer_encoding: Optional[str] = Field(None, alias="transfer-encoding")
    charset: Optional[str] = Field(None, alias="charset")

    # Absolute byte offsets into the raw message, half-open
    starting_pos: Optional[int] = Field(None, alias="starting-pos")
    ending_pos: Optional[int] = Field(None, alias="ending-pos")
    starting_pos_body: Optional[int] = Field(None, alias="starting-pos-body")
    ending_pos_body: Optional[int] = Field(None, alias="ending-pos-body")

    @field_validator("headers")
    @classmethod
    def lowercase_header_names(cls, headers: Dict[str, HeaderValue]) -> Dict[str, HeaderValue]:
        """Lowercase header names; for colliding names the first one seen is kept."""
        lowered: Dict[str, HeaderValue] = {}
        for name, value in headers.items():
            lowered.setdefault(name.lower(), value)
        return lowered

    def to_mapping(self) -> Dict[str, Any]:
        """
        Dump back to the hyphenated mapping.

        Only keys that were present in the input are emitted, so absent fields
        stay absent.
        """
        mapping = self.model_dump(by_alias=True, exclude_unset=True)
        mapping.update(self.model_extra or {})
        return mapping
