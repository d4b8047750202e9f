# MIME part data model

from .mime_part import MimePart
from .part_metadata import HeaderValue, PartMetadata

__all__ = [
    "MimePart",
    "PartMetadata",
    "HeaderValue",
]
