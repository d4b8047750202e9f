"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- Mock settings/configuration
- Sample raw messages and their part metadata
- Buffer- and stream-backed parts
"""

import io
from typing import Callable

import pytest

from eml_mimepart.config import Settings
from eml_mimepart.logging_config import setup_logging
from eml_mimepart.models.mime_part import MimePart
from tests.fixtures.emails import SAMPLE_EMAILS, build_part_metadata


@pytest.fixture(scope="session", autouse=True)
def configure_logging() -> None:
    """Console logging at WARNING keeps test output readable."""
    setup_logging(Settings(log_level="WARNING", log_json=False))


@pytest.fixture
def mock_settings() -> Settings:
    """
    Create mock settings for testing with safe defaults.

    Returns:
        Settings instance with test configuration
    """
    return Settings(
        log_level="INFO",
        log_json=False,  # Easier to read in tests
        default_charset="utf-8",
        fallback_charset="iso-8859-1",
        detect_charset=False,
    )


@pytest.fixture
def sample_eml_bytes() -> bytes:
    """
    Get simple plain text email bytes for basic tests.

    Returns:
        bytes of a simple .eml file
    """
    return SAMPLE_EMAILS["simple_plain_text"]


@pytest.fixture
def make_part() -> Callable[..., MimePart]:
    """
    Build a single-part MimePart over a raw message.

    The returned factory takes the raw bytes and stream=True to back the part
    with a BytesIO instead of the in-memory buffer.
    """

    def _make(raw: bytes, part_id: str = "1", stream: bool = False, **overrides) -> MimePart:
        metadata = build_part_metadata(raw)
        metadata.update(overrides)
        source = io.BytesIO(raw) if stream else raw
        return MimePart(part_id, metadata, source)

    return _make


@pytest.fixture
def simple_part(make_part) -> MimePart:
    """Buffer-backed part of the simple plain text email."""
    return make_part(SAMPLE_EMAILS["simple_plain_text"])


@pytest.fixture
def multipart_eml() -> bytes:
    """
    Get multipart email with a text part and a PDF attachment.

    Returns:
        bytes of multipart/mixed email
    """
    return SAMPLE_EMAILS["multipart_attachment"]


@pytest.fixture
def multipart_parts(multipart_eml):
    """
    Child parts of the multipart email, sharing one BytesIO stream.

    Offsets are computed between boundary lines; the newline before each
    boundary belongs to the boundary.

    Returns:
        Tuple of (stream, [text part, attachment part])
    """
    raw = multipart_eml
    delimiter = b"--BOUNDARY\n"
    first = raw.index(delimiter) + len(delimiter)
    first_end = raw.index(b"\n--BOUNDARY\n", first)
    second = first_end + 1 + len(delimiter)
    second_end = raw.index(b"\n--BOUNDARY--", second)

    stream = io.BytesIO(raw)
    parts = [
        MimePart("1.1", build_part_metadata(raw, first, first_end), stream),
        MimePart("1.2", build_part_metadata(raw, second, second_end), stream),
    ]
    return stream, parts
