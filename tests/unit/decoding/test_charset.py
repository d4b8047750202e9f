"""
Unit tests for charset conversion (decoding/charset.py).

Tests cover:
- Resolving declared charsets through aliases and the codec registry
- Decoding with known charsets
- Fallback policy for absent and unknown charsets
- Configuration via Settings values
"""

import pytest

from eml_mimepart.decoding import charset as charset_module
from eml_mimepart.decoding.charset import CharsetConverter, DefaultCharsetConverter

LATIN1_BYTES = "Café crème".encode("latin-1")


@pytest.fixture
def converter(mock_settings) -> DefaultCharsetConverter:
    return DefaultCharsetConverter(
        default_charset=mock_settings.default_charset,
        fallback_charset=mock_settings.fallback_charset,
        detect=mock_settings.detect_charset,
    )


class TestResolve:
    """Tests for DefaultCharsetConverter.resolve()."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "declared,expected",
        [
            ("UTF-8", "utf-8"),
            ("utf8", "utf-8"),
            ('"ISO-8859-1"', "iso8859-1"),
            ("latin1", "iso8859-1"),
            ("us-ascii", "ascii"),
            ("ks_c_5601-1987", "cp949"),
            ("x-sjis", "shift_jis"),
            ("win-1252", "cp1252"),
        ],
    )
    def test_known_names(self, converter, declared, expected):
        """Test mail spellings resolve to Python codecs."""
        assert converter.resolve(declared) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("declared", [None, "", "  ", "x-no-such-charset"])
    def test_unusable_names(self, converter, declared):
        """Test absent and unknown names resolve to None."""
        assert converter.resolve(declared) is None

    @pytest.mark.unit
    def test_custom_alias(self):
        """Test extra aliases extend the table."""
        converter = DefaultCharsetConverter(aliases={"X-Legacy-Western": "cp1252"})
        assert converter.resolve("x-legacy-western") == "cp1252"


class TestConvert:
    """Tests for DefaultCharsetConverter.convert()."""

    @pytest.mark.unit
    def test_satisfies_protocol(self, converter):
        """Test the default converter implements the CharsetConverter interface."""
        assert isinstance(converter, CharsetConverter)

    @pytest.mark.unit
    def test_declared_charset(self, converter):
        """Test bytes decode with the declared charset."""
        assert converter.convert(LATIN1_BYTES, "iso-8859-1") == "Café crème"

    @pytest.mark.unit
    def test_empty_data(self, converter):
        """Test empty bytes convert to empty text."""
        assert converter.convert(b"", "utf-8") == ""

    @pytest.mark.unit
    def test_invalid_bytes_replaced(self, converter):
        """Test undecodable bytes become replacement characters instead of raising."""
        assert converter.convert(b"ok \xff", "utf-8") == "ok \ufffd"

    @pytest.mark.unit
    def test_absent_charset_uses_default(self, converter):
        """Test a missing charset decodes with the default charset."""
        assert converter.convert("naïve".encode("utf-8"), None) == "naïve"

    @pytest.mark.unit
    def test_unknown_charset_uses_default(self, converter):
        """Test an unknown charset name does not raise."""
        assert converter.convert("naïve".encode("utf-8"), "x-garbage") == "naïve"

    @pytest.mark.unit
    def test_fallback_charset_when_default_fails(self, converter):
        """Test bytes invalid in the default charset fall back to Latin-1."""
        assert converter.convert(LATIN1_BYTES, None) == "Café crème"

    @pytest.mark.unit
    def test_detection_consulted_before_fallback(self, monkeypatch):
        """Test charset-normalizer is asked when the default charset fails."""

        class Guess:
            encoding = "cp1252"

            def __str__(self):
                return "guessed"

        class Matches:
            def best(self):
                return Guess()

        calls = []

        def from_bytes(data):
            calls.append(data)
            return Matches()

        monkeypatch.setattr(charset_module.charset_normalizer, "from_bytes", from_bytes)
        converter = DefaultCharsetConverter(detect=True)

        assert converter.convert(LATIN1_BYTES, None) == "guessed"
        assert calls == [LATIN1_BYTES]

    @pytest.mark.unit
    def test_detection_without_result_falls_back(self, monkeypatch):
        """Test a detection miss still ends in the fallback charset."""

        class Matches:
            def best(self):
                return None

        monkeypatch.setattr(charset_module.charset_normalizer, "from_bytes", lambda data: Matches())
        converter = DefaultCharsetConverter(detect=True, fallback_charset="cp1252")

        assert converter.convert(b"\x93quoted\x94", None) == "“quoted”"


NON_TEXT_CODECS = ["hex", "base64", "zlib", "rot13", "uu", "quopri", "bz2", "utf-8\x00"]


class TestNonTextCodecs:
    """Tests for codec names that are not text charsets."""

    @pytest.mark.unit
    @pytest.mark.parametrize("declared", NON_TEXT_CODECS)
    def test_resolve_rejects(self, converter, declared):
        """Test bytes-to-bytes codecs and malformed names do not resolve."""
        assert converter.resolve(declared) is None

    @pytest.mark.unit
    @pytest.mark.parametrize("declared", NON_TEXT_CODECS)
    def test_convert_falls_back(self, converter, declared):
        """Test converting with such a name uses the default charset instead of raising."""
        assert converter.convert("naïve".encode("utf-8"), declared) == "naïve"
        assert converter.convert(LATIN1_BYTES, declared) == "Café crème"

    @pytest.mark.unit
    def test_non_text_default_and_fallback_charsets(self):
        """Test misconfigured default/fallback charsets still decode."""
        converter = DefaultCharsetConverter(
            default_charset="zlib", fallback_charset="hex", detect=False
        )

        assert converter.convert(LATIN1_BYTES, None) == "Café crème"
