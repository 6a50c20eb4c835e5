"""Unit tests for logging setup."""

import logging
from unittest.mock import patch

from deckpack.utils.logging import (
    INLINE_PREVIEW_LENGTH,
    setup_logging,
    shorten_inline_payloads,
)


class TestShortenInlinePayloads:
    """Tests for the inline payload processor."""

    def test_long_data_uri_shortened(self, png_data_uri):
        """Test data URIs are cut to a preview with their length."""
        event_dict = {"event": "asset_resolution_failed", "value": png_data_uri}

        result = shorten_inline_payloads(None, "warning", event_dict)

        assert result["value"].startswith(png_data_uri[:INLINE_PREVIEW_LENGTH])
        assert result["value"].endswith(f"... ({len(png_data_uri)} chars)")
        assert result["event"] == "asset_resolution_failed"

    def test_other_values_untouched(self):
        """Test short URIs, plain strings and non-strings pass through."""
        event_dict = {
            "event": "data:image/png;base64," + "A" * 100,
            "short": "data:,hi",
            "path": "slides[0].thumbnail",
            "src": "https://example.com/" + "a" * 100,
            "byte_size": 70,
        }
        expected = dict(event_dict)

        assert shorten_inline_payloads(None, "info", event_dict) == expected


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_format(self):
        """Test json format renders JSON and shortens payloads."""
        with patch("structlog.configure") as mock_configure, patch("logging.basicConfig"):
            setup_logging(level="INFO", log_format="json")

            processors = mock_configure.call_args[1]["processors"]
            processor_types = [type(p).__name__ for p in processors]
            assert "JSONRenderer" in processor_types
            assert shorten_inline_payloads in processors

    def test_text_format(self):
        """Test text format renders for the console."""
        with patch("structlog.configure") as mock_configure, patch("logging.basicConfig"):
            setup_logging(level="INFO", log_format="text")

            processors = mock_configure.call_args[1]["processors"]
            processor_types = [type(p).__name__ for p in processors]
            assert "ConsoleRenderer" in processor_types
            assert "JSONRenderer" not in processor_types
            assert shorten_inline_payloads in processors

    def test_level(self):
        """Test the level reaches the standard library config."""
        with patch("structlog.configure"), patch("logging.basicConfig") as mock_basic_config:
            setup_logging(level="debug")

            assert mock_basic_config.call_args[1]["level"] == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """Test unknown level names fall back to INFO."""
        with patch("structlog.configure"), patch("logging.basicConfig") as mock_basic_config:
            setup_logging(level="LOUD")

            assert mock_basic_config.call_args[1]["level"] == logging.INFO
