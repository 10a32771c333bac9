"""
Unit tests for AT-URI parsing in social.graze.lodestone.resolve.aturi
"""

import pytest

from social.graze.lodestone.errors import InvalidATURI
from social.graze.lodestone.resolve.aturi import ATURI, ResolutionDepth, parse_aturi


class TestParseATURI:
    """Test suite for parse_aturi."""

    def test_parse_bare_did(self):
        """A bare DID authority has no collection or record key."""
        result = parse_aturi("at://did:plc:abc123")
        assert result.authority == "did:plc:abc123"
        assert result.collection is None
        assert result.record_key is None
        assert result.depth == ResolutionDepth.repository

    def test_parse_handle_with_collection(self):
        result = parse_aturi("at://alice.example/app.bsky.feed.post")
        assert result.authority == "alice.example"
        assert result.collection == "app.bsky.feed.post"
        assert result.record_key is None
        assert result.depth == ResolutionDepth.collection

    def test_parse_full_record_uri(self):
        result = parse_aturi("at://did:plc:abc123/app.bsky.feed.post/3k2yihcrp6f2c")
        assert result == ATURI(
            authority="did:plc:abc123",
            collection="app.bsky.feed.post",
            record_key="3k2yihcrp6f2c",
        )
        assert result.depth == ResolutionDepth.record

    def test_parse_ignores_extra_segments(self):
        """Segments after the record key are dropped, not rejected."""
        result = parse_aturi("at://did:plc:abc123/app.bsky.feed.post/rkey/extra/more")
        assert result.collection == "app.bsky.feed.post"
        assert result.record_key == "rkey"

    def test_parse_trailing_slash(self):
        """An empty collection segment is treated as absent."""
        result = parse_aturi("at://did:plc:abc123/")
        assert result.collection is None
        assert result.depth == ResolutionDepth.repository

    def test_parse_does_not_decode_segments(self):
        result = parse_aturi("at://did:plc:abc123/app.bsky.feed.post/a%20b")
        assert result.record_key == "a%20b"

    def test_parse_missing_scheme(self):
        with pytest.raises(InvalidATURI, match="error-resolve-1000"):
            parse_aturi("https://bsky.app/profile/alice.example")

    def test_parse_missing_authority(self):
        with pytest.raises(InvalidATURI, match="error-resolve-1001"):
            parse_aturi("at://")

    def test_parse_empty_string(self):
        with pytest.raises(InvalidATURI):
            parse_aturi("")

    def test_aturi_is_immutable(self):
        result = parse_aturi("at://did:plc:abc123")
        with pytest.raises(Exception):
            result.authority = "did:plc:other"


class TestResolutionDepth:
    def test_depth_values(self):
        assert ResolutionDepth.repository == 1
        assert ResolutionDepth.collection == 2
        assert ResolutionDepth.record == 3
