"""
Tests for URI escaping helpers.
"""

from httpipe.escaping import encode_args, escape_path, escape_uri


class TestEscapePath:
    """Test escape_path."""

    def test_root(self):
        assert escape_path("/") == "/"
        assert escape_path("") == "/"
        assert escape_path("//") == "/"

    def test_preserves_trailing_slash(self):
        assert escape_path("/a/b/") == "/a/b/"
        assert escape_path("/a/b/").endswith("/")

    def test_without_trailing_slash(self):
        assert escape_path("/a/b") == "/a/b"

    def test_adds_leading_slash(self):
        assert escape_path("foo") == "/foo"

    def test_escapes_each_segment(self):
        """Test two segments joined by one slash."""
        escaped = escape_path("a b/c")
        assert escaped == "/a%20b/c"
        assert escaped.startswith("/")
        assert escaped.count("/") == 2

    def test_collapses_empty_segments(self):
        assert escape_path("/a//b") == "/a/b"

    def test_reserved_characters(self):
        assert escape_path("/a?b/c#d") == "/a%3Fb/c%23d"

    def test_unicode(self):
        assert escape_path("/café") == "/caf%C3%A9"


class TestEscapeUri:
    """Test escape_uri."""

    def test_unreserved_untouched(self):
        assert escape_uri("abc-_.~123") == "abc-_.~123"

    def test_slash_escaped(self):
        assert escape_uri("a/b") == "a%2Fb"


class TestEncodeArgs:
    """Test encode_args."""

    def test_simple(self):
        assert encode_args({"x": 1, "y": "two"}) == "x=1&y=two"

    def test_escapes(self):
        assert encode_args({"q": "a b&c"}) == "q=a%20b%26c"

    def test_list_values_repeat_key(self):
        assert encode_args({"id": [1, 2]}) == "id=1&id=2"

    def test_booleans_and_none(self):
        assert encode_args({"flag": True, "off": False, "none": None}) == "flag"

    def test_empty(self):
        assert encode_args({}) == ""
