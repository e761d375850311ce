"""
Tests for request serialization.
"""

import pytest

from httpipe import Pipe, RequestOptions
from httpipe.encoder import USER_AGENT, encode_request
from httpipe.exceptions import InvalidVersionError, ProtocolError
from httpipe.network.mock import MockTransport


def _lines(head: bytes):
    assert head.endswith(b"\r\n\r\n")
    return head[:-4].decode("latin-1").split("\r\n")


class TestEncodeRequest:
    """Test encode_request."""

    @pytest.fixture
    def pipe(self):
        return Pipe(MockTransport())

    def test_defaults(self, pipe):
        head, headers = encode_request(pipe, RequestOptions(), "example.com")
        lines = _lines(head)

        assert lines[0] == "GET / HTTP/1.1"
        assert headers == {
            "Host": "example.com",
            "User-Agent": USER_AGENT,
            "Accept": "*/*",
        }
        assert lines[1:] == [
            "Host: example.com",
            f"User-Agent: {USER_AGENT}",
            "Accept: */*",
        ]

    def test_method_uppercased_and_recorded(self, pipe):
        head, _ = encode_request(pipe, RequestOptions(method="head"), "h")
        assert head.startswith(b"HEAD / HTTP/1.1\r\n")
        assert pipe.method == "HEAD"

    def test_path_escaped_and_prefixed(self, pipe):
        head, _ = encode_request(pipe, RequestOptions(path="a b/c/"), "h")
        assert head.startswith(b"GET /a%20b/c/ HTTP/1.1\r\n")

    def test_query_string_verbatim(self, pipe):
        head, _ = encode_request(pipe, RequestOptions(path="/foo", query="x=1"), "h")
        assert head.startswith(b"GET /foo?x=1 HTTP/1.1\r\n")

    def test_query_table_encoded(self, pipe):
        opts = RequestOptions(path="/s", query={"q": "a b", "n": 2})
        head, _ = encode_request(pipe, opts, "h")
        assert head.startswith(b"GET /s?q=a%20b&n=2 HTTP/1.1\r\n")

    def test_http_1_0_defaults_keep_alive(self, pipe):
        head, headers = encode_request(pipe, RequestOptions(version=0), "h")
        assert head.startswith(b"GET / HTTP/1.0\r\n")
        assert headers["Connection"] == "Keep-Alive"

    def test_http_1_0_explicit_connection_kept(self, pipe):
        opts = RequestOptions(version=0, headers={"connection": "close"})
        _, headers = encode_request(pipe, opts, "h")
        assert headers["Connection"] == "close"

    def test_http_1_1_has_no_connection_default(self, pipe):
        _, headers = encode_request(pipe, RequestOptions(version=1), "h")
        assert "Connection" not in headers

    @pytest.mark.parametrize("version", [2, -1, "1", True])
    def test_invalid_version(self, pipe, version):
        with pytest.raises(InvalidVersionError):
            encode_request(pipe, RequestOptions(version=version), "h")

    def test_headers_normalized_and_overwritten(self, pipe):
        opts = RequestOptions(
            headers={"x-trace-id": "1", "X-TRACE-ID": "2", "content-type": "text/plain"}
        )
        head, headers = encode_request(pipe, opts, "h")
        assert headers["X-Trace-Id"] == "2"
        assert headers["Content-Type"] == "text/plain"
        assert b"X-Trace-Id: 2\r\n" in head
        assert b"X-Trace-Id: 1\r\n" not in head

    def test_caller_host_user_agent_accept_kept(self, pipe):
        opts = RequestOptions(
            headers={"host": "other", "user-agent": "me", "accept": "text/html"}
        )
        _, headers = encode_request(pipe, opts, "h")
        assert headers["Host"] == "other"
        assert headers["User-Agent"] == "me"
        assert headers["Accept"] == "text/html"

    def test_literal_body_forces_content_length(self, pipe):
        opts = RequestOptions(method="POST", body="héllo", headers={"Content-Length": "99"})
        head, headers = encode_request(pipe, opts, "h")
        assert headers["Content-Length"] == 6
        assert b"Content-Length: 6\r\n" in head

    @pytest.mark.parametrize("method", ["PUT", "POST", "put"])
    def test_put_post_without_body_send_zero_length(self, pipe, method):
        head, headers = encode_request(pipe, RequestOptions(method=method), "h")
        assert headers["Content-Length"] == 0
        assert b"Content-Length: 0\r\n" in head

    def test_post_non_numeric_length_coerced(self, pipe):
        opts = RequestOptions(method="POST", headers={"Content-Length": "abc"})
        _, headers = encode_request(pipe, opts, "h")
        assert headers["Content-Length"] == 0

    def test_post_numeric_length_kept_for_producer(self, pipe, producer):
        opts = RequestOptions(
            method="POST", headers={"Content-Length": "10"}, body=producer([b"x" * 10])
        )
        _, headers = encode_request(pipe, opts, "h")
        assert headers["Content-Length"] == 10

    def test_get_without_body_has_no_content_length(self, pipe):
        _, headers = encode_request(pipe, RequestOptions(), "h")
        assert "Content-Length" not in headers

    def test_multi_valued_header_repeats_line(self, pipe):
        opts = RequestOptions(headers={"Cookie": ["a=1", "b=2"]})
        head, _ = encode_request(pipe, opts, "h")
        lines = _lines(head)
        assert lines[1:3] == ["Cookie: a=1", "Cookie: b=2"]

    def test_caller_headers_precede_defaults(self, pipe):
        opts = RequestOptions(headers={"x-b": "2", "x-a": "1"})
        head, _ = encode_request(pipe, opts, "h")
        names = [line.split(":", 1)[0] for line in _lines(head)[1:]]
        assert names == ["X-B", "X-A", "Host", "User-Agent", "Accept"]

    def test_no_host_when_target_unknown(self, pipe):
        _, headers = encode_request(pipe, RequestOptions(), None)
        assert "Host" not in headers

    def test_uppercase_caller_headers_suppress_defaults(self, pipe):
        opts = RequestOptions(
            version=0, headers={"ACCEPT": "text/html", "CONNECTION": "close"}
        )
        head, headers = encode_request(pipe, opts, "h")
        assert headers["Accept"] == "text/html"
        assert headers["Connection"] == "close"
        assert head.count(b"Accept:") == 1
        assert head.count(b"Connection:") == 1
        assert b"ACCEPT" not in head

    def test_non_latin1_header_value(self, pipe):
        opts = RequestOptions(headers={"X-Name": "日本"})
        with pytest.raises(ProtocolError):
            encode_request(pipe, opts, "h")
