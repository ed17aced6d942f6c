import httpx
import pytest

from webproxy.proxy.headers import (
    CORS_HEADERS,
    REQUEST_HEADER_ALLOW_LIST,
    RESPONSE_HEADER_ALLOW_LIST,
    HeaderPolicy,
    build_downstream_headers,
    build_upstream_headers,
    filter_request_headers,
    filter_response_headers,
    set_header,
)
from webproxy.proxy.url_classifier import parse_target


@pytest.fixture
def target():
    return parse_target("https://example.com:8443/dir/page.html?x=1")


class TestFilterRequestHeaders:
    def test_only_allow_listed_names_survive(self):
        inbound = {
            "Accept": "text/html",
            "Accept-Language": "en",
            "Cache-Control": "no-cache",
            "Content-Type": "application/json",
            "User-Agent": "client",
            "Cookie": "session=1",
            "Authorization": "Bearer abc",
            "X-Forwarded-For": "10.0.0.1",
            "Host": "proxy.test",
        }

        result = filter_request_headers(inbound)

        assert result == {
            "Accept": "text/html",
            "Accept-Language": "en",
            "Cache-Control": "no-cache",
            "Content-Type": "application/json",
            "User-Agent": "client",
        }

    def test_case_insensitive_match_preserves_case(self):
        result = filter_request_headers({"aCCePt": "*/*"})
        assert result == {"aCCePt": "*/*"}

    def test_accepts_header_pairs(self):
        result = filter_request_headers([("accept", "a"), ("cookie", "c")])
        assert result == {"accept": "a"}

    def test_output_subset_of_allow_list(self):
        inbound = {name: "v" for name in ["x-a", "x-b", *REQUEST_HEADER_ALLOW_LIST]}
        result = filter_request_headers(inbound)
        assert set(result) == set(REQUEST_HEADER_ALLOW_LIST)


class TestFilterResponseHeaders:
    def test_only_allow_listed_names_survive(self):
        upstream = httpx.Headers(
            {
                "content-type": "text/html",
                "cache-control": "max-age=60",
                "expires": "Thu, 01 Jan 2030 00:00:00 GMT",
                "last-modified": "Wed, 01 Jan 2020 00:00:00 GMT",
                "etag": '"abc"',
                "set-cookie": "a=b",
                "content-security-policy": "default-src 'self'",
                "content-encoding": "gzip",
                "content-length": "123",
                "location": "https://elsewhere.example/",
            }
        )

        result = filter_response_headers(upstream)

        assert set(k.lower() for k in result) == set(RESPONSE_HEADER_ALLOW_LIST)
        assert result["etag"] == '"abc"'


class TestUpstreamHeaders:
    def test_overrides_applied_after_filtering(self, target):
        inbound = {"user-agent": "curl/8", "accept": "*/*", "origin": "https://proxy.test"}

        result = build_upstream_headers(inbound, target)

        assert result["Origin"] == "https://example.com:8443"
        assert result["Referer"] == "https://example.com:8443/dir/page.html?x=1"
        assert result["User-Agent"].startswith("Mozilla/5.0")
        assert result["accept"] == "*/*"
        # No duplicate under a different case
        assert "user-agent" not in result
        assert "origin" not in result

    def test_user_agent_comes_from_policy(self, target):
        policy = HeaderPolicy(user_agent="TestAgent/1.0")
        result = build_upstream_headers({}, target, policy)
        assert result["User-Agent"] == "TestAgent/1.0"


class TestDownstreamHeaders:
    def test_cors_headers_always_present(self):
        result = build_downstream_headers(httpx.Headers({"set-cookie": "a=b"}))
        for name, value in CORS_HEADERS.items():
            assert result[name] == value
        assert "set-cookie" not in result

    def test_content_length_only_when_given(self):
        upstream = httpx.Headers({"content-length": "10", "content-type": "text/html"})

        assert "Content-Length" not in build_downstream_headers(upstream)
        result = build_downstream_headers(upstream, content_length=42)
        assert result["Content-Length"] == "42"


def test_set_header_replaces_other_casing():
    headers = {"content-length": "1", "Accept": "a"}
    set_header(headers, "Content-Length", "2")
    assert headers == {"Accept": "a", "Content-Length": "2"}
