import pytest

from webproxy.proxy.errors import BlockedHostError, InvalidURLError
from webproxy.proxy.url_classifier import (
    DEFAULT_BLOCKED_HOST_PREFIXES,
    BlockList,
    parse_target,
    validate,
)


class TestParseTarget:
    """Parsing and scheme restriction."""

    @pytest.mark.parametrize(
        "candidate",
        [
            "https://example.com",
            "http://example.com/path/page.html",
            "https://example.com:8443/a?b=c#frag",
            "HTTPS://Example.COM/",
            "https://user:pw@example.com/",
        ],
    )
    def test_accepts_absolute_http_urls(self, candidate):
        target = parse_target(candidate)
        assert target.href == candidate
        assert target.scheme in ("http", "https")

    @pytest.mark.parametrize(
        "candidate",
        [
            "not a url",
            "",
            None,
            "/relative/path",
            "example.com/no-scheme",
            "ftp://example.com/file",
            "javascript:alert(1)",
            "data:text/html,hi",
            "http://",
            "http://exa mple.com/",
            "http://example.com:99999/",
            "http://[::1/",
        ],
    )
    def test_rejects_invalid_candidates(self, candidate):
        with pytest.raises(InvalidURLError) as exc_info:
            parse_target(candidate)
        assert exc_info.value.status_code == 400

    def test_invalid_message_carries_candidate(self):
        with pytest.raises(InvalidURLError) as exc_info:
            parse_target("not a url")
        assert exc_info.value.message == "Invalid URL: not a url"

    def test_origin_keeps_explicit_port(self):
        target = parse_target("http://example.com:8080/x")
        assert target.origin == "http://example.com:8080"
        assert target.hostname == "example.com"

    @pytest.mark.parametrize(
        "candidate, origin",
        [
            ("https://user:pw@example.com/dir/", "https://example.com"),
            ("https://example.com:443/", "https://example.com"),
            ("http://example.com:80/", "http://example.com"),
            ("https://Example.COM:8443/", "https://example.com:8443"),
            ("http://[2001:db8::1]:8080/", "http://[2001:db8::1]:8080"),
        ],
    )
    def test_origin_matches_browser_host(self, candidate, origin):
        assert parse_target(candidate).origin == origin

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_target("  https://example.com/  ").href == "https://example.com/"


class TestValidate:
    """Block-list enforcement."""

    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost/",
            "http://localhost:3000/admin",
            "http://127.0.0.1/",
            "http://0.0.0.0:8080/",
            "http://10.0.0.5/",
            "http://192.168.1.1/admin",
            "http://172.16.0.1/",
            "https://172.200.1.1/",
            "http://LOCALHOST/",
        ],
    )
    def test_blocked_hosts_are_rejected(self, url):
        with pytest.raises(BlockedHostError) as exc_info:
            validate(url)
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Access denied"

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/",
            "http://8.8.8.8/",
            "http://11.0.0.1/",
            "http://192.169.0.1/",
            "http://172example.com/",
        ],
    )
    def test_public_hosts_pass(self, url):
        assert validate(url).href == url

    def test_prefix_match_is_coarse(self):
        # A public name that merely starts with a blocked prefix is refused too
        with pytest.raises(BlockedHostError):
            validate("http://10.example.com/")

    def test_ipv6_loopback_is_not_covered(self):
        target = validate("http://[::1]:8080/")
        assert target.hostname == "::1"

    def test_custom_block_list(self):
        block_list = BlockList(DEFAULT_BLOCKED_HOST_PREFIXES + ("::",))
        with pytest.raises(BlockedHostError):
            validate("http://[::1]/", block_list)
        assert validate("https://example.com/", block_list)

    def test_invalid_wins_over_blocked(self):
        with pytest.raises(InvalidURLError):
            validate("ftp://127.0.0.1/")
