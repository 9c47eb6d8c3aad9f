"""RepoIndexClient / parse_index / resolve tests.

Tests cover:
    - list_url() derivation and URL validation
    - fetch_index(): success, 404, other HTTP errors, missing ``plugins``,
      malformed JSON, malformed entries, dial and timeout failures
    - resolve(): highest version, ties, unparseable versions,
      platform fallback, PluginNotFound vs PlatformUnsupported
"""

import json

import httpx
import pytest
import respx

from paasctl.exceptions import (
    DecodeError,
    HttpError,
    NetworkError,
    NetworkErrorKind,
    NotAPluginRepoError,
    PlatformUnsupportedError,
    PluginNotFoundError,
    UsageError,
)
from paasctl.plugins.repo_index import RepoIndexClient, list_url, parse_index, resolve
from paasctl.types import PluginIndex, PluginRepo


def _entry(name="foo", version="1.0.0", platforms=("linux64",), checksum=""):
    return {
        "name": name,
        "version": version,
        "binaries": [
            {"platform": p, "url": f"https://dl.example/{name}-{version}-{p}", "checksum": checksum}
            for p in platforms
        ],
    }


def _index(*entries) -> PluginIndex:
    return PluginIndex.model_validate({"plugins": list(entries)})


# ─── list_url ─────────────────────────────────────────────────────────────────


class TestListUrl:
    @pytest.mark.parametrize(
        "base, expected",
        [
            ("http://x.example", "http://x.example/list"),
            ("http://x.example/", "http://x.example/list"),
            ("https://x.example/repo/", "https://x.example/repo/list"),
            ("  https://x.example  ", "https://x.example/list"),
            ("HTTPS://x.example", "HTTPS://x.example/list"),
        ],
    )
    def test_derivation(self, base, expected):
        assert list_url(base) == expected

    @pytest.mark.parametrize("base", ["ftp://x.example", "x.example", "", "file:///tmp/repo"])
    def test_rejects_non_http(self, base):
        with pytest.raises(UsageError) as exc_info:
            list_url(base)
        assert "is not a valid url" in str(exc_info.value)

    @pytest.mark.parametrize(
        "base", ["http://[::1", "http://exa mple.com", "http://", "https:///list", "http://x.example\tfoo"]
    )
    def test_rejects_malformed_http(self, base):
        with pytest.raises(UsageError):
            list_url(base)

    def test_bracketed_ipv6_host_is_fine(self):
        assert list_url("http://[::1]:8080/repo") == "http://[::1]:8080/repo/list"


# ─── fetch_index ──────────────────────────────────────────────────────────────


class TestFetchIndex:
    @pytest.mark.asyncio
    @respx.mock
    async def test_parses_index(self):
        respx.get("https://r.example/list").mock(
            return_value=httpx.Response(200, json={"plugins": [_entry(version="1.2.0")]})
        )
        index = await RepoIndexClient().fetch_index(PluginRepo(name="main", url="https://r.example/"))
        assert [e.name for e in index.plugins] == ["foo"]
        assert index.plugins[0].binaries[0].platform == "linux64"

    @pytest.mark.asyncio
    @respx.mock
    async def test_accepts_bare_url_and_sends_user_agent(self):
        route = respx.get("https://r.example/list").mock(
            return_value=httpx.Response(200, json={"plugins": []})
        )
        index = await RepoIndexClient().fetch_index("https://r.example")
        assert index.plugins == []
        assert route.calls.last.request.headers["User-Agent"].startswith("paasctl/")

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_fields_are_ignored(self):
        body = {"plugins": [dict(_entry(), authors=[{"name": "x"}], created="2016-01-01")], "extra": 1}
        respx.get("https://r.example/list").mock(return_value=httpx.Response(200, json=body))
        index = await RepoIndexClient().fetch_index("https://r.example")
        assert index.plugins[0].name == "foo"

    @pytest.mark.asyncio
    @respx.mock
    async def test_404_is_not_a_plugin_repo(self):
        respx.get("https://r.example/list").mock(return_value=httpx.Response(404))
        with pytest.raises(NotAPluginRepoError) as exc_info:
            await RepoIndexClient().fetch_index("https://r.example")
        assert "valid plugin repo" in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_500_is_http_error(self):
        respx.get("https://r.example/list").mock(return_value=httpx.Response(500))
        with pytest.raises(HttpError) as exc_info:
            await RepoIndexClient().fetch_index("https://r.example")
        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, NotAPluginRepoError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_plugins_key(self):
        respx.get("https://r.example/list").mock(return_value=httpx.Response(200, json={"items": []}))
        with pytest.raises(NotAPluginRepoError) as exc_info:
            await RepoIndexClient().fetch_index("https://r.example")
        assert '"Plugins" object not found' in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_json_is_decode_error(self):
        respx.get("https://r.example/list").mock(
            return_value=httpx.Response(200, content=b"<html>hello</html>")
        )
        with pytest.raises(DecodeError):
            await RepoIndexClient().fetch_index("https://r.example")

    @pytest.mark.asyncio
    @respx.mock
    async def test_connect_error_is_dial(self):
        respx.get("https://r.example/list").mock(side_effect=httpx.ConnectError("no route to host"))
        with pytest.raises(NetworkError) as exc_info:
            await RepoIndexClient().fetch_index("https://r.example")
        assert exc_info.value.kind == NetworkErrorKind.DIAL
        assert exc_info.value.url == "https://r.example/list"

    @pytest.mark.asyncio
    @respx.mock
    async def test_read_timeout_is_timeout(self):
        respx.get("https://r.example/list").mock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(NetworkError) as exc_info:
            await RepoIndexClient().fetch_index("https://r.example")
        assert exc_info.value.kind == NetworkErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_invalid_base_url_makes_no_request(self):
        with respx.mock:
            with pytest.raises(UsageError):
                await RepoIndexClient().fetch_index("ftp://r.example")
            assert respx.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_malformed_base_url_makes_no_request(self):
        with respx.mock:
            with pytest.raises(UsageError):
                await RepoIndexClient().fetch_index("http://[::1")
            assert respx.calls.call_count == 0


class TestParseIndex:
    def test_null_plugins_is_not_a_plugin_repo(self):
        with pytest.raises(NotAPluginRepoError):
            parse_index(b'{"plugins": null}')

    def test_json_array_is_not_a_plugin_repo(self):
        with pytest.raises(NotAPluginRepoError):
            parse_index(b"[1, 2, 3]")

    def test_malformed_entry_is_decode_error(self):
        with pytest.raises(DecodeError):
            parse_index(json.dumps({"plugins": [{"name": "foo", "binaries": "nope"}]}).encode())

    def test_duplicate_platform_is_decode_error(self):
        entry = _entry(platforms=("linux64", "linux64"))
        with pytest.raises(DecodeError):
            parse_index(json.dumps({"plugins": [entry]}).encode())

    def test_numeric_version_and_null_checksum(self):
        entry = _entry()
        entry["version"] = 2
        entry["binaries"][0]["checksum"] = None
        index = parse_index(json.dumps({"plugins": [entry]}).encode())
        assert index.plugins[0].version == "2"
        assert index.plugins[0].binaries[0].checksum == ""


# ─── resolve ──────────────────────────────────────────────────────────────────


class TestResolve:
    def test_picks_highest_version(self):
        index = _index(_entry(version="1.10.0"), _entry(version="1.2.0"), _entry(version="1.9.1"))
        resolved = resolve(index, "foo", "linux64")
        assert resolved.version == "1.10.0"
        assert resolved.url == "https://dl.example/foo-1.10.0-linux64"
        assert resolved.platform == "linux64"

    def test_equal_versions_prefer_later_entry(self):
        first = _entry(version="1.0")
        second = _entry(version="1.0.0")
        second["binaries"][0]["url"] = "https://mirror.example/foo"
        resolved = resolve(_index(first, second), "foo", "linux64")
        assert resolved.url == "https://mirror.example/foo"

    def test_unparseable_versions_use_last_entry(self):
        index = _index(_entry(version="beta-two"), _entry(version="latest"))
        assert resolve(index, "foo", "linux64").version == "latest"

    def test_falls_back_to_version_with_platform(self):
        index = _index(
            _entry(version="1.0.0", platforms=("linux64", "osx")),
            _entry(version="2.0.0", platforms=("osx",)),
        )
        assert resolve(index, "foo", "linux64").version == "1.0.0"

    def test_carries_checksum(self):
        index = _index(_entry(checksum="a" * 40))
        assert resolve(index, "foo", "linux64").checksum == "a" * 40

    def test_name_match_is_case_sensitive(self):
        with pytest.raises(PluginNotFoundError) as exc_info:
            resolve(_index(_entry(name="foo")), "Foo", "linux64")
        assert not isinstance(exc_info.value, PlatformUnsupportedError)
        assert exc_info.value.plugin_name == "Foo"

    def test_platform_unsupported_lists_available(self):
        index = _index(_entry(platforms=("osx", "win64")))
        with pytest.raises(PlatformUnsupportedError) as exc_info:
            resolve(index, "foo", "linux64")
        err = exc_info.value
        assert err.platform == "linux64"
        assert err.available == ["osx", "win64"]
        assert isinstance(err, PluginNotFoundError)

    def test_empty_index(self):
        with pytest.raises(PluginNotFoundError):
            resolve(_index(), "foo", "linux64")
