"""PluginRepoManager tests.

Tests cover:
    - add(): pre-flight index fetch, persistence, URL derivation
    - add(): invalid or malformed URL / empty name fail without network I/O
    - add(): duplicates detected before any request
    - add(): failed pre-flight leaves the config unchanged
    - remove(), list_repos(), list_plugins() with a failing repo
"""

import httpx
import pytest
import respx

from paasctl.exceptions import (
    DuplicateRepoError,
    NetworkError,
    NotAPluginRepoError,
    UnknownRepoError,
    UsageError,
)
from paasctl.plugins.repos import PluginRepoManager
from paasctl.types import PluginIndex, PluginRepo

_EMPTY_INDEX = {"plugins": []}


class TestAdd:
    @pytest.mark.asyncio
    @respx.mock
    async def test_adds_after_preflight(self, repo_store):
        route = respx.get("https://r.example/list").mock(
            return_value=httpx.Response(200, json=_EMPTY_INDEX)
        )
        manager = PluginRepoManager(repo_store)

        added = await manager.add("  R  ", "https://r.example/")

        assert added == PluginRepo(name="R", url="https://r.example/")
        assert route.call_count == 1
        assert repo_store.list_repositories() == [added]

    @pytest.mark.asyncio
    async def test_invalid_url_makes_no_request(self, repo_store):
        manager = PluginRepoManager(repo_store)
        with respx.mock:
            with pytest.raises(UsageError) as exc_info:
                await manager.add("R", "ftp://r.example")
            assert respx.calls.call_count == 0
        assert "ftp://r.example is not a valid url" in str(exc_info.value)
        assert not repo_store.path.exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["http://[::1", "http://exa mple.com"])
    async def test_malformed_url_makes_no_request(self, repo_store, url):
        manager = PluginRepoManager(repo_store)
        with respx.mock:
            with pytest.raises(UsageError) as exc_info:
                await manager.add("priv", url)
            assert respx.calls.call_count == 0
        assert "is not a valid url" in str(exc_info.value)
        assert not repo_store.path.exists()

    @pytest.mark.asyncio
    async def test_empty_name(self, repo_store):
        with pytest.raises(UsageError):
            await PluginRepoManager(repo_store).add("   ", "https://r.example")

    @pytest.mark.asyncio
    async def test_duplicate_name_makes_no_request(self, repo_store, main_repo):
        manager = PluginRepoManager(repo_store)
        with respx.mock:
            with pytest.raises(DuplicateRepoError) as exc_info:
                await manager.add("Main", "https://new.example")
            assert respx.calls.call_count == 0
        assert 'Plugin repo named "Main" already exists' in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_duplicate_url(self, repo_store, main_repo):
        with pytest.raises(DuplicateRepoError) as exc_info:
            await PluginRepoManager(repo_store).add("other", "https://r.example")
        assert "https://r.example/ (main) already exists." == str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_plugins_key_not_persisted(self, repo_store, main_repo):
        before = repo_store.path.read_text()
        respx.get("https://new.example/list").mock(return_value=httpx.Response(200, json={"x": 1}))
        with pytest.raises(NotAPluginRepoError):
            await PluginRepoManager(repo_store).add("new", "https://new.example/")
        assert repo_store.path.read_text() == before

    @pytest.mark.asyncio
    @respx.mock
    async def test_unreachable_not_persisted(self, repo_store):
        respx.get("https://new.example/list").mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(NetworkError) as exc_info:
            await PluginRepoManager(repo_store).add("new", "https://new.example")
        assert exc_info.value.is_dial_failure
        assert repo_store.list_repositories() == []


class TestRemoveAndList:
    def test_remove(self, repo_store, main_repo):
        manager = PluginRepoManager(repo_store)
        assert manager.remove("main") == main_repo
        assert manager.list_repos() == []

    def test_remove_unknown(self, repo_store):
        with pytest.raises(UnknownRepoError):
            PluginRepoManager(repo_store).remove("main")

    @pytest.mark.asyncio
    async def test_list_plugins_keeps_going_after_failure(self, repo_store, main_repo):
        repo_store.add_repository(PluginRepo(name="broken", url="https://broken.example"))
        with respx.mock:
            respx.get("https://r.example/list").mock(
                return_value=httpx.Response(
                    200,
                    json={"plugins": [{"name": "foo", "version": "1.0.0", "binaries": []}]},
                )
            )
            respx.get("https://broken.example/list").mock(return_value=httpx.Response(404))
            listings = await PluginRepoManager(repo_store).list_plugins()

        assert [repo.name for repo, _ in listings] == ["main", "broken"]
        assert isinstance(listings[0][1], PluginIndex)
        assert listings[0][1].plugins[0].name == "foo"
        assert isinstance(listings[1][1], NotAPluginRepoError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_plugins_single_repo(self, repo_store, main_repo):
        repo_store.add_repository(PluginRepo(name="other", url="https://o.example"))
        respx.get("https://r.example/list").mock(return_value=httpx.Response(200, json=_EMPTY_INDEX))
        listings = await PluginRepoManager(repo_store).list_plugins("MAIN")
        assert len(listings) == 1

    @pytest.mark.asyncio
    async def test_list_plugins_unknown_repo(self, repo_store):
        with pytest.raises(UnknownRepoError):
            await PluginRepoManager(repo_store).list_plugins("ghost")
