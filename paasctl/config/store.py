"""RepoConfigStore — persisted list of configured plugin repositories.

The store is the only writer of the repository list. Readers take a
snapshot with ``list_repositories()`` and never mutate it.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from paasctl.config.schema import CliConfigFile
from paasctl.exceptions import ConfigError, DuplicateRepoError, UnknownRepoError
from paasctl.types import PluginRepo

logger = logging.getLogger(__name__)


class RepoConfigStore:
    """YAML-backed repository list.

    Args:
        path: Location of ``config.yaml``. A missing file is an empty config.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def list_repositories(self) -> list[PluginRepo]:
        """Return a snapshot of the configured repositories, in configured order."""
        return list(self._load().plugin_repos)

    def find(self, name: str) -> PluginRepo:
        """Case-insensitive lookup by name.

        Raises:
            UnknownRepoError: No repository with that name.
        """
        for repo in self.list_repositories():
            if repo.same_name(name):
                return repo
        raise UnknownRepoError(f"Plugin repo '{name}' does not exist", repo_name=name)

    def add_repository(self, repo: PluginRepo) -> None:
        """Append a repository. Callers run duplicate detection first; this re-checks.

        Raises:
            DuplicateRepoError: Name or URL already configured.
        """
        current = self._load()
        for existing in current.plugin_repos:
            if existing.same_name(repo.name):
                raise DuplicateRepoError(
                    f'Plugin repo named "{repo.name}" already exists, please use another name.',
                    repo_name=existing.name,
                    url=existing.url,
                )
            if existing.same_url(repo.url):
                raise DuplicateRepoError(
                    f"{existing.url} ({existing.name}) already exists.",
                    repo_name=existing.name,
                    url=existing.url,
                )
        self._save(CliConfigFile(plugin_repos=[*current.plugin_repos, repo]))
        logger.info("Added plugin repo '%s' (%s)", repo.name, repo.url)

    def remove_repository(self, name: str) -> PluginRepo:
        """Remove a repository by name (case-insensitive) and return it.

        Raises:
            UnknownRepoError: No repository with that name.
        """
        current = self._load()
        kept = [r for r in current.plugin_repos if not r.same_name(name)]
        removed = [r for r in current.plugin_repos if r.same_name(name)]
        if not removed:
            raise UnknownRepoError(f"Plugin repo '{name}' does not exist", repo_name=name)
        self._save(CliConfigFile(plugin_repos=kept))
        logger.info("Removed plugin repo '%s'", removed[0].name)
        return removed[0]

    # ─── File I/O ─────────────────────────────────────────────────────────────

    def _load(self) -> CliConfigFile:
        if not self._path.exists():
            return CliConfigFile()
        try:
            raw = yaml.safe_load(self._path.read_text())
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigError(
                f"Could not read config file {self._path}: {exc}", path=str(self._path)
            ) from exc
        try:
            return CliConfigFile.model_validate(raw or {})
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid config file {self._path}: {exc}", path=str(self._path)
            ) from exc

    def _save(self, data: CliConfigFile) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                yaml.safe_dump(data.model_dump(mode="json"), sort_keys=False)
            )
        except OSError as exc:
            raise ConfigError(
                f"Could not write config file {self._path}: {exc}", path=str(self._path)
            ) from exc
