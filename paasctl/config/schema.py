"""Pydantic model for the persisted CLI configuration file (config.yaml)."""

from pydantic import BaseModel, Field, field_validator

from paasctl.types import PluginRepo


class CliConfigFile(BaseModel):
    """Root schema for config.yaml."""
    plugin_repos: list[PluginRepo] = Field(default_factory=list)

    @field_validator("plugin_repos", mode="before")
    @classmethod
    def null_repos(cls, v):
        return v or []

    @field_validator("plugin_repos")
    @classmethod
    def repos_must_be_unique(cls, v: list[PluginRepo]) -> list[PluginRepo]:
        for i, repo in enumerate(v):
            for other in v[:i]:
                if other.same_name(repo.name):
                    raise ValueError(f"Duplicate plugin repo name: '{repo.name}'")
                if other.same_url(repo.url):
                    raise ValueError(f"Duplicate plugin repo url: '{repo.url}'")
        return v
