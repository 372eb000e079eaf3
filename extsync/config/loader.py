"""Configuration file and environment loader."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import PublishConfig

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}


def _as_bool(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES


class ConfigLoader:
    """Load extsync configuration from YAML and environment variables."""

    CONFIG_FILENAME = "extsync.yaml"
    USER_CONFIG_DIR = Path.home() / ".extsync"

    def __init__(
        self,
        project_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        """Initialize config loader.

        Args:
            project_path: Project directory path. If None, uses current directory.
            environ: Environment mapping. If None, uses os.environ.
        """
        self._project_path = project_path or Path.cwd()
        self._environ = os.environ if environ is None else environ

    def get_config_path(self) -> Path | None:
        """Find config file (project-level first, then user-level).

        Returns:
            Path to config file if found, None otherwise.
        """
        project_config = self._project_path / self.CONFIG_FILENAME
        if project_config.exists():
            return project_config

        user_config = self.USER_CONFIG_DIR / self.CONFIG_FILENAME
        if user_config.exists():
            return user_config

        return None

    def load(self, config_path: Path | None = None) -> PublishConfig:
        """Load configuration and apply environment overrides.

        Args:
            config_path: Explicit config file. Overrides the lookup.

        Returns:
            PublishConfig with file values, environment overrides and defaults.

        Raises:
            ConfigurationError: If the file or an environment value is malformed.
        """
        path = config_path or self.get_config_path()
        data: dict = {}
        if path is None:
            logger.debug("No config file found, using defaults")
        else:
            data = self._read_file(path)
            logger.info(f"Loaded config from: {path}")

        try:
            config = PublishConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid configuration in {path}: {e}") from e

        return self._apply_environment(config)

    def _read_file(self, path: Path) -> dict:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"cannot parse config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"config file {path} must contain a mapping")
        return data

    def _apply_environment(self, config: PublishConfig) -> PublishConfig:
        env = self._environ

        repository = env.get("GITHUB_REPOSITORY")
        if repository:
            owner, sep, repo = repository.partition("/")
            if not sep or not owner or not repo or "/" in repo:
                raise ConfigurationError(
                    f"GITHUB_REPOSITORY must look like owner/repo, got {repository!r}"
                )
            config.source.owner = owner
            config.source.repo = repo

        if env.get("GITHUB_REF_NAME"):
            config.release_tag = env["GITHUB_REF_NAME"]

        if env.get("BR_EXT_DIR"):
            config.extensions = [
                ext.strip() for ext in env["BR_EXT_DIR"].split(",") if ext.strip()
            ]

        if env.get("BR_PROJECT_NAME"):
            config.source.project_name = env["BR_PROJECT_NAME"]

        if "BR_DRY_RUN" in env:
            config.dry_run = _as_bool(env["BR_DRY_RUN"])

        if "BR_OUTPUT_JSON" in env:
            config.output_json = _as_bool(env["BR_OUTPUT_JSON"])

        if env.get("GITEA_URL"):
            config.gitea.url = env["GITEA_URL"]

        if env.get("GITEA_TOKEN"):
            config.gitea.token = env["GITEA_TOKEN"]

        return config


def load_config(
    project_path: Path | str | None = None,
    config_path: Path | str | None = None,
) -> PublishConfig:
    """Load configuration from project or user directory plus the environment.

    Convenience function that creates a ConfigLoader and loads config.

    Args:
        project_path: Project directory path. If None, uses current directory.
        config_path: Explicit config file, skipping the lookup.

    Returns:
        PublishConfig with loaded or default values.
    """
    path = Path(project_path) if project_path else None
    explicit = Path(config_path) if config_path else None
    return ConfigLoader(path).load(explicit)
