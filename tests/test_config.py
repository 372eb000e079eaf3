"""Tests for configuration loading."""

from pathlib import Path

import pytest

from extsync.config import ConfigLoader, PublishConfig
from extsync.errors import ConfigurationError


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.setattr(ConfigLoader, "USER_CONFIG_DIR", tmp_path / "home")


def test_defaults_without_file(tmp_path):
    config = ConfigLoader(tmp_path, environ={}).load()
    assert config == PublishConfig()
    assert config.gitea.request_timeout == 30.0
    assert not config.dry_run


def test_project_file(tmp_path):
    (tmp_path / "extsync.yaml").write_text(
        "gitea:\n"
        "  url: https://git.example.com\n"
        "source:\n"
        "  project_name: core\n"
        "extensions: [utils, cfe/ui]\n"
        "run_timeout: 60\n"
    )

    config = ConfigLoader(tmp_path, environ={}).load()

    assert config.gitea.url == "https://git.example.com"
    assert config.source.project_name == "core"
    assert config.extensions == ["utils", "cfe/ui"]
    assert config.run_timeout == 60


def test_user_file_is_fallback(tmp_path):
    user_dir = tmp_path / "home"
    user_dir.mkdir()
    (user_dir / "extsync.yaml").write_text("dry_run: true\n")

    loader = ConfigLoader(tmp_path / "project", environ={})

    assert loader.get_config_path() == user_dir / "extsync.yaml"
    assert loader.load().dry_run


def test_environment_overrides_file(tmp_path):
    (tmp_path / "extsync.yaml").write_text("release_tag: v0\nextensions: [old]\n")
    environ = {
        "GITHUB_REPOSITORY": "lib/ssl",
        "GITHUB_REF_NAME": "v1.2.0",
        "BR_EXT_DIR": "utils, cfe/ui ,",
        "BR_DRY_RUN": "true",
        "BR_OUTPUT_JSON": "0",
        "BR_PROJECT_NAME": "core",
        "GITEA_URL": "https://git.example.com",
        "GITEA_TOKEN": "secret",
    }

    config = ConfigLoader(tmp_path, environ=environ).load()

    assert (config.source.owner, config.source.repo) == ("lib", "ssl")
    assert config.release_tag == "v1.2.0"
    assert config.extensions == ["utils", "cfe/ui"]
    assert config.dry_run is True
    assert config.output_json is False
    assert config.source.project_name == "core"
    assert config.gitea.token == "secret"


@pytest.mark.parametrize("value", ["ssl", "/ssl", "lib/", "a/b/c"])
def test_malformed_repository_variable(tmp_path, value):
    with pytest.raises(ConfigurationError):
        ConfigLoader(tmp_path, environ={"GITHUB_REPOSITORY": value}).load()


@pytest.mark.parametrize("content", ["gitea: [unclosed\n", "- a\n", "run_timeout: soon\n"])
def test_malformed_file(tmp_path, content):
    path = tmp_path / "extsync.yaml"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        ConfigLoader(tmp_path, environ={}).load()


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError):
        ConfigLoader(tmp_path, environ={}).load(Path(tmp_path / "missing.yaml"))


def test_unknown_log_level_in_file(tmp_path):
    (tmp_path / "extsync.yaml").write_text("log_level: VERBOSE\n")
    with pytest.raises(ConfigurationError):
        ConfigLoader(tmp_path, environ={}).load()
