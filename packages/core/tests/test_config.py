"""Tests for configuration loading and repository resolution."""

import pytest

from prsync_core.config import (
    DEFAULT_ENDPOINT,
    is_enabled,
    load_config,
    parse_git_url,
    require_pull_request,
    resolve_repository,
)
from prsync_core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_API_URL", raising=False)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["pull_request"] is None
    assert config["endpoint"] == DEFAULT_ENDPOINT
    assert config["max_global_issues"] == 10
    assert config["inline_comments"] is True
    assert config["new_issues_only"] is False
    assert config["status_context"] == "prsync"
    assert config["github_token"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prsync.yml"
    cfg.write_text("pull_request: 12\nmax_global_issues: 3\ninline_comments: false\n")
    config = load_config(config_path=str(cfg))
    assert config["pull_request"] == 12
    assert config["max_global_issues"] == 3
    assert config["inline_comments"] is False


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prsync.yml"
    cfg.write_text("repository: acme/web\n")
    config = load_config(config_path=str(cfg), cli_overrides={"repository": "acme/api"})
    assert config["repository"] == "acme/api"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prsync.yml"
    cfg.write_text("repository: acme/web\n")
    config = load_config(config_path=str(cfg), cli_overrides={"repository": None})
    assert config["repository"] == "acme/web"


def test_non_mapping_config_rejected(tmp_path):
    cfg = tmp_path / ".prsync.yml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_config(config_path=str(cfg))


def test_env_credentials_and_endpoint(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
    config = load_config(config_path=str(tmp_path / "none.yml"))
    assert config["github_token"] == "ghp_env"
    assert config["endpoint"] == "https://ghe.example.com/api/v3"


def test_explicit_endpoint_wins_over_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
    cfg = tmp_path / ".prsync.yml"
    cfg.write_text("endpoint: https://other.example.com/api/v3\n")
    assert load_config(config_path=str(cfg))["endpoint"] == "https://other.example.com/api/v3"


class TestParseGitUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "git@github.com:acme/web.git",
            "https://github.com/acme/web.git",
            "http://github.com/acme/web.git",
            "scm:git:git@github.com:acme/web.git",
        ],
    )
    def test_known_forms(self, url):
        assert parse_git_url(url) == "acme/web"

    def test_unknown_form(self):
        assert parse_git_url("https://gitlab.com/acme/web.git") is None


class TestResolveRepository:
    def test_slug(self):
        assert resolve_repository({"repository": "acme/web"}) == "acme/web"

    def test_git_url_in_repository(self):
        assert resolve_repository({"repository": "git@github.com:acme/web.git"}) == "acme/web"

    def test_falls_back_to_scm_url(self):
        assert resolve_repository({"repository": None, "scm_url": "https://github.com/acme/api.git"}) == "acme/api"

    def test_unparseable_repository(self):
        with pytest.raises(ConfigurationError):
            resolve_repository({"repository": "not a slug"})

    def test_unparseable_scm_url(self):
        with pytest.raises(ConfigurationError):
            resolve_repository({"scm_url": "svn://example.com/trunk"})

    def test_nothing_configured(self):
        with pytest.raises(ConfigurationError, match="No repository"):
            resolve_repository({})


class TestPullRequestNumber:
    def test_enabled_only_with_number(self):
        assert not is_enabled({"pull_request": None})
        assert not is_enabled({"pull_request": ""})
        assert is_enabled({"pull_request": 4})

    def test_string_number_accepted(self):
        assert require_pull_request({"pull_request": "42"}) == 42

    @pytest.mark.parametrize("value", [None, "abc", 0, -3])
    def test_invalid_number(self, value):
        with pytest.raises(ConfigurationError):
            require_pull_request({"pull_request": value})


def test_malformed_yaml_rejected(tmp_path):
    cfg = tmp_path / ".prsync.yml"
    cfg.write_text("repository: [acme/web\n")
    with pytest.raises(ConfigurationError, match="not valid YAML"):
        load_config(config_path=str(cfg))
