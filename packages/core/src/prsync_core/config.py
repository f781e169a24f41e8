import os
import re
from pathlib import Path
from typing import Optional

import yaml

from prsync_core.errors import ConfigurationError

DEFAULT_ENDPOINT = "https://api.github.com"

DEFAULT_CONFIG: dict = {
    "pull_request": None,  # None = feature disabled
    "repository": None,  # "owner/name" or a git URL
    "scm_url": None,  # fallback git URL when repository is not set
    "endpoint": DEFAULT_ENDPOINT,
    "max_global_issues": 10,
    "inline_comments": True,
    "new_issues_only": False,
    "status_context": "prsync",
    "rules_url": None,  # e.g. "https://sonar.example.com/coding_rules#rule_key="
}

_GIT_SSH_RE = re.compile(r".*@github\.com:(.*/.*)\.git$")
_GIT_HTTP_RE = re.compile(r"https?://github\.com/(.*/.*)\.git$")


def load_config(config_path: str = ".prsync.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prsync.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            try:
                file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"{config_path} is not valid YAML: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping of settings")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials and endpoint from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    if os.environ.get("GITHUB_API_URL") and config["endpoint"] == DEFAULT_ENDPOINT:
        config["endpoint"] = os.environ["GITHUB_API_URL"]

    return config


def parse_git_url(url: str) -> str | None:
    """Return the ``owner/name`` slug of an SSH or HTTPS GitHub URL, or None.

    The ``scm:git:`` prefix used by some build tools is tolerated.
    """
    for pattern in (_GIT_SSH_RE, _GIT_HTTP_RE):
        match = pattern.match(url.strip().removeprefix("scm:git:"))
        if match:
            return match.group(1)
    return None


def resolve_repository(config: dict) -> str:
    """
    Resolve the ``owner/name`` repository slug.

    ``repository`` wins and may be a slug or a git URL; otherwise the slug is
    derived from ``scm_url``. Raises ConfigurationError when neither yields one.
    """
    value = config.get("repository")
    if value:
        slug = parse_git_url(str(value)) or str(value)
        if re.fullmatch(r"[^/\s]+/[^/\s]+", slug):
            return slug
        raise ConfigurationError(f"Unable to parse repository {value!r}; expected owner/name or a git URL")

    scm_url = config.get("scm_url")
    if scm_url:
        slug = parse_git_url(str(scm_url))
        if slug:
            return slug
        raise ConfigurationError(f"Unable to derive the repository from scm_url {scm_url!r}")

    raise ConfigurationError("No repository configured. Set 'repository' or 'scm_url'.")


def is_enabled(config: dict) -> bool:
    """Pull request decoration runs only when a pull request number is configured."""
    return config.get("pull_request") not in (None, "")


def require_pull_request(config: dict) -> int:
    """Return the configured pull request number as a positive int."""
    value = config.get("pull_request")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid pull request number: {value!r}") from None
    if number <= 0:
        raise ConfigurationError(f"Invalid pull request number: {value!r}")
    return number
