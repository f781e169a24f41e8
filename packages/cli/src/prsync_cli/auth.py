"""Credential lookup for the GitHub API.

Sources are tried in order and the first non-empty token wins:
``GITHUB_TOKEN``, then ``GH_TOKEN`` (the variable the gh CLI itself reads),
then the token of an existing ``gh auth login`` session.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable

logger = logging.getLogger(__name__)

_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
_GH_TIMEOUT_SECONDS = 5


def _token_from_env() -> str | None:
    for name in _ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            logger.debug("Using GitHub token from $%s.", name)
            return value
    return None


def _token_from_gh_session() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TIMEOUT_SECONDS,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("No token from gh CLI: %s", e)
        return None
    token = result.stdout.strip() if result.returncode == 0 else ""
    if token:
        logger.debug("Using GitHub token from the gh CLI session.")
    return token or None


_SOURCES: tuple[Callable[[], str | None], ...] = (_token_from_env, _token_from_gh_session)


def resolve_github_token() -> str | None:
    """Return the first available GitHub token, or None.

    Never raises; commands that need a token report the missing credential
    themselves.
    """
    for source in _SOURCES:
        token = source()
        if token:
            return token
    return None
