from __future__ import annotations

from github import Auth, Github

from prsync_core.config import DEFAULT_ENDPOINT


def get_client(token: str, endpoint: str = DEFAULT_ENDPOINT) -> Github:
    return Github(auth=Auth.Token(token), base_url=endpoint)


def get_repo(client: Github, repo_name: str):
    return client.get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def file_url(html_url: str | None, sha: str, path: str | None, line: int | None = None) -> str | None:
    """Browser link to ``path`` at ``sha``, anchored on ``line`` when given."""
    if not html_url or not path:
        return None
    url = f"{html_url.rstrip('/')}/blob/{sha}/{path}"
    return f"{url}#L{line}" if line is not None else url
