"""Repository-wide position index built from every patch of a pull request."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from prsync_core.patch import parse_patch

if TYPE_CHECKING:
    from prsync_store.models import PatchFile

logger = logging.getLogger(__name__)


class RepositoryPositionIndex:
    """File path -> (file line -> diff position), for exactly the files the PR touches.

    A path absent from the index is untouched by the pull request. A path
    present with an empty map is touched but has no visible lines (binary
    diff, or inline comments disabled). The index is read-only once built.
    """

    def __init__(self, mapping: Mapping[str, Mapping[int, int]]):
        self._mapping = {path: dict(lines) for path, lines in mapping.items()}

    @classmethod
    def from_patch_files(cls, files: Iterable[PatchFile], inline_enabled: bool = True) -> RepositoryPositionIndex:
        mapping: dict[str, dict[int, int]] = {}
        for f in files:
            # Keep the file entry even without inline mapping so has_file() stays accurate.
            mapping[f.path] = parse_patch(f.patch) if inline_enabled else {}
        logger.debug("Indexed %d file(s) of the pull request", len(mapping))
        return cls(mapping)

    def has_file(self, path: str) -> bool:
        """True when the pull request adds, modifies or renames ``path``."""
        return path in self._mapping

    def has_file_line(self, path: str, line: int) -> bool:
        """True when ``line`` of ``path`` is visible in the diff."""
        return line in self._mapping.get(path, {})

    def position_for(self, path: str, line: int) -> int:
        """Return the diff position of ``line`` in ``path``; KeyError when not visible."""
        try:
            return self._mapping[path][line]
        except KeyError:
            raise KeyError(f"{path}:{line} is not visible in the pull request diff") from None

    def lines(self, path: str) -> dict[int, int]:
        return dict(self._mapping.get(path, {}))

    def files(self) -> list[str]:
        return sorted(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)
