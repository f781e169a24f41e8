"""Failures that abort a prsync run."""


class MalformedDiffError(ValueError):
    """A hunk header did not match the unified diff grammar."""

    def __init__(self, line: str, patch: str | None = None):
        self.line = line
        self.patch = patch
        message = f"Unable to parse patch line {line!r}"
        if patch is not None:
            message += f"\nFull patch:\n{patch}"
        super().__init__(message)


class ConfigurationError(ValueError):
    """Repository identity or pull request number is missing or unparseable."""
