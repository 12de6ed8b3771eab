"""Exceptions raised by the synthesis core."""

from __future__ import annotations


class SynthesisError(Exception):
    """Base class for every error raised while building a bundle."""


class ValidationFailed(SynthesisError):
    """Raised when a caller insists on a valid model and it is not.

    The full, ordered list of violation messages is kept on ``violations``;
    the first one is the blocking message shown to the user.
    """

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        first = self.violations[0] if self.violations else "invalid configuration"
        super().__init__(first)


class AssemblyError(SynthesisError):
    """The rendered artifacts do not match the archive layout."""


class PackagingError(SynthesisError):
    """The archive packager failed; the rendered artifacts are still valid."""
