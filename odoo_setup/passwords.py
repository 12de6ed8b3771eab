"""Password generation for database and Odoo master credentials."""

from __future__ import annotations

import math
import random
import secrets
from typing import Callable, Optional

from .config import DEFAULT_SECRET_LENGTH
from .utils import print_warning

ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789"
    "!@#$%^&*"
)


class SecretGenerator:
    """Generates high-entropy password strings.

    The OS CSPRNG (via :mod:`secrets`) is used whenever it is available.
    If the platform cannot provide it (``NotImplementedError`` from
    ``os.urandom``), a seeded ``random.Random`` is used instead and a warning
    is printed, so callers always get a password of the requested length.

    Args:
        choice: Strong picker ``(alphabet) -> char``.  Defaults to
            :func:`secrets.choice`; tests inject a failing one to exercise
            the fallback.
        fallback: Weak random source used when *choice* is unavailable.
    """

    def __init__(
        self,
        choice: Optional[Callable[[str], str]] = None,
        fallback: Optional[random.Random] = None,
    ) -> None:
        self._choice = choice or secrets.choice
        self._fallback = fallback
        self.degraded = False

    def generate(self, length: int = DEFAULT_SECRET_LENGTH) -> str:
        """Return a password of exactly *length* characters from :data:`ALPHABET`."""
        if length <= 0:
            return ""
        try:
            return "".join(self._choice(ALPHABET) for _ in range(length))
        except NotImplementedError:
            return self._generate_weak(length)

    def _generate_weak(self, length: int) -> str:
        if not self.degraded:
            print_warning(
                "Secure random source unavailable; falling back to a "
                "non-cryptographic generator. Replace the generated passwords "
                "before using them in production."
            )
        self.degraded = True
        rng = self._fallback or random.Random()
        return "".join(rng.choice(ALPHABET) for _ in range(length))

    @staticmethod
    def entropy_bits(length: int = DEFAULT_SECRET_LENGTH) -> float:
        """Approximate entropy of a generated password in bits."""
        return math.log2(len(ALPHABET)) * max(length, 0)


def generate_password(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """Convenience wrapper around a default :class:`SecretGenerator`."""
    return SecretGenerator().generate(length)
