from __future__ import annotations

from typing import Protocol


class RateProviderError(Exception):
    """A rate could not be fetched; the message is meant for the user."""


class RateProvider(Protocol):
    def convert(self, source: str, target: str) -> float:
        """Return the rate for converting one unit of source into target."""
        ...
