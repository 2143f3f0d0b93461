"""Exception types raised by the data layer."""

from __future__ import annotations


class ScoresDashError(Exception):
    """Base class for all scoresdash errors."""


class ProviderError(ScoresDashError):
    """A single provider request failed (transport, status or payload)."""


class FetchError(ScoresDashError):
    """A whole refresh cycle could not get any games."""
