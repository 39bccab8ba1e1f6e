from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class InvalidInputError(DomainError):
    """Malformed address, interval or series input."""


class NoUsableCandidatesError(DomainError):
    """Pool selection exhausted every candidate."""


class NoDataError(DomainError):
    """A fetch returned no usable data."""


class EmptyResultError(DomainError):
    """Series alignment produced no valid point."""


class InvalidRangeError(DomainError):
    """Tick generation received an invalid range."""


class PriceSourceError(DomainError):
    """Upstream price source request failed."""
