"""Errors raised while loading and saving review documents.

Both load errors are fatal for the review being loaded but never for its
siblings in a batch: the loader records them per document and moves on.
"""

from __future__ import annotations


class ReviewLoadError(ValueError):
    """Base class for failures attached to a single review document."""

    def __init__(self, message: str, review_name: str | None = None):
        super().__init__(message)
        self.review_name = review_name


class StructuralParseError(ReviewLoadError):
    """The document is malformed: bad XML, missing/invalid attribute, or an extends cycle."""


class UnresolvedReferenceError(ReviewLoadError):
    """An ``extends`` name does not match any review known to the repository."""


class ReviewSerializationError(ValueError):
    """A review holds text that has no representation in an XML document."""
