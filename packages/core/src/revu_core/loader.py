"""Batch loading of review documents into a repository."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from dataclasses import dataclass, field

from revu_core.errors import ReviewLoadError, StructuralParseError, UnresolvedReferenceError
from revu_core.externalizing.deserializer import LoadMode, deserialize, parse_document
from revu_core.externalizing.serializer import serialize
from revu_core.model import Review
from revu_core.repository import ReviewRepository

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Outcome of loading a batch: resolved reviews plus one error per failed document."""

    reviews: list[Review] = field(default_factory=list)
    errors: dict[str, ReviewLoadError] = field(default_factory=dict)
    sources: dict[str, str] = field(default_factory=dict)  # review name -> document source

    @property
    def ok(self) -> bool:
        return not self.errors


def load_documents(documents: Iterable[tuple[str, str | bytes]], repository: ReviewRepository) -> LoadResult:
    """Load ``(source, xml)`` pairs into ``repository``.

    Every document is prepared before any is resolved. A document that fails
    is reported under its source and never reaches the repository's listing;
    neither does any review that extends it.
    """
    result = LoadResult()

    prepared: list[tuple[str, ET.Element, str]] = []
    seen: set[str] = set()
    for source, text in documents:
        try:
            root = parse_document(text)
            name = root.get("name")
            if name in seen:
                raise StructuralParseError(f"Duplicate review name {name!r}", review_name=name)
            review = deserialize(root, LoadMode.PREPARE, repository)
        except ReviewLoadError as e:
            result.errors[source] = e
            continue
        seen.add(review.name)
        prepared.append((source, root, review.name))

    resolved: list[tuple[str, Review]] = []
    for source, root, name in prepared:
        try:
            review = deserialize(root, LoadMode.RESOLVE, repository)
        except ReviewLoadError as e:
            result.errors[source] = e
            continue
        resolved.append((source, review))

    _evict_unresolved(repository, prepared, resolved, result)

    result.reviews = [review for _, review in resolved if repository.lookup_by_name(review.name) is review]
    result.sources = {
        review.name: source for source, review in resolved if repository.lookup_by_name(review.name) is review
    }
    logger.info("Loaded %d review(s), %d failed", len(result.reviews), len(result.errors))
    return result


def _evict_unresolved(
    repository: ReviewRepository,
    prepared: list[tuple[str, ET.Element, str]],
    resolved: list[tuple[str, Review]],
    result: LoadResult,
) -> None:
    for _, _, name in prepared:
        review = repository.lookup_by_name(name)
        if review is not None and review.is_stub:
            repository.remove(name)

    # A review extending an evicted one is unusable too; repeat until nothing changes.
    changed = True
    while changed:
        changed = False
        for source, review in resolved:
            if repository.lookup_by_name(review.name) is not review:
                continue
            parent = review.extended_review
            if parent is not None and repository.lookup_by_name(parent.name) is not parent:
                repository.remove(review.name)
                result.errors[source] = UnresolvedReferenceError(
                    f"Review {review.name!r} extends {parent.name!r}, which failed to load",
                    review_name=review.name,
                )
                changed = True


def dump_reviews(reviews: Iterable[Review], indent: int = 2) -> dict[str, str]:
    """Serialize reviews to ``{name: xml}``, in the order given."""
    return {review.name: serialize(review, indent=indent) for review in reviews}
