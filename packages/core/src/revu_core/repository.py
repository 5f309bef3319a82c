"""In-memory identity map of reviews, keyed by name.

A repository is created empty, filled by the loader and cleared explicitly;
it is always passed around as a parameter rather than looked up globally.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from revu_core.model import Review, ReviewState, ReviewStatus

logger = logging.getLogger(__name__)


class ReviewRepository:
    """Holds every known review by name.

    Lookups return reviews in any state: during a load, a resolve pass looks
    up reviews that are still stubs and will be populated later in the batch.
    Listing only ever exposes resolved reviews.
    """

    def __init__(self, reviews: Iterable[Review] = ()):
        self._reviews: dict[str, Review] = {}
        for review in reviews:
            self._reviews[review.name] = review

    def lookup_by_name(self, name: str) -> Review | None:
        return self._reviews.get(name)

    def register_stub(self, review: Review) -> None:
        review.state = ReviewState.STUB
        self._register(review)

    def register_resolved(self, review: Review) -> None:
        review.state = ReviewState.RESOLVED
        self._register(review)

    def _register(self, review: Review) -> None:
        previous = self._reviews.get(review.name)
        if previous is not None and previous is not review:
            logger.debug("Replacing review %r in repository", review.name)
        self._reviews[review.name] = review

    def remove(self, name: str) -> Review | None:
        return self._reviews.pop(name, None)

    def clear(self) -> None:
        self._reviews.clear()

    def resolved(self) -> Iterator[Review]:
        return (r for r in self._reviews.values() if r.state is ReviewState.RESOLVED)

    def reviews(
        self,
        statuses: Iterable[ReviewStatus] | None = None,
        user: str | None = None,
    ) -> list[Review]:
        """Return resolved reviews sorted by name.

        ``statuses`` keeps only reviews in one of the given statuses;
        ``user`` keeps only reviews whose referential lists that login.
        """
        wanted = set(statuses) if statuses is not None else None
        results = [
            r
            for r in self.resolved()
            if (wanted is None or r.status in wanted) and (user is None or r.has_user(user))
        ]
        return sorted(results, key=lambda r: r.name)

    def __contains__(self, name: object) -> bool:
        return name in self._reviews

    def __len__(self) -> int:
        return len(self._reviews)
