"""Tests for the review repository."""

from revu_core.model import Review, ReviewState, ReviewStatus, DataReferential, User
from revu_core.repository import ReviewRepository


def _make_review(name, status=ReviewStatus.DRAFT, users=()):
    return Review(
        name=name,
        status=status,
        data_referential=DataReferential(users=[User(login=u) for u in users]),
    )


class TestReviewRepository:
    def test_starts_empty(self):
        repository = ReviewRepository()
        assert len(repository) == 0
        assert repository.lookup_by_name("A") is None

    def test_register_stub_marks_state(self):
        repository = ReviewRepository()
        review = Review(name="A")
        repository.register_stub(review)

        assert repository.lookup_by_name("A") is review
        assert review.state is ReviewState.STUB

    def test_register_resolved_marks_state(self):
        repository = ReviewRepository()
        review = Review.stub("A")
        repository.register_resolved(review)
        assert review.state is ReviewState.RESOLVED

    def test_register_replaces_same_name(self):
        repository = ReviewRepository()
        first, second = Review(name="A"), Review(name="A")
        repository.register_resolved(first)
        repository.register_resolved(second)

        assert repository.lookup_by_name("A") is second
        assert len(repository) == 1

    def test_stubs_are_not_listed(self):
        repository = ReviewRepository()
        repository.register_stub(Review(name="A"))
        repository.register_resolved(Review(name="B"))

        assert [r.name for r in repository.reviews()] == ["B"]
        assert "A" in repository

    def test_reviews_sorted_by_name(self):
        repository = ReviewRepository([_make_review("b"), _make_review("a"), _make_review("c")])
        assert [r.name for r in repository.reviews()] == ["a", "b", "c"]

    def test_filter_by_status(self):
        repository = ReviewRepository(
            [
                _make_review("a", ReviewStatus.DRAFT),
                _make_review("b", ReviewStatus.CLOSED),
                _make_review("c", ReviewStatus.REVIEWING),
            ]
        )
        results = repository.reviews(statuses=[ReviewStatus.DRAFT, ReviewStatus.REVIEWING])
        assert [r.name for r in results] == ["a", "c"]

    def test_filter_by_user(self):
        repository = ReviewRepository([_make_review("a", users=["alice"]), _make_review("b", users=["bob"])])
        assert [r.name for r in repository.reviews(user="bob")] == ["b"]

    def test_remove_and_clear(self):
        repository = ReviewRepository([_make_review("a"), _make_review("b")])
        removed = repository.remove("a")

        assert removed.name == "a"
        assert repository.remove("a") is None
        repository.clear()
        assert len(repository) == 0
