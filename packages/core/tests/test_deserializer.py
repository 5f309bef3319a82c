"""Tests for the two-pass review deserializer."""

import pytest

from revu_core.errors import StructuralParseError, UnresolvedReferenceError
from revu_core.externalizing.deserializer import CHILD_READERS, LoadMode, deserialize
from revu_core.externalizing.serializer import serialize
from revu_core.model import (
    DataReferential,
    FileScope,
    History,
    HistoryEntry,
    Issue,
    IssueNote,
    IssuePriority,
    IssueStatus,
    IssueType,
    Review,
    ReviewState,
    ReviewStatus,
    User,
)
from revu_core.repository import ReviewRepository

NS = 'xmlns="http://plugins.intellij.net/revu"'


def _doc(name="A", status="draft", shared="false", extends=None, body=""):
    attrs = f'{NS} name="{name}" status="{status}" shared="{shared}"'
    if extends is not None:
        attrs += f' extends="{extends}"'
    return f"<review {attrs}>{body}</review>"


def _make_full_review():
    return Review(
        name="Sprint 12",
        status=ReviewStatus.FIXING,
        shared=True,
        goal="Check the login flow",
        history=History(
            entries=[
                HistoryEntry(user="alice", date="2009-03-01T10:00:00+00:00", action="created"),
                HistoryEntry(user="bob", date="2009-03-04T10:00:00+00:00", action="updated"),
            ]
        ),
        data_referential=DataReferential(
            users=[User(login="alice", display_name="Alice", roles=["admin", "reviewer"]), User(login="bob")],
            priorities=[IssuePriority(name="major", order=1), IssuePriority(name="minor", order=2)],
            types=[IssueType(name="bug"), IssueType(name="style")],
        ),
        file_scope=FileScope(includes=["src/*"], excludes=["*.lock"], rev_before="r10", rev_after="r12"),
        issues=[
            Issue(summary="no file", created_by="alice", created_on="2009-03-02T00:00:00+00:00"),
            Issue(
                summary="Null check",
                file_path="src/auth.py",
                line_start=3,
                line_end=5,
                description="user may be None",
                priority="major",
                type="bug",
                status=IssueStatus.RESOLVED,
                notes=[IssueNote(author="bob", date="2009-03-03T00:00:00+00:00", content="Fixed in r11")],
            ),
            Issue(summary="Naming", file_path="src/auth.py", priority="minor", type="style"),
        ],
    )


class TestRoundTrip:
    def test_resolve_of_serialized_review_is_equal(self):
        review = _make_full_review()
        restored = deserialize(serialize(review), LoadMode.RESOLVE, ReviewRepository())
        assert restored == review

    def test_round_trip_with_extends(self):
        parent = Review(name="Base")
        child = _make_full_review()
        child.extended_review = parent
        repository = ReviewRepository([parent])

        restored = deserialize(serialize(child), LoadMode.RESOLVE, repository)

        assert restored == child
        assert restored.extended_review is parent

    def test_round_trip_flattens_issue_groups(self):
        review = Review(
            name="A",
            issues=[Issue(summary="b", file_path="b.txt"), Issue(summary="a", file_path="a.txt")],
        )
        restored = deserialize(serialize(review), LoadMode.RESOLVE, ReviewRepository())
        assert [i.summary for i in restored.issues] == ["a", "b"]
        assert dict(restored.issues_by_file) == dict(review.issues_by_file)

    def test_reserializing_restored_review_is_identical(self):
        text = serialize(_make_full_review())
        restored = deserialize(text, LoadMode.RESOLVE, ReviewRepository())
        assert serialize(restored) == text

    def test_carriage_returns_survive_round_trip(self):
        review = Review(
            name="A",
            goal="line1\r\nline2",
            issues=[
                Issue(
                    summary="first\rsecond",
                    file_path="src/win\r.py",
                    description="a\r\n\r\nb",
                    notes=[IssueNote(author="bob", date="2009-03-02", content="ok\r\n")],
                )
            ],
        )
        text = serialize(review)

        assert "\r" not in text
        restored = deserialize(text, LoadMode.RESOLVE, ReviewRepository())
        assert restored == review
        assert restored.goal == "line1\r\nline2"


class TestPrepare:
    def test_prepare_registers_a_stub(self):
        repository = ReviewRepository()
        review = deserialize(_doc(name="A"), LoadMode.PREPARE, repository)

        assert review.state is ReviewState.STUB
        assert repository.lookup_by_name("A") is review
        assert repository.reviews() == []

    def test_prepare_attaches_placeholder_without_repository(self):
        repository = ReviewRepository()
        review = deserialize(_doc(name="B", extends="A"), LoadMode.PREPARE, repository)

        assert review.extended_review.name == "A"
        assert review.extended_review.is_stub
        assert "A" not in repository

    def test_prepare_skips_everything_else(self):
        repository = ReviewRepository()
        body = "<goal>ignored</goal><issues><issue><summary>x</summary></issue></issues>"
        review = deserialize(_doc(status="not-a-status", body=body), LoadMode.PREPARE, repository)

        assert review.goal is None
        assert review.issues == []

    def test_prepare_reuses_existing_placeholder(self):
        repository = ReviewRepository()
        first = deserialize(_doc(name="B", extends="A"), LoadMode.PREPARE, repository)
        placeholder = first.extended_review
        second = deserialize(_doc(name="B", extends="A"), LoadMode.PREPARE, repository)

        assert second is first
        assert second.extended_review is placeholder

    def test_prepare_missing_name_is_fatal(self):
        with pytest.raises(StructuralParseError):
            deserialize(f'<review {NS} status="draft" shared="false"/>', LoadMode.PREPARE, ReviewRepository())


class TestResolve:
    def test_forward_reference_resolves_to_the_real_review(self):
        repository = ReviewRepository()
        doc_a = _doc(name="A", body="<goal>base</goal>")
        doc_b = _doc(name="B", extends="A")

        deserialize(doc_b, LoadMode.PREPARE, repository)
        deserialize(doc_a, LoadMode.PREPARE, repository)
        b = deserialize(doc_b, LoadMode.RESOLVE, repository)
        a = deserialize(doc_a, LoadMode.RESOLVE, repository)

        assert b.extended_review is a
        assert not b.extended_review.is_stub
        assert a.goal == "base"
        assert [r.name for r in repository.reviews()] == ["A", "B"]

    def test_resolve_populates_the_prepared_instance(self):
        repository = ReviewRepository()
        stub = deserialize(_doc(name="A"), LoadMode.PREPARE, repository)
        resolved = deserialize(_doc(name="A", status="closed"), LoadMode.RESOLVE, repository)

        assert resolved is stub
        assert resolved.status is ReviewStatus.CLOSED
        assert resolved.state is ReviewState.RESOLVED

    def test_unknown_extends_is_unresolved_reference(self):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            deserialize(_doc(name="B", extends="Missing"), LoadMode.RESOLVE, ReviewRepository())
        assert exc_info.value.review_name == "B"

    def test_two_review_cycle_is_rejected(self):
        repository = ReviewRepository()
        doc_x = _doc(name="X", extends="Y")
        doc_y = _doc(name="Y", extends="X")
        deserialize(doc_x, LoadMode.PREPARE, repository)
        deserialize(doc_y, LoadMode.PREPARE, repository)

        with pytest.raises(StructuralParseError, match="Cyclic"):
            deserialize(doc_x, LoadMode.RESOLVE, repository)
        with pytest.raises(StructuralParseError, match="Cyclic"):
            deserialize(doc_y, LoadMode.RESOLVE, repository)

    def test_self_extension_is_rejected(self):
        repository = ReviewRepository()
        doc = _doc(name="X", extends="X")
        deserialize(doc, LoadMode.PREPARE, repository)

        with pytest.raises(StructuralParseError):
            deserialize(doc, LoadMode.RESOLVE, repository)

    def test_long_chain_is_accepted(self):
        repository = ReviewRepository()
        docs = [_doc(name="C", extends="B"), _doc(name="B", extends="A"), _doc(name="A")]
        for doc in docs:
            deserialize(doc, LoadMode.PREPARE, repository)
        c, b, a = [deserialize(doc, LoadMode.RESOLVE, repository) for doc in docs]

        assert c.extended_review is b
        assert b.extended_review is a

    def test_status_is_case_insensitive(self):
        review = deserialize(_doc(status="ReViEwInG"), LoadMode.RESOLVE, ReviewRepository())
        assert review.status is ReviewStatus.REVIEWING

    def test_unknown_status_is_fatal(self):
        with pytest.raises(StructuralParseError):
            deserialize(_doc(status="archived"), LoadMode.RESOLVE, ReviewRepository())

    def test_missing_status_is_fatal(self):
        with pytest.raises(StructuralParseError):
            deserialize(f'<review {NS} name="A" shared="true"/>', LoadMode.RESOLVE, ReviewRepository())

    @pytest.mark.parametrize("value, expected", [("true", True), ("false", False), ("maybe", False), ("TRUE", False)])
    def test_shared_is_lenient(self, value, expected):
        review = deserialize(_doc(shared=value), LoadMode.RESOLVE, ReviewRepository())
        assert review.shared is expected

    def test_missing_shared_is_false(self):
        review = deserialize(f'<review {NS} name="A" status="draft"/>', LoadMode.RESOLVE, ReviewRepository())
        assert review.shared is False

    def test_unknown_child_is_ignored(self):
        doc = _doc(body="<foo/><goal>kept</goal><bar><baz/></bar>")
        review = deserialize(doc, LoadMode.RESOLVE, ReviewRepository())
        assert review.goal == "kept"

    def test_goal_absent_is_none_and_empty_goal_is_empty(self):
        assert deserialize(_doc(), LoadMode.RESOLVE, ReviewRepository()).goal is None
        assert deserialize(_doc(body="<goal/>"), LoadMode.RESOLVE, ReviewRepository()).goal == ""

    def test_document_without_namespace_loads(self):
        doc = '<review name="A" status="draft" shared="true"><goal>plain</goal></review>'
        review = deserialize(doc, LoadMode.RESOLVE, ReviewRepository())
        assert review.goal == "plain"

    def test_issue_defaults(self):
        doc = _doc(body="<issues><issue><summary>x</summary></issue></issues>")
        review = deserialize(doc, LoadMode.RESOLVE, ReviewRepository())
        issue = review.issues[0]
        assert issue.file_path is None
        assert issue.status is IssueStatus.TO_RESOLVE
        assert issue.notes == []

    def test_malformed_xml_is_structural_error(self):
        with pytest.raises(StructuralParseError):
            deserialize("<review name='A'", LoadMode.RESOLVE, ReviewRepository())

    @pytest.mark.parametrize("mode", [LoadMode.PREPARE, LoadMode.RESOLVE])
    def test_root_must_be_a_review_element(self, mode):
        with pytest.raises(StructuralParseError, match="<review>"):
            deserialize('<anything name="x" status="draft"/>', mode, ReviewRepository())

    def test_bytes_document(self):
        review = deserialize(_doc(name="A").encode("utf-8"), LoadMode.RESOLVE, ReviewRepository())
        assert review.name == "A"

    def test_failed_resolve_leaves_review_untouched(self):
        repository = ReviewRepository()
        review = deserialize(_doc(name="A", body="<goal>original</goal>"), LoadMode.RESOLVE, repository)
        bad_issue = '<issues><issue lineStart="x"><summary>s</summary></issue></issues>'
        bad = _doc(name="A", body="<goal>changed</goal>" + bad_issue)

        with pytest.raises(StructuralParseError):
            deserialize(bad, LoadMode.RESOLVE, repository)

        assert review.goal == "original"
        assert review.issues == []

    def test_children_missing_from_document_are_reset(self):
        repository = ReviewRepository()
        review = deserialize(_doc(name="A", body="<goal>g</goal>"), LoadMode.RESOLVE, repository)
        deserialize(_doc(name="A"), LoadMode.RESOLVE, repository)
        assert review.goal is None


def test_supported_child_elements():
    assert set(CHILD_READERS) == {"issues", "history", "goal", "referential", "filescope"}
