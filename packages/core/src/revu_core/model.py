"""Review document model.

Plain data holders. The only behaviour here is the status/shared parsing
rules the XML format relies on, the file-scope matching and a few lookup
helpers. Dates are kept as ISO-8601 strings so documents round-trip exactly.
"""

from __future__ import annotations

import fnmatch
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum

from revu_core.errors import StructuralParseError


class ReviewStatus(str, Enum):
    DRAFT = "draft"
    FIXING = "fixing"
    REVIEWING = "reviewing"
    FIXED = "fixed"
    CLOSED = "closed"

    @classmethod
    def parse(cls, text: str | None) -> ReviewStatus:
        """Parse a status attribute, ignoring case. Unknown values are fatal."""
        if text is None:
            raise StructuralParseError("Missing review status")
        try:
            return cls[text.upper()]
        except KeyError:
            raise StructuralParseError(f"Unknown review status: {text!r}") from None


class IssueStatus(str, Enum):
    TO_RESOLVE = "to_resolve"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @classmethod
    def parse(cls, text: str | None) -> IssueStatus:
        if text is None:
            return cls.TO_RESOLVE
        try:
            return cls[text.upper()]
        except KeyError:
            raise StructuralParseError(f"Unknown issue status: {text!r}") from None


class ReviewState(str, Enum):
    """Load lifecycle of a review: a stub only knows its name and extends target."""

    STUB = "stub"
    RESOLVED = "resolved"


def parse_shared(text: str | None) -> bool:
    # Only the exact literal "true" counts; older documents rely on anything
    # else (including "TRUE" or garbage) meaning not shared.
    return text == "true"


@dataclass
class HistoryEntry:
    user: str
    date: str  # ISO-8601
    action: str = "updated"


@dataclass
class History:
    """Ordered change records, oldest first."""

    entries: list[HistoryEntry] = field(default_factory=list)

    @property
    def created_by(self) -> str | None:
        return self.entries[0].user if self.entries else None

    @property
    def created_on(self) -> str | None:
        return self.entries[0].date if self.entries else None

    @property
    def last_updated_by(self) -> str | None:
        return self.entries[-1].user if self.entries else None

    @property
    def last_updated_on(self) -> str | None:
        return self.entries[-1].date if self.entries else None


@dataclass
class User:
    login: str
    display_name: str | None = None
    roles: list[str] = field(default_factory=list)


@dataclass
class IssuePriority:
    name: str
    order: int = 0


@dataclass
class IssueType:
    name: str


@dataclass
class DataReferential:
    """Reference data issues point at by name: who takes part, priorities, issue types."""

    users: list[User] = field(default_factory=list)
    priorities: list[IssuePriority] = field(default_factory=list)
    types: list[IssueType] = field(default_factory=list)

    def user(self, login: str) -> User | None:
        return next((u for u in self.users if u.login == login), None)

    def priority(self, name: str) -> IssuePriority | None:
        return next((p for p in self.priorities if p.name == name), None)

    def type(self, name: str) -> IssueType | None:
        return next((t for t in self.types if t.name == name), None)


def _matches(path: str, pattern: str) -> bool:
    if fnmatch.fnmatch(path, pattern):
        return True
    if fnmatch.fnmatch(path.rsplit("/", 1)[-1], pattern):
        return True
    # Directory prefix: "migrations/" matches "app/migrations/0001.py"
    prefix = pattern.rstrip("/") + "/"
    return path.startswith(prefix) or ("/" + prefix) in path


@dataclass
class FileScope:
    """Which files a review covers.

    No includes means every file is in scope; excludes always win.
    """

    includes: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    rev_before: str | None = None
    rev_after: str | None = None

    def contains(self, path: str) -> bool:
        if self.includes and not any(_matches(path, p) for p in self.includes):
            return False
        return not any(_matches(path, p) for p in self.excludes)


@dataclass
class IssueNote:
    author: str
    date: str
    content: str = ""


@dataclass
class Issue:
    summary: str
    file_path: str | None = None
    line_start: int | None = None
    line_end: int | None = None
    description: str | None = None
    priority: str | None = None
    type: str | None = None
    status: IssueStatus = IssueStatus.TO_RESOLVE
    created_by: str | None = None
    created_on: str | None = None
    notes: list[IssueNote] = field(default_factory=list)


@dataclass(eq=False)
class Review:
    """A named review definition.

    Reviews are entities: the repository maps names to instances and the
    loader relies on instance identity. Equality compares content instead,
    with the extended review compared by name only.
    """

    name: str
    status: ReviewStatus = ReviewStatus.DRAFT
    shared: bool = False
    goal: str | None = None
    extended_review: Review | None = field(default=None, repr=False)
    history: History = field(default_factory=History)
    data_referential: DataReferential = field(default_factory=DataReferential)
    file_scope: FileScope = field(default_factory=FileScope)
    issues: list[Issue] = field(default_factory=list)
    state: ReviewState = ReviewState.RESOLVED

    @property
    def extends(self) -> str | None:
        return self.extended_review.name if self.extended_review is not None else None

    @property
    def is_stub(self) -> bool:
        return self.state is ReviewState.STUB

    @property
    def issues_by_file(self) -> OrderedDict[str | None, list[Issue]]:
        """Issues grouped by owning file, in first-seen file order."""
        groups: OrderedDict[str | None, list[Issue]] = OrderedDict()
        for issue in self.issues:
            groups.setdefault(issue.file_path, []).append(issue)
        return groups

    def has_user(self, login: str) -> bool:
        return self.data_referential.user(login) is not None

    def issue_problems(self) -> list[tuple[Issue, str]]:
        """Issues that disagree with the review's own scope or referential.

        Priority, type and author are only checked when the referential lists
        at least one entry of that kind.
        """
        referential = self.data_referential
        problems = []
        for issue in self.issues:
            if issue.file_path is not None and not self.file_scope.contains(issue.file_path):
                problems.append((issue, f"file {issue.file_path!r} is outside the review scope"))
            if issue.priority and referential.priorities and referential.priority(issue.priority) is None:
                problems.append((issue, f"unknown priority {issue.priority!r}"))
            if issue.type and referential.types and referential.type(issue.type) is None:
                problems.append((issue, f"unknown issue type {issue.type!r}"))
            if issue.created_by and referential.users and referential.user(issue.created_by) is None:
                problems.append((issue, f"author {issue.created_by!r} is not a review user"))
        return problems

    @classmethod
    def stub(cls, name: str) -> Review:
        return cls(name=name, state=ReviewState.STUB)

    def _content(self) -> tuple:
        return (
            self.name,
            self.status,
            self.shared,
            self.goal,
            self.extends,
            self.history,
            self.data_referential,
            self.file_scope,
            self.issues,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Review):
            return NotImplemented
        return self._content() == other._content()
