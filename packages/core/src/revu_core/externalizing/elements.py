"""Codecs for the sub-documents nested inside a review element.

Each ``write_*`` appends children/attributes to an element that the caller has
already created; each ``read_*`` takes that element and returns a fresh model
object. Readers ignore element namespaces and unknown children.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from revu_core.errors import StructuralParseError
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
    User,
)


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1]


def children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if local_name(child.tag) == name]


def child(element: ET.Element, name: str) -> ET.Element | None:
    found = children(element, name)
    return found[0] if found else None


def text_of(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text or ""


def set_attr(element: ET.Element, key: str, value) -> None:
    if value is not None:
        element.set(key, str(value))


def int_attr(element: ET.Element, key: str) -> int | None:
    raw = element.get(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise StructuralParseError(f"Attribute {key!r} on <{local_name(element.tag)}> is not an integer: {raw!r}")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def write_history(element: ET.Element, history: History) -> None:
    for entry in history.entries:
        change = ET.SubElement(element, "change")
        set_attr(change, "user", entry.user)
        set_attr(change, "date", entry.date)
        set_attr(change, "action", entry.action)


def read_history(element: ET.Element) -> History:
    return History(
        entries=[
            HistoryEntry(
                user=c.get("user", ""),
                date=c.get("date", ""),
                action=c.get("action", "updated"),
            )
            for c in children(element, "change")
        ]
    )


# ---------------------------------------------------------------------------
# Referential
# ---------------------------------------------------------------------------


def write_referential(element: ET.Element, referential: DataReferential) -> None:
    users = ET.SubElement(element, "users")
    for user in referential.users:
        node = ET.SubElement(users, "user")
        node.set("login", user.login)
        set_attr(node, "displayName", user.display_name)
        if user.roles:
            node.set("roles", " ".join(user.roles))

    priorities = ET.SubElement(element, "priorities")
    for priority in referential.priorities:
        node = ET.SubElement(priorities, "priority")
        node.set("name", priority.name)
        node.set("order", str(priority.order))

    types = ET.SubElement(element, "types")
    for issue_type in referential.types:
        ET.SubElement(types, "type").set("name", issue_type.name)


def read_referential(element: ET.Element) -> DataReferential:
    referential = DataReferential()

    users = child(element, "users")
    if users is not None:
        for node in children(users, "user"):
            referential.users.append(
                User(
                    login=node.get("login", ""),
                    display_name=node.get("displayName"),
                    roles=node.get("roles", "").split(),
                )
            )

    priorities = child(element, "priorities")
    if priorities is not None:
        for node in children(priorities, "priority"):
            order = int_attr(node, "order")
            referential.priorities.append(IssuePriority(name=node.get("name", ""), order=order or 0))

    types = child(element, "types")
    if types is not None:
        for node in children(types, "type"):
            referential.types.append(IssueType(name=node.get("name", "")))

    return referential


# ---------------------------------------------------------------------------
# File scope
# ---------------------------------------------------------------------------


def write_file_scope(element: ET.Element, scope: FileScope) -> None:
    set_attr(element, "revBefore", scope.rev_before)
    set_attr(element, "revAfter", scope.rev_after)
    for pattern in scope.includes:
        ET.SubElement(element, "include").text = pattern
    for pattern in scope.excludes:
        ET.SubElement(element, "exclude").text = pattern


def read_file_scope(element: ET.Element) -> FileScope:
    return FileScope(
        includes=[text_of(node) for node in children(element, "include")],
        excludes=[text_of(node) for node in children(element, "exclude")],
        rev_before=element.get("revBefore"),
        rev_after=element.get("revAfter"),
    )


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------


def write_issue(element: ET.Element, issue: Issue) -> None:
    set_attr(element, "filePath", issue.file_path)
    set_attr(element, "lineStart", issue.line_start)
    set_attr(element, "lineEnd", issue.line_end)
    set_attr(element, "priority", issue.priority)
    set_attr(element, "type", issue.type)
    element.set("status", issue.status.name.lower())
    set_attr(element, "createdBy", issue.created_by)
    set_attr(element, "createdOn", issue.created_on)

    ET.SubElement(element, "summary").text = issue.summary
    if issue.description is not None:
        ET.SubElement(element, "desc").text = issue.description
    if issue.notes:
        notes = ET.SubElement(element, "notes")
        for note in issue.notes:
            node = ET.SubElement(notes, "note")
            node.set("author", note.author)
            node.set("date", note.date)
            node.text = note.content


def read_issue(element: ET.Element) -> Issue:
    notes_element = child(element, "notes")
    notes = []
    if notes_element is not None:
        notes = [
            IssueNote(author=n.get("author", ""), date=n.get("date", ""), content=n.text or "")
            for n in children(notes_element, "note")
        ]

    return Issue(
        summary=text_of(child(element, "summary")) or "",
        file_path=element.get("filePath"),
        line_start=int_attr(element, "lineStart"),
        line_end=int_attr(element, "lineEnd"),
        description=text_of(child(element, "desc")),
        priority=element.get("priority"),
        type=element.get("type"),
        status=IssueStatus.parse(element.get("status")),
        created_by=element.get("createdBy"),
        created_on=element.get("createdOn"),
        notes=notes,
    )
