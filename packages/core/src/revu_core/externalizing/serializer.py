"""Canonical XML form of a review.

The output is byte-stable: attributes and children are always written in the
same order and issues are grouped by file with a fixed file ordering, so
serializing unchanged state twice gives identical text and diffs between
saved documents only show real changes.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable

from revu_core.errors import ReviewSerializationError
from revu_core.externalizing.elements import (
    write_file_scope,
    write_history,
    write_issue,
    write_referential,
)
from revu_core.model import Issue, Review

REVU_SCHEMA_ID = "http://plugins.intellij.net/revu"
REVU_SCHEMA_LOCATION = "http://plugins.intellij.net/revu/ns/revu_1_0.xsd"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Characters outside the XML 1.0 Char production cannot be written, escaped or not.
_ILLEGAL_XML_CHARS_RE = re.compile("[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

FileSortKey = Callable[[str | None], tuple]


def file_path_sort_key(path: str | None) -> tuple:
    """Total order over issue file paths: no path first, then plain string order.

    Two missing paths compare equal, so the order stays antisymmetric.
    """
    return (path is not None, path or "")


def ordered_issues(review: Review, file_sort_key: FileSortKey = file_path_sort_key) -> Iterable[Issue]:
    """Flatten issues file group by file group, keeping list order inside a group."""
    groups = review.issues_by_file
    for path in sorted(groups, key=file_sort_key):
        yield from groups[path]


def serialize_element(review: Review, file_sort_key: FileSortKey = file_path_sort_key) -> ET.Element:
    root = ET.Element("review")
    root.set("xmlns", REVU_SCHEMA_ID)
    root.set("xmlns:xsi", XSI_NAMESPACE)
    root.set("xsi:schemaLocation", f"{REVU_SCHEMA_ID} {REVU_SCHEMA_LOCATION}")

    root.set("name", review.name)
    root.set("status", review.status.name.lower())
    root.set("shared", "true" if review.shared else "false")
    if review.extended_review is not None:
        root.set("extends", review.extended_review.name)

    write_history(ET.SubElement(root, "history"), review.history)

    if review.goal is not None:
        ET.SubElement(root, "goal").text = review.goal

    write_referential(ET.SubElement(root, "referential"), review.data_referential)
    write_file_scope(ET.SubElement(root, "filescope"), review.file_scope)

    issues = ET.SubElement(root, "issues")
    for issue in ordered_issues(review, file_sort_key):
        write_issue(ET.SubElement(issues, "issue"), issue)

    _check_text(root, review.name)
    return root


def serialize(review: Review, file_sort_key: FileSortKey = file_path_sort_key, indent: int = 2) -> str:
    """Return the review as a complete XML document (declaration included)."""
    root = serialize_element(review, file_sort_key)
    if indent > 0:
        ET.indent(root, space=" " * indent)
    body = ET.tostring(root, encoding="unicode")
    # Attributes already carry CR as &#13;. A raw CR left in element text would be
    # folded into LF by the parser, so write it as a character reference too.
    return _XML_DECLARATION + body.replace("\r", "&#13;") + "\n"


def _check_text(root: ET.Element, review_name: str) -> None:
    for element in root.iter():
        values = [element.text or "", *element.attrib.values()]
        for value in values:
            match = _ILLEGAL_XML_CHARS_RE.search(value)
            if match:
                raise ReviewSerializationError(
                    f"Review {review_name!r} contains character {match.group()!r} in <{element.tag}>, "
                    "which XML documents cannot hold"
                )
