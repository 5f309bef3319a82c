"""Two-pass review deserializer.

A review may extend another review whose document has not been read yet, so
documents are read twice:

  PREPARE  read only ``name`` and ``extends``; register a stub for the
           review in the repository and hang a placeholder stub off it for
           the extended review. The repository is not consulted.
  RESOLVE  read everything; the ``extends`` name is looked up in the
           repository, which by now holds a stub (or the resolved review)
           for every document of the batch.

Callers must prepare every document of a batch before resolving any of them.
The resolve pass populates the very instance registered by the prepare pass,
so references handed out by the repository stay valid.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable
from enum import Enum

from revu_core.errors import ReviewLoadError, StructuralParseError, UnresolvedReferenceError
from revu_core.externalizing.elements import (
    children,
    local_name,
    read_file_scope,
    read_history,
    read_issue,
    read_referential,
)
from revu_core.model import DataReferential, FileScope, History, Review, ReviewStatus, parse_shared
from revu_core.repository import ReviewRepository

logger = logging.getLogger(__name__)


class LoadMode(str, Enum):
    PREPARE = "prepare"
    RESOLVE = "resolve"


def _read_issues(fields: dict, element: ET.Element) -> None:
    fields["issues"] = [read_issue(node) for node in children(element, "issue")]


def _read_history(fields: dict, element: ET.Element) -> None:
    fields["history"] = read_history(element)


def _read_goal(fields: dict, element: ET.Element) -> None:
    fields["goal"] = element.text or ""


def _read_referential(fields: dict, element: ET.Element) -> None:
    fields["data_referential"] = read_referential(element)


def _read_file_scope(fields: dict, element: ET.Element) -> None:
    fields["file_scope"] = read_file_scope(element)


# Child element name -> reader. Anything not listed here is skipped so newer
# documents still load.
CHILD_READERS: dict[str, Callable[[dict, ET.Element], None]] = {
    "issues": _read_issues,
    "history": _read_history,
    "goal": _read_goal,
    "referential": _read_referential,
    "filescope": _read_file_scope,
}


def parse_document(document: str | bytes | ET.Element) -> ET.Element:
    if isinstance(document, ET.Element):
        return document
    if isinstance(document, str):
        # Serialized documents declare UTF-8; parse the bytes they describe.
        document = document.encode("utf-8")
    try:
        return ET.fromstring(document)
    except ET.ParseError as e:
        raise StructuralParseError(f"Malformed review document: {e}") from e


def deserialize(
    document: str | bytes | ET.Element,
    mode: LoadMode,
    repository: ReviewRepository,
) -> Review:
    root = parse_document(document)
    if local_name(root.tag) != "review":
        raise StructuralParseError(f"Expected a <review> root element, found <{local_name(root.tag)}>")

    name = root.get("name")
    if not name:
        raise StructuralParseError("Review document has no 'name' attribute")

    try:
        if mode is LoadMode.PREPARE:
            return _prepare(root, name, repository)
        return _resolve(root, name, repository)
    except ReviewLoadError as e:
        if e.review_name is None:
            e.review_name = name
        raise


def _prepare(root: ET.Element, name: str, repository: ReviewRepository) -> Review:
    review = repository.lookup_by_name(name) or Review.stub(name)

    extended_name = root.get("extends")
    if extended_name is None:
        review.extended_review = None
    elif review.extended_review is None or review.extended_review.name != extended_name:
        review.extended_review = Review.stub(extended_name)

    repository.register_stub(review)
    return review


def _resolve(root: ET.Element, name: str, repository: ReviewRepository) -> Review:
    review = repository.lookup_by_name(name) or Review.stub(name)

    extended = None
    extended_name = root.get("extends")
    if extended_name is not None:
        extended = repository.lookup_by_name(extended_name)
        if extended is None:
            raise UnresolvedReferenceError(
                f"Review {name!r} extends unknown review {extended_name!r}", review_name=name
            )
        _check_extends_chain(name, extended, repository)

    fields: dict = {
        "status": ReviewStatus.parse(root.get("status")),
        "shared": parse_shared(root.get("shared")),
        "goal": None,
        "history": History(),
        "data_referential": DataReferential(),
        "file_scope": FileScope(),
        "issues": [],
    }
    for element in root:
        tag = local_name(element.tag)
        reader = CHILD_READERS.get(tag)
        if reader is None:
            logger.debug("Ignoring unknown element <%s> in review %r", tag, name)
            continue
        reader(fields, element)

    # Everything parsed: only now touch the review so a failure above leaves it as it was.
    review.extended_review = extended
    for key, value in fields.items():
        setattr(review, key, value)

    repository.register_resolved(review)
    return review


def _check_extends_chain(name: str, extended: Review, repository: ReviewRepository) -> None:
    """Follow the extends chain by name through the repository; a repeated name is a cycle."""
    seen = [name]
    current: Review | None = extended
    while current is not None:
        if current.name in seen:
            chain = " -> ".join(seen + [current.name])
            raise StructuralParseError(f"Cyclic extends chain: {chain}", review_name=name)
        seen.append(current.name)
        # Prefer the repository entry: placeholders hung off stubs carry no extends of their own.
        registered = repository.lookup_by_name(current.name) or current
        current = registered.extended_review
