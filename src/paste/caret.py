"""Splice a pasted fragment into an editable document at the caret."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.paste.content import VOID_TAGS, ContentFragment, ContentNode, Element, Text, serialize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Position:
    """A boundary point: ``path`` indexes from the document root down to a
    container node, ``offset`` counts children (elements, root) or characters
    (text nodes) inside it."""

    path: tuple[int, ...]
    offset: int


@dataclass(frozen=True)
class Selection:
    start: Position
    end: Position

    @classmethod
    def collapsed(cls, position: Position) -> Selection:
        return cls(start=position, end=position)


@dataclass
class EditableDocument:
    nodes: list[ContentNode] = field(default_factory=list)
    selection: Selection | None = None

    def to_html(self) -> str:
        return serialize(self.nodes)


def _insertion_point(document: EditableDocument) -> tuple[list[ContentNode], int] | None:
    """Collapse the selection to its end and find ``(siblings, index)``.

    A caret inside a text node splits it so the fragment lands between the
    two halves.
    """
    if document.selection is None:
        return None
    end = document.selection.end
    if not end.path:
        container_children = document.nodes
        if 0 <= end.offset <= len(container_children):
            return container_children, end.offset
        return None

    siblings = document.nodes
    for depth, index in enumerate(end.path):
        if not 0 <= index < len(siblings):
            return None
        node = siblings[index]
        is_last = depth == len(end.path) - 1
        if isinstance(node, Text):
            if not is_last or not 0 <= end.offset <= len(node.text):
                return None
            head, tail = node.text[:end.offset], node.text[end.offset:]
            if not head:
                return siblings, index
            if not tail:
                return siblings, index + 1
            node.text = head
            siblings.insert(index + 1, Text(tail))
            return siblings, index + 1
        if is_last:
            if node.tag not in VOID_TAGS and 0 <= end.offset <= len(node.children):
                return node.children, end.offset
            return None
        siblings = node.children
    return None


def _path_of(nodes: list[ContentNode], target: list[ContentNode]) -> tuple[int, ...] | None:
    if nodes is target:
        return ()
    for index, node in enumerate(nodes):
        if isinstance(node, Element):
            sub = _path_of(node.children, target)
            if sub is not None:
                return (index, *sub)
    return None


def insert_fragment(document: EditableDocument, fragment: ContentFragment) -> None:
    """Insert ``fragment`` at the caret, or append it when there is none.

    Existing nodes are never removed or reordered. Afterwards the caret sits
    right after the inserted content.
    """
    if not fragment:
        return
    point = _insertion_point(document)
    if point is None:
        logger.debug("no valid caret, appending fragment", extra={"nodes": len(fragment)})
        siblings, index = document.nodes, len(document.nodes)
    else:
        siblings, index = point

    siblings[index:index] = fragment
    path = _path_of(document.nodes, siblings)
    if path is not None:
        document.selection = Selection.collapsed(Position(path, index + len(fragment)))
