"""Content tree — element/text nodes, sanitizing HTML parser and serializer."""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Iterator

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

# Elements whose whole subtree is discarded while parsing pasted markup.
DROPPED_TAGS = frozenset({
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "object",
    "embed",
    "head",
    "meta",
    "link",
    "title",
})

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img",
    "input", "link", "meta", "source", "track", "wbr",
})

_URL_ATTRIBUTES = frozenset({"href", "src", "action", "formaction", "xlink:href"})


@dataclass(eq=False)
class Text:
    """A run of character data. Holds unescaped text."""

    text: str


@dataclass(eq=False)
class Element:
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[ContentNode] = field(default_factory=list)


ContentNode = Element | Text
ContentFragment = list[ContentNode]


def iter_elements(nodes: list[ContentNode]) -> Iterator[Element]:
    """Yield every element in document order (depth-first, pre-order)."""
    for node in nodes:
        if isinstance(node, Element):
            yield node
            yield from iter_elements(node.children)


def find_images(nodes: list[ContentNode]) -> list[Element]:
    """Snapshot of all ``img`` elements, safe to mutate afterwards."""
    return [el for el in iter_elements(nodes) if el.tag == "img"]


def _is_unsafe_url(value: str) -> bool:
    compact = "".join(value.split()).lower()
    return compact.startswith(("javascript:", "vbscript:"))


def _clean_attributes(tag: Tag) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for name, value in tag.attrs.items():
        name = name.lower()
        if name.startswith("on"):
            continue
        if isinstance(value, list):
            value = " ".join(value)
        if name in _URL_ATTRIBUTES and _is_unsafe_url(value):
            continue
        attributes[name] = value
    return attributes


def _convert(node) -> ContentNode | None:
    if isinstance(node, PreformattedString):
        # comments, doctypes, CDATA, processing instructions
        return None
    if isinstance(node, NavigableString):
        return Text(str(node))
    if not isinstance(node, Tag):
        return None
    name = node.name.lower()
    if name in DROPPED_TAGS:
        return None
    element = Element(tag=name, attributes=_clean_attributes(node))
    if name not in VOID_TAGS:
        element.children = _convert_children(node)
    return element


def _convert_children(tag: Tag) -> list[ContentNode]:
    children: list[ContentNode] = []
    for child in tag.children:
        converted = _convert(child)
        if converted is not None:
            children.append(converted)
    return children


def parse_html(markup: str) -> ContentFragment:
    """Parse pasted markup into a sanitized list of top-level nodes.

    Full documents (as put on the clipboard by most browsers and office
    suites) are reduced to the contents of their ``body``.
    """
    soup = BeautifulSoup(markup.strip(), "html.parser", multi_valued_attributes=None)
    root = soup.body or soup
    return _convert_children(root)


def text_to_fragment(text: str) -> ContentFragment:
    """Wrap plain text in a single ``div``, turning newlines into ``br``."""
    lines = text.replace("\r\n", "\n").split("\n")
    children: list[ContentNode] = []
    for index, line in enumerate(lines):
        if index:
            children.append(Element("br"))
        if line:
            children.append(Text(line))
    return [Element("div", children=children)]


def serialize_node(node: ContentNode) -> str:
    if isinstance(node, Text):
        return html.escape(node.text, quote=False)
    attrs = "".join(
        f' {name}="{html.escape(value, quote=True)}"'
        for name, value in node.attributes.items()
    )
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attrs}>"
    inner = "".join(serialize_node(child) for child in node.children)
    return f"<{node.tag}{attrs}>{inner}</{node.tag}>"


def serialize(nodes: list[ContentNode]) -> str:
    """Render nodes back to a markup string."""
    return "".join(serialize_node(node) for node in nodes)


def sanitize_html(markup: str) -> str:
    """Round-trip markup through the sanitizing parser."""
    return serialize(parse_html(markup))


def visible_text(nodes: list[ContentNode]) -> str:
    """Text content with ``br`` rendered as newlines."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(node.text)
        elif node.tag == "br":
            parts.append("\n")
        else:
            parts.append(visible_text(node.children))
    return "".join(parts)
