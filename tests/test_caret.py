"""Caret insertion tests."""

from src.paste.caret import EditableDocument, Position, Selection, insert_fragment
from src.paste.content import Element, Text, parse_html


def _doc(markup: str, selection: Selection | None = None) -> EditableDocument:
    return EditableDocument(nodes=parse_html(markup), selection=selection)


def _caret(*path: int, offset: int) -> Selection:
    return Selection.collapsed(Position(tuple(path), offset))


def test_append_without_selection():
    doc = _doc("<p>a</p>")
    insert_fragment(doc, [Element("p", children=[Text("b")])])
    assert doc.to_html() == "<p>a</p><p>b</p>"


def test_insert_between_top_level_nodes():
    doc = _doc("<p>a</p><p>c</p>", _caret(offset=1))
    insert_fragment(doc, [Element("p", children=[Text("b")])])
    assert doc.to_html() == "<p>a</p><p>b</p><p>c</p>"


def test_insert_inside_element():
    doc = _doc("<div><b>x</b></div>", _caret(0, offset=0))
    insert_fragment(doc, [Text("before ")])
    assert doc.to_html() == "<div>before <b>x</b></div>"


def test_insert_splits_text_node():
    doc = _doc("<p>hello world</p>", _caret(0, 0, offset=5))
    insert_fragment(doc, [Element("b", children=[Text("!")])])
    assert doc.to_html() == "<p>hello<b>!</b> world</p>"


def test_caret_at_text_edges_does_not_split():
    doc = _doc("<p>abc</p>", _caret(0, 0, offset=3))
    insert_fragment(doc, [Element("br")])
    assert doc.to_html() == "<p>abc<br></p>"
    assert len(doc.nodes[0].children) == 2


def test_selection_collapses_to_end():
    selection = Selection(start=Position((), 0), end=Position((), 2))
    doc = _doc("<p>a</p><p>b</p><p>c</p>", selection)
    insert_fragment(doc, [Element("hr")])
    assert doc.to_html() == "<p>a</p><p>b</p><hr><p>c</p>"


def test_invalid_caret_appends():
    for selection in (_caret(7, offset=0), _caret(offset=9), _caret(0, 0, offset=99), _caret(0, 0, 0, offset=0)):
        doc = _doc("<p>a</p>", selection)
        insert_fragment(doc, [Text("z")])
        assert doc.to_html() == "<p>a</p>z"


def test_caret_inside_void_element_appends():
    doc = _doc('<p><img src="x"></p>', _caret(0, 0, offset=0))
    insert_fragment(doc, [Text("z")])
    assert doc.to_html() == '<p><img src="x"></p>z'


def test_caret_moves_after_inserted_content():
    doc = _doc("<div>ac</div>", _caret(0, 0, offset=1))
    insert_fragment(doc, [Text("b1")])
    insert_fragment(doc, [Text("b2")])
    assert doc.to_html() == "<div>ab1b2c</div>"
    assert doc.selection == _caret(0, offset=3)


def test_empty_fragment_is_noop():
    doc = _doc("<p>a</p>", _caret(offset=0))
    insert_fragment(doc, [])
    assert doc.to_html() == "<p>a</p>"
