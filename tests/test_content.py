"""Content tree parsing, sanitizing and serialization tests."""

from src.paste.content import (
    Element,
    Text,
    find_images,
    parse_html,
    sanitize_html,
    serialize,
    text_to_fragment,
    visible_text,
)


def test_parse_simple_markup():
    nodes = parse_html("<p>hello <b>world</b></p>")
    assert len(nodes) == 1
    assert isinstance(nodes[0], Element)
    assert nodes[0].tag == "p"
    assert serialize(nodes) == "<p>hello <b>world</b></p>"


def test_full_document_reduced_to_body():
    markup = "<html><head><title>x</title><style>p{}</style></head><body><p>a</p></body></html>"
    assert serialize(parse_html(markup)) == "<p>a</p>"


def test_scripts_and_comments_dropped():
    markup = "<!--StartFragment--><p>keep</p><script>alert(1)</script><iframe src='x'></iframe><!--EndFragment-->"
    assert serialize(parse_html(markup)) == "<p>keep</p>"


def test_event_handlers_and_javascript_urls_dropped():
    markup = '<a href="javascript:alert(1)" onclick="x()" title="t">link</a><img src="a.png" onerror="x()">'
    assert serialize(parse_html(markup)) == '<a title="t">link</a><img src="a.png">'


def test_class_attribute_kept_as_string():
    nodes = parse_html('<span class="a b">x</span>')
    assert nodes[0].attributes == {"class": "a b"}


def test_serialize_escapes_text_and_attributes():
    nodes = [Element("p", {"title": 'say "hi" & <go>'}, [Text("1 < 2 & 3 > 0")])]
    assert serialize(nodes) == '<p title="say &quot;hi&quot; &amp; &lt;go&gt;">1 &lt; 2 &amp; 3 &gt; 0</p>'


def test_void_elements_have_no_closing_tag():
    assert serialize([Element("br"), Element("img", {"src": "x"})]) == '<br><img src="x">'


def test_text_to_fragment_escapes_and_breaks_lines():
    text = "a < b & c\nsecond > line"
    fragment = text_to_fragment(text)
    assert serialize(fragment) == "<div>a &lt; b &amp; c<br>second &gt; line</div>"
    assert visible_text(fragment) == text
    assert find_images(fragment) == []


def test_text_to_fragment_normalizes_crlf():
    fragment = text_to_fragment("one\r\ntwo")
    assert serialize(fragment) == "<div>one<br>two</div>"


def test_text_to_fragment_keeps_blank_lines():
    fragment = text_to_fragment("a\n\nb")
    assert visible_text(fragment) == "a\n\nb"


def test_find_images_in_document_order():
    nodes = parse_html('<div><img src="1"><p><img src="2"></p></div><img src="3">')
    assert [img.attributes["src"] for img in find_images(nodes)] == ["1", "2", "3"]


def test_sanitize_round_trip_is_stable():
    markup = "<p>hi</p>"
    assert sanitize_html(markup) == markup
    assert sanitize_html(sanitize_html("<p onclick='x'>hi</p>")) == markup
