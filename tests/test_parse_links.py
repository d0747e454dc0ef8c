# -----------------------------
# File: tests/test_parse_links.py
# -----------------------------
from link_extractor import extract_links


def test_extract_links_from_html_and_plain_text():
    body = '''
    <html><head><title>Hi</title></head>
    <body>
    <a href="https://example.com/one">L1</a>
    <a href="/relative">not absolute</a>
    Plain mention: see https://other.example/two.
    {"next": "https://api.example/page?x=1&y=2"}
    </body></html>
    '''
    links = extract_links(body)
    assert links == {
        'https://example.com/one',
        'https://other.example/two',
        'https://api.example/page?x=1&y=2',
    }


def test_extract_links_collapses_duplicates():
    body = 'https://a.com/x https://a.com/x\nhttps://a.com/x'
    assert extract_links(body) == {'https://a.com/x'}


def test_extract_links_trims_punctuation_and_unbalanced_brackets():
    body = '(see https://a.com/x), also https://en.wikipedia.org/wiki/Foo_(bar)!'
    assert extract_links(body) == {'https://a.com/x', 'https://en.wikipedia.org/wiki/Foo_(bar)'}


def test_extract_links_malformed_text_is_not_a_candidate():
    assert extract_links('not a url https://example.com') == {'https://example.com'}


def test_extract_links_empty_input():
    assert extract_links('') == set()
    assert extract_links(None) == set()
    assert extract_links('nothing to see here :// at all') == set()
