import pytest

from proxy.rewriter import charset_of, rewrite_html_body, rewrite_links

ENTRY = "/portal-abc123"
BASE = "http://example.com/dir/page"


def test_single_quoted_src_rewritten_with_double_quotes():
    out = rewrite_links("<img src='x.png'>", BASE, ENTRY)
    assert out == '<img src="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fdir%2Fx.png">'


def test_double_quoted_href_rewritten():
    out = rewrite_links('<a href="/about">About</a>', BASE, ENTRY)
    assert out == '<a href="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fabout">About</a>'


def test_form_action_rewritten():
    out = rewrite_links('<form action="search?q=1">', BASE, ENTRY)
    assert out == '<form action="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fdir%2Fsearch%3Fq%3D1">'


def test_both_quoting_styles_in_one_document():
    out = rewrite_links("<a href=\"a\"></a><img src='b'>", BASE, ENTRY)
    assert 'href="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fdir%2Fa"' in out
    assert 'src="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fdir%2Fb"' in out


@pytest.mark.parametrize("markup", [
    '<a href="mailto:x@y.com">mail</a>',
    "<a href='JavaScript:void(0)'>js</a>",
    '<img src="data:image/png;base64,AAAA">',
    '<a href="">empty</a>',
    "<a href = ''>empty</a>",
])
def test_skipped_values_left_byte_for_byte(markup):
    assert rewrite_links(markup, BASE, ENTRY) == markup


def test_entities_decoded_before_resolving():
    out = rewrite_links('<a href="/p?a=1&amp;b=2">', BASE, ENTRY)
    assert out == '<a href="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fp%3Fa%3D1%26b%3D2">'


def test_attribute_name_case_kept_and_spacing_collapsed():
    out = rewrite_links('<A HREF = "https://other.org/">', BASE, ENTRY)
    assert out == '<A HREF="/portal-abc123?u=https%3A%2F%2Fother.org%2F">'


def test_css_urls_and_srcset_untouched():
    markup = '<div style="background:url(/bg.png)"></div><img srcset="a.png 1x">'
    assert rewrite_links(markup, BASE, ENTRY) == markup


def test_entry_path_trailing_slash_ignored():
    out = rewrite_links('<a href="/x">', BASE, ENTRY + "/")
    assert out == '<a href="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fx">'


def test_charset_detection():
    assert charset_of("text/html; charset=ISO-8859-1") == "iso8859-1"
    assert charset_of("text/html") == "utf-8"
    assert charset_of("text/html; charset=no-such-charset") == "utf-8"


def test_body_rewrite_keeps_undecodable_bytes():
    body = b'<p>\xff\xfe</p><a href="/x">'
    out = rewrite_html_body(body, "text/html", BASE, ENTRY)
    assert out == b'<p>\xff\xfe</p><a href="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fx">'


def test_body_rewrite_uses_declared_charset():
    body = '<p>caf\xe9</p><a href="y">'.encode("latin-1")
    out = rewrite_html_body(body, "text/html; charset=latin-1", BASE, ENTRY)
    assert out.startswith("<p>caf\xe9</p>".encode("latin-1"))
    assert out.endswith(b'href="/portal-abc123?u=http%3A%2F%2Fexample.com%2Fdir%2Fy">')
