"""Minification rules, end to end from source markup to output bytes."""

import unittest
from unittest import mock

from turbomin import Cfg, minify


def m(html, **options):
    return minify(html, Cfg(**options)).decode("utf-8", "surrogateescape")


class TestWhitespace(unittest.TestCase):
    def test_runs_collapse(self):
        assert m("<p>a   b</p>") == "<p>a b</p>"
        assert m("<p>a\n\t b</p>") == "<p>a b</p>"

    def test_block_boundaries_collapse_fully(self):
        assert m("<div>  <p>x</p>  </div>") == "<div><p>x</p></div>"
        assert m("<div>a <div>b</div> c</div>") == "<div>a<div>b</div>c</div>"

    def test_inline_boundaries_keep_one_space(self):
        assert m("<p>a <b> b </b> c</p>") == "<p>a <b>b </b>c</p>"
        assert m("<p>a<b>b</b>c</p>") == "<p>a<b>b</b>c</p>"
        assert m("<p><span>a</span>  <span>b</span></p>") == "<p><span>a</span> <span>b</span></p>"

    def test_no_space_is_invented(self):
        assert m("<p>a<span>b</span></p>") == "<p>a<span>b</span></p>"

    def test_space_after_line_break(self):
        assert m("a<br> b") == "a<br>b"

    def test_layout_elements_drop_blank_text(self):
        assert m("<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>") == "<ul><li>a<li>b</ul>"
        assert m("<table> <tr> <td>1</td> </tr> </table>") == "<table><tr><td>1</table>"

    def test_whitespace_sensitive_elements_untouched(self):
        assert m("<pre>  a\n  b  </pre>") == "<pre>  a\n  b  </pre>"
        assert m("<textarea> a  b </textarea>") == "<textarea> a  b </textarea>"
        assert m("<pre><b> a  b </b></pre>") == "<pre><b> a  b </b></pre>"

    def test_document_edges_trimmed(self):
        assert m("  \n<p>x</p>\n  ") == "<p>x</p>"

    def test_foreign_whitespace(self):
        assert m("<svg>\n  <g>\n  </g>\n</svg>") == "<svg><g/></svg>"
        assert m("<svg><text>a  <tspan>b</tspan></text></svg>") == "<svg><text>a <tspan>b</tspan></text></svg>"


class TestComments(unittest.TestCase):
    def test_removed_by_default(self):
        assert m("<!-- note --><p>x</p>") == "<p>x</p>"

    def test_removal_merges_surrounding_text(self):
        assert m("<p>a <!-- x --> b</p>") == "<p>a b</p>"

    def test_keep_comments(self):
        assert m("<!-- note --><p>x</p>", keep_comments=True) == "<!-- note --><p>x</p>"

    def test_ssi_comment_always_kept(self):
        ssi = '<!--# include virtual="a" -->'
        assert m(ssi) == ssi
        assert m(ssi, keep_comments=True) == ssi
        assert m(ssi, keep_comments=False) == ssi

    def test_ssi_comment_removable_on_request(self):
        assert m('<!--#include virtual="a" --><p>x</p>', keep_ssi_comments=False) == "<p>x</p>"

    def test_unterminated_comment_survives(self):
        for options in [{}, {"keep_comments": True}, {"keep_ssi_comments": False}]:
            with self.subTest(options=options):
                assert m("<!-- never closed", **options) == "<!-- never closed"
        assert m("<p>a<!-- never closed") == "<p>a<!-- never closed"

    def test_kept_comments_keep_source_spelling(self):
        for comment in ["<!-->", "<!--->", "</ x>", "<!--a--!>"]:
            with self.subTest(comment=comment):
                assert m(comment + "<p>x", keep_comments=True) == comment + "<p>x"


class TestBangsAndInstructions(unittest.TestCase):
    def test_doctype_minified(self):
        assert m("<!DOCTYPE html>") == "<!doctypehtml>"
        assert m("<!doctype  HTML >") == "<!doctypehtml>"

    def test_doctype_kept(self):
        assert m("<!DOCTYPE html>", do_not_minify_doctype=True) == "<!DOCTYPE html>"
        legacy = '<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01//EN">'
        assert m(legacy) == legacy

    def test_doctype_survives_remove_bangs(self):
        assert m("<!DOCTYPE html><!foo>", remove_bangs=True) == "<!doctypehtml>"

    def test_bangs(self):
        assert m("<!foo><p>x</p>") == "<!foo><p>x</p>"
        assert m("<!foo><p>x</p>", remove_bangs=True) == "<p>x</p>"
        assert m("<!foo", remove_bangs=True) == "<!foo"

    def test_cdata_in_foreign_content_kept(self):
        html = "<svg><![CDATA[ x ]]></svg>"
        assert m(html, remove_bangs=True) == html

    def test_processing_instructions(self):
        assert m("<?php echo 1 ?><p>x</p>") == "<?php echo 1 ?><p>x</p>"
        assert m("<?php echo 1 ?><p>x</p>", remove_processing_instructions=True) == "<p>x</p>"
        assert m("<?php echo 1", remove_processing_instructions=True) == "<?php echo 1"


class TestTags(unittest.TestCase):
    def test_full_document(self):
        html = (
            "<!DOCTYPE html>\n<html>\n  <head>\n    <title>T</title>\n  </head>\n"
            "  <body>\n    <p>Hi</p>\n  </body>\n</html>\n"
        )
        assert m(html) == "<!doctypehtml><title>T</title><body><p>Hi</p>"

    def test_keep_html_and_head_opening_tags(self):
        html = "<html><head><title>x</title></head></html>"
        assert m(html) == "<title>x</title>"
        assert m(html, keep_html_and_head_opening_tags=True) == "<html><head><title>x</title>"

    def test_opening_tag_with_attributes_kept(self):
        assert m('<html lang="en"><body>x</body></html>') == "<html lang=en><body>x"

    def test_html_opening_tag_kept_before_comment(self):
        assert m("<html><!--c--><body></body></html>", keep_comments=True) == "<html><!--c--><body>"

    def test_head_closing_tag_kept_before_comment(self):
        html = "<head><meta charset=utf-8></head><!--c--><body></body>"
        assert m(html, keep_comments=True) == "<head><meta charset=utf-8></head><!--c--><body>"

    def test_list_items(self):
        assert m("<ul><li>a</li><li>b</li></ul>") == "<ul><li>a<li>b</ul>"
        assert m("<dl><dt>a</dt><dd>b</dd></dl>") == "<dl><dt>a<dd>b</dl>"
        assert m("<ul><li>a</li></ul>", keep_closing_tags=True) == "<ul><li>a</li></ul>"

    def test_list_item_before_text_kept(self):
        assert m("<ul><li>a</li>b<li>c</li></ul>") == "<ul><li>a</li>b<li>c</ul>"

    def test_paragraph_before_block(self):
        assert m("<div><p>a</p><div>b</div></div>") == "<div><p>a<div>b</div></div>"
        assert m("<div><p>a</p><span>b</span></div>") == "<div><p>a</p><span>b</span></div>"
        assert m("<div><p>a</p></div>") == "<div><p>a</p></div>"

    def test_table(self):
        assert m("<table><tr><td>1</td><td>2</td></tr></table>") == "<table><tr><td>1<td>2</table>"

    def test_select(self):
        html = "<select><option>a</option><option>b</option></select>"
        assert m(html) == "<select><option>a<option>b</select>"

    def test_misnested_end_tags_ignored(self):
        assert m("<span><div>a</span>b</div>c") == "<span><div>ab</div>c"
        assert m("<div><table><tr><td></div>x</td></tr></table>y") == "<div><table><tr><td>x</table>y"

    def test_any_heading_end_tag_closes_heading(self):
        assert m("<h1>a</h2>b") == "<h1>a</h1>b"

    def test_misnested_formatting_end_tag_kept(self):
        assert m("<b><p>x</b>y</p>") == "<b><p>x</b>y</p>"

    def test_misplaced_html_and_head_start_tags_kept(self):
        assert m("<p></p><head><form>") == "<p></p><head><form>"
        assert m("<td><html><tbody></td>") == "<td><html><tbody>"

    def test_omitted_end_tags_never_added(self):
        assert m("<div><span>a</div>") == "<div><span>a</div>"

    def test_omitted_end_before_removed_comment(self):
        assert m("<ul><li>a</li><!-- x --><li>b</li></ul>") == "<ul><li>a<li>b</ul>"

    def test_stray_tags(self):
        assert m("a</span>b") == "ab"
        assert m("a</br>b") == "a<br>b"
        assert m("a</p>") == "a</p>"
        assert m("a</") == "a</"

    def test_empty_foreign_element_self_closes(self):
        assert m('<svg><path d="M0 0"></path></svg>') == '<svg><path d="M0 0"/></svg>'
        assert m("<svg><path d=M0></path></svg>") == "<svg><path d=M0 /></svg>"
        assert m("<svg><g></g></svg>", keep_closing_tags=True) == "<svg><g></g></svg>"

    def test_foreign_case_preserved(self):
        assert m('<svg viewBox="0 0 1 1"></svg>') == '<svg viewBox="0 0 1 1"/>'
        assert m('<div viewBox="0 0 1 1"></div>') == '<div viewbox="0 0 1 1"></div>'

    def test_foreign_break_out(self):
        assert m("<svg><p>x</svg>") == "<svg><p>x"


class TestAttributes(unittest.TestCase):
    def test_quoting(self):
        assert m('<a href="/x">y</a>') == "<a href=/x>y</a>"
        assert m('<div id="a b"></div>') == '<div id="a b"></div>'
        assert m("<a title='say \"hi\"'>x</a>") == "<a title='say \"hi\"'>x</a>"
        assert m('<a title="it&#39;s &quot;x&quot;">y</a>') == '<a title=\'it&#39s "x"\'>y</a>'

    def test_spec_compliant_unquoted(self):
        assert m('<a href="a=b">x</a>') == "<a href=a=b>x</a>"
        assert m('<a href="a=b">x</a>', ensure_spec_compliant_unquoted_attribute_values=True) == '<a href="a=b">x</a>'

    def test_spaces_between_attributes(self):
        html = '<div id="a b" class="c"></div>'
        assert m(html) == '<div id="a b"class=c></div>'
        assert m(html, keep_spaces_between_attributes=True) == '<div id="a b" class=c></div>'

    def test_boolean_attributes(self):
        assert m('<input disabled="disabled" checked="">') == "<input disabled checked>"
        assert m('<div hidden="until-found"></div>') == "<div hidden=until-found></div>"

    def test_token_lists_collapse(self):
        assert m('<div class="  a   b  "></div>') == '<div class="a b"></div>'
        assert m('<a rel=" nofollow ">x</a>') == "<a rel=nofollow>x</a>"

    def test_empty_class_and_style_removed(self):
        assert m('<div class=" " style=""></div>') == "<div></div>"

    def test_empty_values_lose_their_quotes(self):
        assert m('<div data-x=""></div>') == "<div data-x></div>"

    def test_default_values_removed(self):
        assert m('<input type="text" name=q>') == "<input name=q>"
        assert m('<input type="TEXT">') == "<input>"
        assert m('<script type="text/javascript">a()</script>') == "<script>a()</script>"
        assert m('<form method="get" action="/s"></form>') == "<form action=/s></form>"
        assert m('<button type="submit">x</button>') == "<button>x</button>"

    def test_keep_input_type_text(self):
        assert m('<input type="text">', keep_input_type_text_attr=True) == "<input type=text>"

    def test_non_default_values_kept(self):
        assert m('<input type="email">') == "<input type=email>"
        assert m('<script type="module">a()</script>') == "<script type=module>a()</script>"

    def test_url_attributes_trimmed(self):
        assert m('<a href=" /x ">y</a>') == "<a href=/x>y</a>"

    def test_duplicate_attribute(self):
        assert m("<div a=1 b=2 a=3></div>") == "<div a=3 b=2></div>"

    def test_attribute_entities(self):
        assert m('<a href="?a=1&amp;b=2">x</a>') == "<a href=?a=1&b=2>x</a>"
        assert m('<a href="?a=1&amp;copy=2">x</a>') == "<a href=?a=1&copy=2>x</a>"


class TestText(unittest.TestCase):
    def test_entities_reencoded(self):
        assert m("<p>&lt;b&gt; &amp; &copy;</p>") == "<p>&ltb> & ©</p>"
        assert m("<p>a &amp;amp; b</p>") == "<p>a &ampamp; b</p>"

    def test_rcdata_escaping(self):
        assert m("<textarea>&lt;b>&lt;/b></textarea>") == "<textarea><b></b></textarea>"
        assert m("<textarea>&lt;/TEXTAREA ></textarea>") == "<textarea>&lt/TEXTAREA ></textarea>"
        assert m("<title>a&lt;/title</title>") == "<title>a</title</title>"

    def test_truncated_rcdata_end_tag(self):
        assert m("<title></") == "<title></"
        assert m("<textarea></") == "<textarea></"
        assert m("<title>a</titl") == "<title>a</titl"

    def test_non_ascii_and_undecodable_bytes(self):
        assert minify(b"<p>caf\xc3\xa9 \xff</p>") == b"<p>caf\xc3\xa9 \xff</p>"

    def test_str_with_lone_surrogate(self):
        assert minify("<p>\ud800</p>") == "<p>\ud800</p>".encode("utf-8", "surrogatepass")


class TestTemplateSyntax(unittest.TestCase):
    def test_brace_passthrough(self):
        assert m("<p>{{ name }}</p>", preserve_brace_template_syntax=True) == "<p>{{ name }}</p>"
        assert m("<p>  {{ name }}  </p>", preserve_brace_template_syntax=True) == "<p>{{ name }}</p>"
        assert m("<p>{%  if  a  %}x{% endif %}</p>", preserve_brace_template_syntax=True) == (
            "<p>{%  if  a  %}x{% endif %}</p>"
        )

    def test_brace_disabled(self):
        assert m("<p>{{  name  }}</p>") == "<p>{{ name }}</p>"

    def test_space_kept_between_template_and_text(self):
        assert m("<p>{{ a }}   b</p>", preserve_brace_template_syntax=True) == "<p>{{ a }} b</p>"

    def test_chevron_passthrough(self):
        html = "<p><%= a  %></p>"
        assert m(html, preserve_chevron_percent_template_syntax=True) == html

    def test_attribute_template_untouched(self):
        html = '<div class="{{ a }}  b"></div>'
        assert m(html, preserve_brace_template_syntax=True) == html

    def test_unterminated_template(self):
        assert m("<p>a {{ b  c", preserve_brace_template_syntax=True) == "<p>a {{ b  c"


class TestScriptAndStyle(unittest.TestCase):
    def test_script_untouched_without_minify_js(self):
        assert m("<script>  var x = 1;  </script>") == "<script>  var x = 1;  </script>"

    def test_style_untouched_without_minify_css(self):
        assert m("<style> p { color: red } </style>") == "<style> p { color: red } </style>"

    def test_script_delegated(self):
        with mock.patch("turbomin.minifier.minify_js", return_value="MIN") as minify_js:
            assert m("<script> var x = 1; </script>", minify_js=True) == "<script>MIN</script>"
        minify_js.assert_called_once_with(" var x = 1; ")

    def test_data_script_not_delegated(self):
        html = '<script type="application/ld+json"> {"a": 1} </script>'
        with mock.patch("turbomin.minifier.minify_js") as minify_js:
            assert m(html, minify_js=True) == '<script type=application/ld+json> {"a": 1} </script>'
        minify_js.assert_not_called()

    def test_style_delegated(self):
        with mock.patch("turbomin.minifier.minify_css", return_value="MIN") as minify_css:
            assert m("<style> p { } </style>", minify_css=True) == "<style>MIN</style>"
        minify_css.assert_called_once_with(" p { } ")

    def test_real_delegates(self):
        assert m("<script>\n  var x = 1 ;\n</script>", minify_js=True) == "<script>var x=1;</script>"
        out = m('<style>\n  p {  color : red  }\n</style><p style=" color : red ; ">x</p>', minify_css=True)
        assert out.startswith("<style>p{color:red")
        assert "style=color:red" in out or 'style="color:red' in out


class TestProperties(unittest.TestCase):
    samples = [
        "<!DOCTYPE html><html><head><title>x</title></head><body><p>a <b>b</b> c</p></body></html>",
        "<ul>\n<li>one\n<li>two <i>2</i>\n</ul>\n<p>end",
        "<table><tr><td>1<td>2<tr><td>3</table>",
        "<div>  a  <span> b </span>  <div> c </div> d </div>",
        "<svg viewBox='0 0 1 1'><g><path d='M0 0'/></g><text> a  b </text></svg>",
        "<p>&lt;&amp;&gt;&quot;&#39;&nbsp;&copy;&#x1F600;</p>",
        "<a href=' x ' title=\"a 'b' c\" class=' q  r '>link</a>",
        "<!-- c --><!--# ssi --><?pi?><!bang><p>x",
        "<pre>\n  keep  this \n</pre><textarea>\n a  </textarea>",
        "<script>if (a < b) { c('</div>') }</script><style>p { color: red }</style>",
        "<p>a<!-- unterminated",
        "<select><optgroup label=a><option>1<option>2</optgroup></select>",
        "<dl><dt>a<dd>b<dt>c<dd>d</dl>",
        "a</br>b</p>c</",
        "<input type=text disabled=disabled value=''><br/>",
        "<math><mi>x</mi><annotation-xml encoding='text/html'><p>y</p></annotation-xml></math>",
        # Malformed input found by fuzz.py
        "<span><div>a</span>b</div>c",
        "<div><table><tr><td></div>x</td></tr></table>y",
        "<b><p>x</b>y</p>",
        "<h1>a</h2>b",
        "<title></",
        "<textarea></",
        "<title>a&lt;/title</title>",
        "<p></p><head><form>",
        "<td><html><tbody></td>",
        "</ x><!--><!---><p>x",
        "<svg><foreignObject><div></svg>y",
    ]

    def test_idempotent(self):
        for html in self.samples:
            with self.subTest(html=html):
                once = minify(html)
                assert minify(once) == once

    def test_idempotent_with_templates(self):
        cfg = Cfg(preserve_brace_template_syntax=True, preserve_chevron_percent_template_syntax=True)
        for html in ["<p> {{ a }} b {% c %}</p>", "<a href='{{ u }}'> x </a>", "<%= a %> <p> b", "<p>{{ open"]:
            with self.subTest(html=html):
                once = minify(html, cfg)
                assert minify(once, cfg) == once

    def test_never_expands(self):
        for html in self.samples:
            with self.subTest(html=html):
                assert len(minify(html)) <= len(html.encode("utf-8"))

    def test_properties_hold_with_every_option(self):
        cfg = Cfg(**{name: True for name in Cfg.option_names()})
        for html in self.samples:
            with self.subTest(html=html):
                once = minify(html, cfg)
                assert minify(once, cfg) == once
                assert len(once) <= len(html.encode("utf-8"))


if __name__ == "__main__":
    unittest.main()
