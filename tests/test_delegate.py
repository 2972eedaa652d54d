import unittest
from unittest import mock

from turbomin.delegate import minify_css, minify_css_declarations, minify_js


class TestDelegates(unittest.TestCase):
    def test_css(self):
        assert minify_css("a { color : red ; }") == "a{color:red}"

    def test_js(self):
        assert minify_js("var x = 1 ;\n") == "var x=1;"

    def test_bang_comments_dropped(self):
        assert minify_css("/*! keep? */a{b:c}") == "a{b:c}"
        assert minify_js("/*! keep? */var a;") == "var a;"


class TestStyleDeclarations(unittest.TestCase):
    def test_declarations_unwrapped(self):
        assert minify_css_declarations("color : red ; margin : 0") == "color:red;margin:0"

    def test_broken_wrapper_returns_input(self):
        with mock.patch("turbomin.delegate.minify_css", return_value="garbage"):
            assert minify_css_declarations("color: red") == "color: red"

    def test_wrapper_passed_to_css_minifier(self):
        with mock.patch("turbomin.delegate.minify_css", return_value="x{a:b}") as css:
            assert minify_css_declarations("a : b") == "a:b"
        css.assert_called_once_with("x{a : b}")


if __name__ == "__main__":
    unittest.main()
