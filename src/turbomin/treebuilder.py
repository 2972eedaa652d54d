import sys

from .constants import (
    ADOPTION_AGENCY_ELEMENTS,
    BUTTON_SCOPE_BOUNDARIES,
    COLGROUP_CONTENT_ELEMENTS,
    FONT_BREAK_OUT_ATTRIBUTES,
    HEAD_CONTENT_ELEMENTS,
    HEADING_ELEMENTS,
    HTML_BREAK_OUT_ELEMENTS,
    IMPLIED_END_BY_START,
    JAVASCRIPT_MIME_TYPES,
    LIST_ITEM_SCOPE_BOUNDARIES,
    LIST_ITEM_SEARCH_PASSTHROUGH,
    MATHML_HTML_ENCODINGS,
    MATHML_TEXT_INTEGRATION_POINTS,
    P_CLOSING_START_TAGS,
    RAWTEXT_ELEMENTS,
    RCDATA_ELEMENTS,
    SCOPE_BOUNDARIES,
    SCOPED_END_TAG_ELEMENTS,
    SPECIAL_ELEMENTS,
    SVG_HTML_INTEGRATION_POINTS,
    TABLE_END_TAG_ELEMENTS,
    TABLE_SCOPE_BOUNDARIES,
    VOID_ELEMENTS,
    WHITESPACE,
)
from .node import (
    Bang,
    Comment,
    Document,
    Element,
    ElementClosingTag,
    Instruction,
    Namespace,
    RawAttrValue,
    ScriptOrStyleContent,
    ScriptOrStyleLang,
    Text,
    Verbatim,
)
from .tokens import (
    BangToken,
    CharacterTokens,
    CommentToken,
    EOFToken,
    InstructionToken,
    RawTextToken,
    Tag,
    TokenSinkResult,
    VerbatimToken,
)

_ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})


def _lower(name):
    return name.translate(_ASCII_LOWER_TABLE)


def _attribute_text(element, name):
    """Plain (non-template) attribute value, trimmed and lowercased, or None."""
    value = element.attributes.get(name)
    if value is None or isinstance(value, RawAttrValue):
        return value
    return _lower(value.strip(WHITESPACE))


class TreeBuilder:
    """Token sink that assembles the Document.

    Keeps an explicit stack of open elements. Start tags may implicitly close
    the current element (``<li>`` after ``<li>``). End tags close their element
    when browsers would (it must be in scope, with no special element above
    it), leaving the elements above it with an omitted closing tag; other end
    tags are ignored. The recorded ``closing_tag`` is what the minifier
    may shrink from.
    """

    __slots__ = ("debug_enabled", "document", "open_elements", "tokenizer")

    def __init__(self, *, debug=False):
        self.debug_enabled = bool(debug)
        self.document = Document()
        self.open_elements = []
        self.tokenizer = None

    def debug(self, message, indent=4):
        # Only format when debugging is on
        if self.debug_enabled:
            print(f"{' ' * indent}{message}", file=sys.stderr)

    def _parse_error(self, code):
        if self.tokenizer is not None:
            self.tokenizer.emit_error(code)

    def in_foreign_content(self):
        return bool(self.open_elements) and self.open_elements[-1].namespace is not Namespace.HTML

    def process_token(self, token):
        token_type = type(token)
        if token_type is Tag:
            if token.kind == Tag.START:
                return self._process_start_tag(token)
            self._process_end_tag(token)
        elif token_type is CharacterTokens:
            self._append_text(token.data)
        elif token_type is RawTextToken:
            self._append_raw_text(token.data)
        elif token_type is CommentToken:
            self._append_child(Comment(token.data, token.ended, token.source))
        elif token_type is BangToken:
            self._append_child(Bang(token.data, token.ended))
        elif token_type is InstructionToken:
            self._append_child(Instruction(token.data, token.ended))
        elif token_type is VerbatimToken:
            self._append_child(Verbatim(token.data, token.ended))
        elif token_type is EOFToken:
            self.finish()
        return TokenSinkResult.Continue

    def finish(self):
        if self.open_elements:
            self.debug(f"EOF: {len(self.open_elements)} element(s) left open")
            self.open_elements.clear()
        return self.document

    # Insertion ----------------------------------------------------------

    def _current_children(self):
        if self.open_elements:
            return self.open_elements[-1].children
        return self.document.children

    def _append_child(self, node):
        self._current_children().append(node)

    def _append_text(self, data):
        if not data:
            return
        children = self._current_children()
        if children and type(children[-1]) is Text:
            children[-1].value += data
        else:
            children.append(Text(data))

    def _append_raw_text(self, data):
        if not self.open_elements:
            self._append_text(data)
            return
        element = self.open_elements[-1]
        element.children.append(ScriptOrStyleContent(data, self._raw_text_lang(element)))

    def _raw_text_lang(self, element):
        if element.name == "script":
            script_type = _attribute_text(element, "type")
            if script_type is None or script_type == "":
                return ScriptOrStyleLang.JS
            if script_type == "module" or script_type in JAVASCRIPT_MIME_TYPES:
                return ScriptOrStyleLang.JS
            return ScriptOrStyleLang.DATA
        if element.name == "style":
            style_type = _attribute_text(element, "type")
            if style_type is None or style_type in ("", "text/css"):
                return ScriptOrStyleLang.CSS
        return ScriptOrStyleLang.DATA

    # Namespaces ---------------------------------------------------------

    def _is_html_integration_point(self, element):
        if element.namespace is Namespace.SVG:
            return _lower(element.name) in SVG_HTML_INTEGRATION_POINTS
        if element.namespace is Namespace.MATHML and _lower(element.name) == "annotation-xml":
            return _attribute_text(element, "encoding") in MATHML_HTML_ENCODINGS
        return False

    def _accepts_html_start_tag(self, element, name):
        if element.namespace is Namespace.HTML or self._is_html_integration_point(element):
            return True
        return (
            element.namespace is Namespace.MATHML
            and _lower(element.name) in MATHML_TEXT_INTEGRATION_POINTS
            and name not in ("malignmark", "mglyph")
        )

    def _breaks_out_of_foreign_content(self, name, tag):
        if name in HTML_BREAK_OUT_ELEMENTS:
            return True
        if name == "font":
            return any(_lower(attr_name) in FONT_BREAK_OUT_ATTRIBUTES for attr_name, _ in tag.attrs)
        return False

    def _namespace_for_start_tag(self, name, current):
        if current is None or self._accepts_html_start_tag(current, name):
            if name == "svg":
                return Namespace.SVG
            if name == "math":
                return Namespace.MATHML
            return Namespace.HTML
        if name == "svg" and _lower(current.name) == "annotation-xml":
            return Namespace.SVG
        return current.namespace

    # Tags ---------------------------------------------------------------

    def _process_start_tag(self, tag):
        name = tag.name
        verbatim_names = tag.verbatim_names
        lname = name if name in verbatim_names else _lower(name)
        open_elements = self.open_elements
        current = open_elements[-1] if open_elements else None

        if (
            current is not None
            and not self._accepts_html_start_tag(current, lname)
            and self._breaks_out_of_foreign_content(lname, tag)
        ):
            self._parse_error("unexpected-html-element-in-foreign-content")
            while open_elements and not self._accepts_html_start_tag(open_elements[-1], lname):
                popped = open_elements.pop()
                self.debug(f"<{lname}> breaks out of foreign <{popped.name}>")
            current = open_elements[-1] if open_elements else None

        namespace = self._namespace_for_start_tag(lname, current)
        if namespace is Namespace.HTML:
            self._close_implied_by(lname)
            element_name = lname
        elif lname in ("svg", "math"):
            element_name = lname
        else:
            element_name = name

        attributes = {}
        for attr_name, value in tag.attrs:
            if namespace is Namespace.HTML and attr_name not in verbatim_names:
                attr_name = _lower(attr_name)
            if attr_name in attributes:
                # Last occurrence wins; the first occurrence keeps its position
                self._parse_error("duplicate-attribute")
            attributes[attr_name] = value

        element = Element(element_name, attributes, namespace)
        self._append_child(element)

        if namespace is Namespace.HTML:
            if lname in VOID_ELEMENTS:
                element.closing_tag = ElementClosingTag.VOID
                return TokenSinkResult.Continue
            if tag.self_closing:
                self._parse_error("non-void-html-element-start-tag-with-trailing-solidus")
        elif tag.self_closing:
            element.closing_tag = ElementClosingTag.SELF_CLOSING
            return TokenSinkResult.Continue

        open_elements.append(element)
        if namespace is not Namespace.HTML:
            if namespace is not (current.namespace if current is not None else Namespace.HTML):
                self.debug(f"<{element_name}> enters {namespace.name} content")
            return TokenSinkResult.Continue
        if lname == "script":
            return TokenSinkResult.Script
        if lname in RAWTEXT_ELEMENTS:
            return TokenSinkResult.RawData
        if lname in RCDATA_ELEMENTS:
            return TokenSinkResult.RCData
        if lname == "plaintext":
            return TokenSinkResult.Plaintext
        return TokenSinkResult.Continue

    def _pop_through(self, index, name):
        open_elements = self.open_elements
        for closed in reversed(open_elements[index:]):
            self.debug(f"<{name}> implies end of <{closed.name}>")
        del open_elements[index:]

    def _close_list_item(self, name, item_names):
        open_elements = self.open_elements
        for index in range(len(open_elements) - 1, -1, -1):
            node = open_elements[index]
            if node.namespace is not Namespace.HTML:
                return
            if node.name in item_names:
                self._pop_through(index, name)
                return
            if node.name in SPECIAL_ELEMENTS and node.name not in LIST_ITEM_SEARCH_PASSTHROUGH:
                return

    def _close_p_in_button_scope(self, name):
        open_elements = self.open_elements
        for index in range(len(open_elements) - 1, -1, -1):
            node = open_elements[index]
            if node.namespace is not Namespace.HTML or node.name in BUTTON_SCOPE_BOUNDARIES:
                return
            if node.name == "p":
                self._pop_through(index, name)
                return

    def _close_implied_by(self, name):
        if name == "li":
            self._close_list_item(name, ("li",))
        elif name == "dd" or name == "dt":
            self._close_list_item(name, ("dd", "dt"))
        if name in P_CLOSING_START_TAGS:
            self._close_p_in_button_scope(name)

        open_elements = self.open_elements
        while open_elements:
            current = open_elements[-1]
            if current.namespace is not Namespace.HTML:
                return
            current_name = current.name
            closers = IMPLIED_END_BY_START.get(current_name)
            if closers is not None and name in closers:
                pass
            elif current_name == "head" and name not in HEAD_CONTENT_ELEMENTS:
                pass
            elif current_name == "colgroup" and name not in COLGROUP_CONTENT_ELEMENTS:
                pass
            else:
                return
            open_elements.pop()
            self.debug(f"<{name}> implies end of <{current_name}>")

    def _is_scope_boundary(self, node, boundaries, foreign_boundaries=True):
        if node.namespace is Namespace.HTML:
            return node.name in boundaries
        return foreign_boundaries and self._is_foreign_special(node)

    def _is_foreign_special(self, node):
        name = _lower(node.name)
        if node.namespace is Namespace.SVG:
            return name in SVG_HTML_INTEGRATION_POINTS
        return name in MATHML_TEXT_INTEGRATION_POINTS or name == "annotation-xml"

    def _find_in_scope(self, names, boundaries, foreign_boundaries=True):
        """Index of the topmost open HTML element named in ``names``, or None
        when a scope boundary comes first."""
        open_elements = self.open_elements
        for index in range(len(open_elements) - 1, -1, -1):
            node = open_elements[index]
            if node.namespace is Namespace.HTML and node.name in names:
                return index
            if self._is_scope_boundary(node, boundaries, foreign_boundaries):
                return None
        return None

    def _find_any_other(self, name):
        open_elements = self.open_elements
        for index in range(len(open_elements) - 1, -1, -1):
            node = open_elements[index]
            if node.namespace is Namespace.HTML:
                if node.name == name:
                    return index
                if node.name in SPECIAL_ELEMENTS:
                    return None
            elif self._is_foreign_special(node):
                return None
        return None

    def _close_element(self, index, name):
        open_elements = self.open_elements
        for omitted in open_elements[index + 1 :]:
            self.debug(f"</{name}> implies end of <{omitted.name}>")
        open_elements[index].closing_tag = ElementClosingTag.PRESENT
        del open_elements[index:]

    def _process_end_tag(self, tag):
        name = tag.name
        lname = name if name in tag.verbatim_names else _lower(name)
        open_elements = self.open_elements

        if lname == "br":
            # Browsers treat </br> as <br>
            self._parse_error("unexpected-end-tag")
            self.debug("</br> becomes <br>")
            self._process_start_tag(Tag(Tag.START, "br"))
            return

        # Foreign elements on top of the stack match case-insensitively
        index = len(open_elements) - 1
        while index >= 0 and open_elements[index].namespace is not Namespace.HTML:
            if _lower(open_elements[index].name) == lname:
                self._close_element(index, lname)
                return
            index -= 1

        if lname == "p":
            index = self._find_in_scope(("p",), BUTTON_SCOPE_BOUNDARIES)
        elif lname == "li":
            index = self._find_in_scope(("li",), LIST_ITEM_SCOPE_BOUNDARIES)
        elif lname in HEADING_ELEMENTS:
            # Any heading end tag closes the open heading
            index = self._find_in_scope(HEADING_ELEMENTS, SCOPE_BOUNDARIES)
        elif lname in SCOPED_END_TAG_ELEMENTS:
            index = self._find_in_scope((lname,), SCOPE_BOUNDARIES)
        elif lname in TABLE_END_TAG_ELEMENTS:
            index = self._find_in_scope((lname,), TABLE_SCOPE_BOUNDARIES, foreign_boundaries=False)
        elif lname == "template":
            index = self._find_in_scope(("template",), (), foreign_boundaries=False)
        else:
            index = self._find_any_other(lname)

        if index is not None:
            self._close_element(index, lname)
            return

        self._parse_error("unexpected-end-tag")
        if lname == "p":
            # A stray </p> creates an empty paragraph; keep it exactly as written
            self.debug("stray </p> kept verbatim")
            self._append_child(Verbatim(f"</{name}>"))
        elif lname in ADOPTION_AGENCY_ELEMENTS and any(
            node.namespace is Namespace.HTML and node.name == lname for node in open_elements
        ):
            # Browsers re-nest content here; keep the tag as written
            self.debug(f"misnested </{name}> kept verbatim")
            self._append_child(Verbatim(f"</{name}>"))
        else:
            self.debug(f"ignoring </{name}>")
