"""Rule engine: walks a parsed Document and writes the minified markup.

Each node decides its own output, constrained by the next emitted sibling
for end-tag omission. Children are filtered (comments, bangs, instructions)
and whitespace-collapsed before any sibling lookahead so that omission is
decided on what will actually be written, which keeps the output stable
when it is minified again.
"""

import re
import sys

from .cfg import DEFAULT_CFG
from .constants import (
    BLOCK_ELEMENTS,
    BOOLEAN_ATTRIBUTES,
    COLGROUP_CONTENT_ELEMENTS,
    COLLAPSIBLE_ATTRIBUTES,
    DEFAULT_ATTRIBUTE_VALUES,
    FOREIGN_TEXT_ELEMENTS,
    FOREIGN_WHITESPACE_SENSITIVE_ELEMENTS,
    HEAD_CONTENT_ELEMENTS,
    IMPLIED_END_BY_START,
    LAYOUT_ELEMENTS,
    OMIT_END_TAG_AT_END,
    OMIT_END_TAG_BEFORE,
    RCDATA_ELEMENTS,
    REDUNDANT_IF_EMPTY_ATTRIBUTES,
    SVG_HTML_INTEGRATION_POINTS,
    TRANSPARENT_INLINE_ELEMENTS,
    URL_ATTRIBUTES,
    WHITESPACE,
    WHITESPACE_SENSITIVE_ELEMENTS,
)
from .delegate import minify_css, minify_css_declarations, minify_js
from .entities import encode_text
from .node import (
    Bang,
    Comment,
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
from .parser import parse
from .serialize import serialize_end_tag, serialize_start_tag

_ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})
_WHITESPACE_RUN_PATTERN = re.compile(r"[\t\n\f\r ]+")
_DOCTYPE_HTML_PATTERN = re.compile(r"doctype[\t\n\f\r ]*html[\t\n\f\r ]*", re.IGNORECASE)
_MINIFIED_DOCTYPE = "<!doctypehtml>"

# Foreign elements whose whitespace-only children may render
_FOREIGN_KEEPS_BLANK = FOREIGN_TEXT_ELEMENTS | SVG_HTML_INTEGRATION_POINTS | frozenset(["annotation-xml"])

_COMMENT_LIKE = (Comment, Bang, Instruction)


def _lower(name):
    return name.translate(_ASCII_LOWER_TABLE)


def _is_html_element(node, names=None):
    if type(node) is not Element or node.namespace is not Namespace.HTML:
        return False
    return names is None or node.name in names


def _is_block(node):
    return _is_html_element(node, BLOCK_ELEMENTS)


class Minifier:
    """Writes one Document. Not reusable across threads; create one per call."""

    __slots__ = ("cfg", "debug_enabled", "out", "space_before")

    def __init__(self, cfg=None, *, debug=False):
        self.cfg = cfg or DEFAULT_CFG
        self.debug_enabled = bool(debug)
        self.out = []
        # Whether the last written text ended in a space that still renders
        self.space_before = True

    def debug(self, message, indent=4):
        if self.debug_enabled:
            print(f"{' ' * indent}{message}", file=sys.stderr)

    def minify_document(self, document):
        self.out = []
        self.space_before = True
        children = self._prepare_children(document.children, None, False)
        self._minify_children(children, None, False)
        return "".join(self.out)

    # Children -----------------------------------------------------------

    def _keeps_comment(self, comment):
        if not comment.ended or self.cfg.keep_comments:
            return True
        return comment.is_ssi and self.cfg.keep_ssi_comments

    def _prepare_children(self, children, parent, preserve):
        """Drop removable nodes and merge the text they separated."""
        cfg = self.cfg
        foreign_parent = parent is not None and parent.namespace is not Namespace.HTML
        kept = []
        for child in children:
            child_type = type(child)
            if child_type is Comment:
                if not self._keeps_comment(child):
                    continue
            elif child_type is Bang:
                if (
                    child.ended
                    and cfg.remove_bangs
                    and not child.is_doctype
                    and not (child.is_cdata and foreign_parent)
                ):
                    continue
            elif child_type is Instruction:
                if child.ended and cfg.remove_processing_instructions:
                    continue
            elif child_type is Text and kept and type(kept[-1]) is Text:
                kept[-1] = Text(kept[-1].value + child.value)
                continue
            kept.append(child)

        if preserve:
            return kept
        return self._collapse_whitespace(kept, parent)

    def _collapse_whitespace(self, nodes, parent):
        if parent is None:
            trims_edges = True
            drops_blank = False
        elif parent.namespace is Namespace.HTML:
            trims_edges = parent.name in BLOCK_ELEMENTS
            drops_blank = parent.name in LAYOUT_ELEMENTS
        else:
            trims_edges = False
            drops_blank = _lower(parent.name) not in _FOREIGN_KEEPS_BLANK

        result = []
        last = len(nodes) - 1
        for index, node in enumerate(nodes):
            if type(node) is not Text:
                result.append(node)
                continue
            value = _WHITESPACE_RUN_PATTERN.sub(" ", node.value)
            if drops_blank and value == " ":
                continue
            if value[:1] == " ":
                trims = _is_block(nodes[index - 1]) if index > 0 else trims_edges
                if trims:
                    value = value[1:]
            if value[-1:] == " ":
                trims = _is_block(nodes[index + 1]) if index < last else trims_edges
                if trims:
                    value = value[:-1]
            if value:
                result.append(Text(value))
        return result

    def _minify_children(self, children, parent, preserve):
        rcdata = parent.name if _is_html_element(parent, RCDATA_ELEMENTS) else None
        last = len(children) - 1
        leading = True
        for index, child in enumerate(children):
            child_type = type(child)
            if child_type is Element:
                following = children[index + 1] if index < last else None
                self._minify_element(child, parent, following, preserve, leading)
                leading = False
            elif child_type is Text:
                self._emit_text(child.value, rcdata, preserve)
            elif child_type is ScriptOrStyleContent:
                self._emit_code(child)
            elif child_type is Comment:
                self.out.append(child.source)
                if child.is_ssi:
                    self.space_before = False
            elif child_type is Bang:
                self._emit_bang(child)
            elif child_type is Instruction:
                self.out.append(f"<?{child.code}?>" if child.ended else f"<?{child.code}")
                self.space_before = False
            elif child_type is Verbatim:
                self.out.append(child.code)
                self.space_before = False

    # Leaves -------------------------------------------------------------

    def _emit_text(self, value, rcdata, preserve):
        if preserve:
            self.space_before = False
        else:
            # A space after one that already renders would collapse away
            if self.space_before and value[:1] == " ":
                value = value[1:]
            if not value:
                return
            self.space_before = value[-1] == " "
        self.out.append(
            encode_text(value, rcdata=rcdata, escape_chevron=self.cfg.preserve_chevron_percent_template_syntax)
        )

    def _emit_code(self, node):
        code = node.code
        if node.lang is ScriptOrStyleLang.JS and self.cfg.minify_js:
            code = minify_js(code)
        elif node.lang is ScriptOrStyleLang.CSS and self.cfg.minify_css:
            code = minify_css(code)
        self.out.append(code)
        self.space_before = False

    def _emit_bang(self, bang):
        if not bang.ended:
            self.out.append(f"<!{bang.code}")
            return
        if bang.is_doctype and not self.cfg.do_not_minify_doctype and _DOCTYPE_HTML_PATTERN.fullmatch(bang.code):
            self.out.append(_MINIFIED_DOCTYPE)
            return
        self.out.append(f"<!{bang.code}>")
        if bang.is_cdata:
            self.space_before = False

    # Elements -----------------------------------------------------------

    def _boundary(self, element):
        if element.namespace is Namespace.HTML:
            name = element.name
            if name in TRANSPARENT_INLINE_ELEMENTS:
                return
            if name in BLOCK_ELEMENTS or name == "br":
                self.space_before = True
                return
        self.space_before = False

    def _start_tag(self, name, attrs, self_closing=False):
        cfg = self.cfg
        return serialize_start_tag(
            name,
            attrs,
            self_closing=self_closing,
            keep_spaces_between_attributes=cfg.keep_spaces_between_attributes,
            spec_compliant_unquoted=cfg.ensure_spec_compliant_unquoted_attribute_values,
        )

    def _minify_element(self, element, parent, following, preserve, leading=False):
        cfg = self.cfg
        out = self.out
        name = element.name
        is_html = element.namespace is Namespace.HTML
        closing_tag = element.closing_tag
        attrs = self._minify_attributes(element)

        if closing_tag == ElementClosingTag.VOID or closing_tag == ElementClosingTag.SELF_CLOSING:
            out.append(self._start_tag(name, attrs, self_closing=closing_tag == ElementClosingTag.SELF_CLOSING))
            self._boundary(element)
            return

        if is_html:
            child_preserve = preserve or name in WHITESPACE_SENSITIVE_ELEMENTS
        else:
            child_preserve = preserve or _lower(name) in FOREIGN_WHITESPACE_SENSITIVE_ELEMENTS
        children = self._prepare_children(element.children, element, child_preserve)

        emit_end = closing_tag == ElementClosingTag.PRESENT and (
            cfg.keep_closing_tags or not self._can_omit_end_tag(element, parent, following)
        )
        # A written end tag needs its start tag, or it would be stray when reparsed
        omit_start = (
            is_html
            and not emit_end
            and not attrs
            and not cfg.keep_html_and_head_opening_tags
            and self._can_omit_start_tag(name, parent, leading, children)
        )
        if omit_start:
            self.debug(f"omitting <{name}>")

        # Filled in once the children are written
        start_index = len(out)
        out.append("")
        self._boundary(element)
        self._minify_children(children, element, child_preserve)

        if (
            not is_html
            and closing_tag == ElementClosingTag.PRESENT
            and not cfg.keep_closing_tags
            and not any(out[start_index + 1 :])
        ):
            out[start_index] = self._start_tag(name, attrs, self_closing=True)
            self._boundary(element)
            return

        if not omit_start:
            out[start_index] = self._start_tag(name, attrs)
        if emit_end:
            out.append(serialize_end_tag(name))
        elif closing_tag == ElementClosingTag.PRESENT:
            self.debug(f"omitting </{name}>")
        self._boundary(element)

    def _can_omit_start_tag(self, name, parent, leading, children):
        # Only where the tag would be implied anyway; elsewhere browsers ignore it
        if not leading:
            return False
        if name == "html":
            return parent is None and (not children or not isinstance(children[0], (_COMMENT_LIKE, Verbatim)))
        if name == "head":
            if parent is not None and not _is_html_element(parent, ("html",)):
                return False
            return not children or type(children[0]) is Element
        return False

    def _can_omit_end_tag(self, element, parent, following):
        if element.namespace is not Namespace.HTML:
            return False
        name = element.name

        if name == "html" or name == "body":
            return not isinstance(following, _COMMENT_LIKE)
        if name == "head" or name == "colgroup":
            if isinstance(following, (_COMMENT_LIKE, Verbatim)):
                return False
            if type(following) is Text:
                return following.value[:1] not in WHITESPACE
            if name == "head":
                return not _is_html_element(following, HEAD_CONTENT_ELEMENTS)
            return not _is_html_element(following, COLGROUP_CONTENT_ELEMENTS)
        if name == "caption":
            return following is None or _is_html_element(following, IMPLIED_END_BY_START["caption"])

        if following is not None:
            siblings = OMIT_END_TAG_BEFORE.get(name)
            return siblings is not None and _is_html_element(following, siblings)
        parents = OMIT_END_TAG_AT_END.get(name)
        return parents is not None and _is_html_element(parent, parents)

    # Attributes ---------------------------------------------------------

    def _minify_attributes(self, element):
        """Attribute (name, value) pairs to write; a None value writes the name alone."""
        cfg = self.cfg
        name = element.name
        is_html = element.namespace is Namespace.HTML
        defaults = DEFAULT_ATTRIBUTE_VALUES.get(name) if is_html else None
        attrs = []
        for attr_name, value in element.attributes.items():
            if isinstance(value, RawAttrValue):
                attrs.append((attr_name, value))
                continue
            if not is_html:
                attrs.append((attr_name, value or None))
                continue

            if attr_name in COLLAPSIBLE_ATTRIBUTES:
                value = _WHITESPACE_RUN_PATTERN.sub(" ", value).strip(" ")
            elif attr_name in URL_ATTRIBUTES:
                value = value.strip(WHITESPACE)
            elif attr_name == "style":
                value = value.strip(WHITESPACE)
                if cfg.minify_css and value:
                    minified = minify_css_declarations(value)
                    if len(minified) < len(value):
                        value = minified

            if not value and attr_name in REDUNDANT_IF_EMPTY_ATTRIBUTES:
                self.debug(f"<{name}> dropping empty {attr_name}")
                continue
            if defaults is not None and attr_name in defaults:
                if _lower(value.strip(WHITESPACE)) in defaults[attr_name]:
                    if not (name == "input" and attr_name == "type" and cfg.keep_input_type_text_attr):
                        self.debug(f"<{name}> dropping default {attr_name}={value!r}")
                        continue
            if attr_name in BOOLEAN_ATTRIBUTES:
                tags = BOOLEAN_ATTRIBUTES[attr_name]
                if tags is None or name in tags:
                    value = ""
            attrs.append((attr_name, value or None))
        return attrs


def minify(src, cfg=None, *, debug=False):
    """Minify HTML (bytes or str) and return UTF-8 bytes.

    Undecodable input bytes are carried through unchanged. Never raises on
    malformed markup.
    """
    cfg = cfg or DEFAULT_CFG
    document = parse(src, cfg, debug=debug)
    minified = Minifier(cfg, debug=debug).minify_document(document)
    try:
        return minified.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        # Surrogates in str input that did not come from undecodable bytes
        return minified.encode("utf-8", "surrogatepass")
