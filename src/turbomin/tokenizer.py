import re

from .entities import decode_entities_in_text
from .node import RawAttrValue
from .tokens import (
    BangToken,
    CharacterTokens,
    CommentToken,
    EOFToken,
    InstructionToken,
    ParseError,
    RawTextToken,
    Tag,
    TokenSinkResult,
    VerbatimToken,
)

_TAG_NAME_TERMINATOR_PATTERN = re.compile(r"[\t\n\f\r />]")
_ATTR_NAME_TERMINATOR_PATTERN = re.compile(r"[\t\n\f\r />=]")
_ATTR_VALUE_DOUBLE_PATTERN = re.compile('"')
_ATTR_VALUE_SINGLE_PATTERN = re.compile("'")
_ATTR_VALUE_UNQUOTED_PATTERN = re.compile(r"[\t\n\f\r >]")
_NON_WHITESPACE_PATTERN = re.compile(r"[^\t\n\f\r ]")
_COMMENT_END_PATTERN = re.compile(r"--!?>")
# Script data escape transitions: "<!--" (unless immediately closed), "-->",
# and "<script" / "</script" followed by a tag name terminator
_SCRIPT_DATA_PATTERN = re.compile(r"<!--(-*>)?|-->|<(/?)script[\t\n\f\r />]", re.IGNORECASE)
_ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})

_BRACE_TEMPLATE_CLOSERS = {"{{": "}}", "{#": "#}", "{%": "%}"}
_CHEVRON_TEMPLATE_CLOSERS = {"<%": "%>"}

_END_TAG_PATTERNS = {}


def _end_tag_pattern(name):
    pattern = _END_TAG_PATTERNS.get(name)
    if pattern is None:
        pattern = re.compile("</" + re.escape(name) + r"[\t\n\f\r />]", re.IGNORECASE)
        _END_TAG_PATTERNS[name] = pattern
    return pattern


def _is_ascii_alpha(c):
    return ("a" <= c <= "z") or ("A" <= c <= "Z")


def _normalize_newlines(text):
    if "\r" in text:
        return text.replace("\r\n", "\n").replace("\r", "\n")
    return text


class TokenizerOpts:
    __slots__ = (
        "collect_errors",
        "preserve_brace_template_syntax",
        "preserve_chevron_percent_template_syntax",
    )

    def __init__(
        self,
        collect_errors=False,
        preserve_brace_template_syntax=False,
        preserve_chevron_percent_template_syntax=False,
    ):
        self.collect_errors = bool(collect_errors)
        self.preserve_brace_template_syntax = bool(preserve_brace_template_syntax)
        self.preserve_chevron_percent_template_syntax = bool(preserve_chevron_percent_template_syntax)


class Tokenizer:
    """Single left-to-right scan over the source, emitting tokens to a sink.

    The sink (the tree builder) answers each start tag with a
    ``TokenSinkResult`` telling the tokenizer whether the element's content is
    markup, raw text, RCDATA, script data or plaintext.
    """

    DATA = 0
    RAWTEXT = 1
    RCDATA = 2
    SCRIPT_DATA = 3
    PLAINTEXT = 4

    __slots__ = (
        "buffer",
        "data_stop_pattern",
        "errors",
        "length",
        "opts",
        "pos",
        "rawtext_tag_name",
        "sink",
        "state",
        "template_closers",
        "template_pattern",
        "text_buffer",
    )

    def __init__(self, sink, opts=None):
        self.sink = sink
        self.opts = opts or TokenizerOpts()

        closers = {}
        if self.opts.preserve_brace_template_syntax:
            closers.update(_BRACE_TEMPLATE_CLOSERS)
        if self.opts.preserve_chevron_percent_template_syntax:
            closers.update(_CHEVRON_TEMPLATE_CLOSERS)
        self.template_closers = closers
        if closers:
            self.template_pattern = re.compile("|".join(re.escape(opener) for opener in closers))
        else:
            self.template_pattern = None
        # "<%" is found through "<"
        stops = ["<"] + [re.escape(opener) for opener in closers if opener[0] != "<"]
        self.data_stop_pattern = re.compile("|".join(stops))

        self.state = self.DATA
        self.buffer = ""
        self.length = 0
        self.pos = 0
        self.rawtext_tag_name = None
        self.text_buffer = []
        self.errors = []

    def run(self, html):
        self.buffer = html or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.state = self.DATA
        self.rawtext_tag_name = None
        self.text_buffer.clear()
        self.errors = []

        while self.pos < self.length:
            state = self.state
            if state == self.DATA:
                self._state_data()
            elif state == self.PLAINTEXT:
                self._state_plaintext()
            else:
                self._state_rawtext()

        self._flush_text()
        self._emit_token(EOFToken())

    # Data ---------------------------------------------------------------

    def _state_data(self):
        buffer = self.buffer
        pos = self.pos
        match = self.data_stop_pattern.search(buffer, pos)
        if match is None:
            self.text_buffer.append(buffer[pos:])
            self.pos = self.length
            return
        start = match.start()
        if start > pos:
            self.text_buffer.append(buffer[pos:start])
        self.pos = start
        if buffer[start] == "<":
            self._state_tag_open()
        else:
            self._consume_template(match.group())

    def _state_tag_open(self):
        buffer = self.buffer
        pos = self.pos
        next_char = buffer[pos + 1] if pos + 1 < self.length else ""
        if next_char == "%" and "<%" in self.template_closers:
            self._consume_template("<%")
        elif next_char == "!":
            self._state_markup_declaration_open()
        elif next_char == "?":
            self._state_instruction()
        elif next_char == "/":
            self._state_end_tag_open()
        elif _is_ascii_alpha(next_char):
            self._flush_text()
            self._consume_tag(Tag.START, pos + 1)
        else:
            if not next_char:
                self._emit_error("eof-before-tag-name", pos)
            self.text_buffer.append("<")
            self.pos = pos + 1

    def _state_end_tag_open(self):
        buffer = self.buffer
        pos = self.pos
        next_char = buffer[pos + 2] if pos + 2 < self.length else ""
        if _is_ascii_alpha(next_char):
            self._flush_text()
            self._consume_tag(Tag.END, pos + 2)
            return
        if next_char == ">":
            self._emit_error("missing-end-tag-name", pos)
            self.pos = pos + 3
            return
        if not next_char:
            # "</" at end of input stays text, but only there
            self._emit_error("eof-before-tag-name", pos)
            self._flush_text()
            self._emit_token(VerbatimToken("</", False))
            self.pos = pos + 2
            return
        # "</" followed by anything else opens a bogus comment
        self._emit_error("invalid-first-character-of-tag-name", pos)
        self._flush_text()
        end = buffer.find(">", pos + 2)
        if end == -1:
            self._emit_error("eof-in-comment", pos)
            self._emit_token(VerbatimToken(buffer[pos:], False))
            self.pos = self.length
            return
        self._emit_token(CommentToken(buffer[pos + 2 : end], source=buffer[pos : end + 1]))
        self.pos = end + 1

    def _state_markup_declaration_open(self):
        self._flush_text()
        buffer = self.buffer
        start = self.pos
        if buffer.startswith("<!--", start):
            self._consume_comment(start + 4)
            return
        if buffer.startswith("<![CDATA[", start) and self.sink.in_foreign_content():
            end = buffer.find("]]>", start + 9)
            if end != -1:
                end += 2
            self._emit_delimited(BangToken, start + 2, end, 1, "eof-in-cdata")
            return
        end = buffer.find(">", start + 2)
        self._emit_delimited(BangToken, start + 2, end, 1, "eof-in-bang")

    def _consume_comment(self, code_start):
        buffer = self.buffer
        if buffer.startswith(">", code_start):
            self._emit_error("abrupt-closing-of-empty-comment", code_start)
            self._emit_token(CommentToken("", source=buffer[code_start - 4 : code_start + 1]))
            self.pos = code_start + 1
            return
        if buffer.startswith("->", code_start):
            self._emit_error("abrupt-closing-of-empty-comment", code_start)
            self._emit_token(CommentToken("", source=buffer[code_start - 4 : code_start + 2]))
            self.pos = code_start + 2
            return
        match = _COMMENT_END_PATTERN.search(buffer, code_start)
        if match is None:
            self._emit_error("eof-in-comment", code_start - 4)
            self._emit_token(CommentToken(buffer[code_start:], False))
            self.pos = self.length
            return
        source = buffer[code_start - 4 : match.end()]
        self._emit_token(CommentToken(buffer[code_start : match.start()], source=source))
        self.pos = match.end()

    def _state_instruction(self):
        self._flush_text()
        start = self.pos
        end = self.buffer.find("?>", start + 2)
        self._emit_delimited(InstructionToken, start + 2, end, 2, "eof-in-processing-instruction")

    def _emit_delimited(self, token_class, code_start, end, closer_length, eof_error):
        if end == -1:
            self._emit_error(eof_error, self.pos)
            self._emit_token(token_class(self.buffer[code_start:], False))
            self.pos = self.length
            return
        self._emit_token(token_class(self.buffer[code_start:end]))
        self.pos = end + closer_length

    # Template syntax ----------------------------------------------------

    def _template_end(self, start, opener):
        closer = self.template_closers[opener]
        end = self.buffer.find(closer, start + len(opener))
        if end == -1:
            return self.length, False
        return end + len(closer), True

    def _consume_template(self, opener):
        self._flush_text()
        start = self.pos
        end, ended = self._template_end(start, opener)
        if not ended:
            self._emit_error("eof-in-template-syntax", start)
        self._emit_token(VerbatimToken(self.buffer[start:end], ended))
        self.pos = end

    def _scan_run(self, pos, stop_pattern):
        """Find where a name or value run ends, stepping over template syntax.

        Returns:
            tuple: (end, saw_template)
        """
        buffer = self.buffer
        template_pattern = self.template_pattern
        saw_template = False
        while True:
            match = stop_pattern.search(buffer, pos)
            end = match.start() if match is not None else self.length
            if template_pattern is not None:
                opener = template_pattern.search(buffer, pos, end)
                if opener is not None:
                    saw_template = True
                    pos, _ = self._template_end(opener.start(), opener.group())
                    continue
            return end, saw_template

    # Tags ---------------------------------------------------------------

    def _consume_tag(self, kind, name_start):
        buffer = self.buffer
        length = self.length
        tag_start = self.pos
        pos, saw_template = self._scan_run(name_start, _TAG_NAME_TERMINATOR_PATTERN)
        name = buffer[name_start:pos]
        verbatim_names = {name} if saw_template else None
        attrs = []
        self_closing = False

        while True:
            match = _NON_WHITESPACE_PATTERN.search(buffer, pos)
            if match is None:
                self._eof_in_tag(tag_start, saw_template)
                return
            pos = match.start()
            char = buffer[pos]
            if char == ">":
                pos += 1
                break
            if char == "/":
                if buffer.startswith("/>", pos):
                    self_closing = True
                    pos += 2
                    break
                self._emit_error("unexpected-solidus-in-tag", pos)
                pos += 1
                continue

            if char == "=":
                self._emit_error("unexpected-equals-sign-before-attribute-name", pos)
                name_end, template = self._scan_run(pos + 1, _ATTR_NAME_TERMINATOR_PATTERN)
            else:
                name_end, template = self._scan_run(pos, _ATTR_NAME_TERMINATOR_PATTERN)
            attr_name = buffer[pos:name_end]
            if template:
                saw_template = True
                if verbatim_names is None:
                    verbatim_names = set()
                verbatim_names.add(attr_name)
            pos = name_end

            value = ""
            match = _NON_WHITESPACE_PATTERN.search(buffer, pos)
            if match is not None and buffer[match.start()] == "=":
                pos = match.start() + 1
                match = _NON_WHITESPACE_PATTERN.search(buffer, pos)
                if match is None:
                    self._eof_in_tag(tag_start, saw_template)
                    return
                pos = match.start()
                quote = buffer[pos]
                if quote == '"' or quote == "'":
                    stop = _ATTR_VALUE_DOUBLE_PATTERN if quote == '"' else _ATTR_VALUE_SINGLE_PATTERN
                    value_end, template = self._scan_run(pos + 1, stop)
                    if value_end >= length:
                        self._eof_in_tag(tag_start, saw_template or template)
                        return
                    raw = buffer[pos + 1 : value_end]
                    pos = value_end + 1
                elif quote == ">":
                    self._emit_error("missing-attribute-value", pos)
                    quote = ""
                    raw = ""
                    template = False
                else:
                    quote = ""
                    value_end, template = self._scan_run(pos, _ATTR_VALUE_UNQUOTED_PATTERN)
                    raw = buffer[pos:value_end]
                    pos = value_end
                if template:
                    saw_template = True
                    value = RawAttrValue(raw, quote)
                else:
                    value = decode_entities_in_text(_normalize_newlines(raw), in_attribute=True)
            attrs.append((attr_name, value))

        self.pos = pos
        if kind == Tag.END:
            if attrs:
                self._emit_error("end-tag-with-attributes", tag_start)
            self._emit_token(Tag(Tag.END, name))
            return

        tag = Tag(Tag.START, name, attrs, self_closing)
        if verbatim_names is not None:
            tag.verbatim_names = frozenset(verbatim_names)
        self._emit_token(tag)
        if self.state != self.DATA:
            self.rawtext_tag_name = name.translate(_ASCII_LOWER_TABLE)

    def _eof_in_tag(self, tag_start, saw_template):
        # The incomplete tag is discarded, unless template syntax in it must survive
        self._emit_error("eof-in-tag", tag_start)
        if saw_template:
            self._emit_token(VerbatimToken(self.buffer[tag_start:], False))
        self.pos = self.length

    # Raw text -----------------------------------------------------------

    def _find_script_end(self, pos):
        escaped = False
        double_escaped = False
        for match in _SCRIPT_DATA_PATTERN.finditer(self.buffer, pos):
            token = match.group()
            if token[1] == "!":
                if match.group(1) is None and not double_escaped:
                    escaped = True
            elif token == "-->":
                escaped = False
                double_escaped = False
            elif match.group(2):
                if double_escaped:
                    double_escaped = False
                else:
                    return match.start()
            elif escaped:
                double_escaped = True
        return self.length

    def _state_rawtext(self):
        buffer = self.buffer
        pos = self.pos
        if self.state == self.SCRIPT_DATA:
            end = self._find_script_end(pos)
        else:
            match = _end_tag_pattern(self.rawtext_tag_name).search(buffer, pos)
            end = match.start() if match is not None else self.length
        if end > pos:
            data = buffer[pos:end]
            if self.state == self.RCDATA:
                self._emit_token(CharacterTokens(decode_entities_in_text(_normalize_newlines(data))))
            else:
                self._emit_token(RawTextToken(data))
        self.pos = end
        self.state = self.DATA
        self.rawtext_tag_name = None

    def _state_plaintext(self):
        self._emit_token(RawTextToken(self.buffer[self.pos :]))
        self.pos = self.length

    # Emission -----------------------------------------------------------

    def _flush_text(self):
        if not self.text_buffer:
            return
        data = "".join(self.text_buffer)
        self.text_buffer.clear()
        if "\0" in data:
            self._emit_error("unexpected-null-character")
        data = _normalize_newlines(data)
        if "&" in data:
            data = decode_entities_in_text(data)
        self._emit_token(CharacterTokens(data))

    def _emit_token(self, token):
        result = self.sink.process_token(token)
        if result == TokenSinkResult.Plaintext:
            self.state = self.PLAINTEXT
        elif result == TokenSinkResult.RawData:
            self.state = self.RAWTEXT
        elif result == TokenSinkResult.Script:
            self.state = self.SCRIPT_DATA
        elif result == TokenSinkResult.RCData:
            self.state = self.RCDATA

    def emit_error(self, code, pos=None):
        self._emit_error(code, pos)

    def _emit_error(self, code, pos=None):
        if not self.opts.collect_errors:
            return
        if pos is None:
            pos = self.pos
        buffer = self.buffer
        line = buffer.count("\n", 0, pos) + 1
        column = pos - buffer.rfind("\n", 0, pos)
        self.errors.append(ParseError(code, line, column))
