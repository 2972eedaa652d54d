"""Document tree produced by the parser and consumed by the minifier.

Every node kind is a small ``__slots__`` class. Elements own their children
exclusively; nodes carry no parent pointers since the tree is walked once,
top-down.
"""

import enum


class Namespace(enum.Enum):
    HTML = "html"
    SVG = "svg"
    MATHML = "math"


class ElementClosingTag(enum.IntEnum):
    """How the source closed an element."""

    OMITTED = 0
    PRESENT = 1
    SELF_CLOSING = 2
    VOID = 3


class ScriptOrStyleLang(enum.Enum):
    CSS = "css"
    DATA = "data"
    JS = "js"


class Document:
    __slots__ = ("children", "errors")

    def __init__(self, children=None, errors=None):
        self.children = children if children is not None else []
        self.errors = errors if errors is not None else []

    def __repr__(self):
        return f"<Document children={len(self.children)}>"


class Bang:
    """``<! ... >`` declaration, including DOCTYPE and foreign CDATA sections."""

    __slots__ = ("code", "ended")

    def __init__(self, code, ended=True):
        self.code = code
        self.ended = ended

    def __repr__(self):
        return f"<Bang {self.code!r}{'' if self.ended else ' unterminated'}>"

    @property
    def is_doctype(self):
        return self.code[:7].lower() == "doctype"

    @property
    def is_cdata(self):
        return self.code.startswith("[CDATA[")


class Comment:
    """Comment text plus its spelling in the source (``<!-->``, ``</ x>``, ``--!>``)."""

    __slots__ = ("code", "ended", "source")

    def __init__(self, code, ended=True, source=None):
        self.code = code
        self.ended = ended
        if source is None:
            source = f"<!--{code}-->" if ended else f"<!--{code}"
        self.source = source

    def __repr__(self):
        return f"<Comment {self.code!r}{'' if self.ended else ' unterminated'}>"

    @property
    def is_ssi(self):
        # <!--#include virtual="..." -->
        return self.source.startswith("<!--#")


class Instruction:
    """``<? ... ?>`` processing instruction."""

    __slots__ = ("code", "ended")

    def __init__(self, code, ended=True):
        self.code = code
        self.ended = ended

    def __repr__(self):
        return f"<Instruction {self.code!r}{'' if self.ended else ' unterminated'}>"


class Verbatim:
    """Source span copied to the output byte-for-byte.

    Holds template syntax (``{{ ... }}``, ``{% ... %}``, ``<% ... %>``) and
    constructs cut off by the end of input whose real terminator is unknown.
    """

    __slots__ = ("code", "ended")

    def __init__(self, code, ended=True):
        self.code = code
        self.ended = ended

    def __repr__(self):
        return f"<Verbatim {self.code!r}{'' if self.ended else ' unterminated'}>"


class RawAttrValue:
    """Attribute value containing template syntax, kept with its source quote."""

    __slots__ = ("code", "quote")

    def __init__(self, code, quote=""):
        self.code = code
        self.quote = quote

    def __repr__(self):
        return f"RawAttrValue({self.code!r}, {self.quote!r})"

    def __eq__(self, other):
        if not isinstance(other, RawAttrValue):
            return NotImplemented
        return self.code == other.code and self.quote == other.quote

    __hash__ = None


class Element:
    __slots__ = ("attributes", "children", "closing_tag", "name", "namespace")

    def __init__(self, name, attributes=None, namespace=Namespace.HTML, closing_tag=ElementClosingTag.OMITTED):
        self.name = name
        self.attributes = attributes if attributes is not None else {}
        self.namespace = namespace
        self.children = []
        self.closing_tag = closing_tag

    def __repr__(self):
        prefix = "" if self.namespace is Namespace.HTML else f"{self.namespace.value} "
        return f"<Element {prefix}{self.name} {self.closing_tag.name.lower()}>"


class ScriptOrStyleContent:
    """Raw body of a script or style element. Never entity-decoded."""

    __slots__ = ("code", "lang")

    def __init__(self, code, lang):
        self.code = code
        self.lang = lang

    def __repr__(self):
        return f"<ScriptOrStyleContent {self.lang.value} {self.code!r}>"


class Text:
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"<Text {self.value!r}>"
