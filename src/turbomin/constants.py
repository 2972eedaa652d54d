"""HTML5 Element and Attribute Tables

Static classification data consulted by the parser and the minifier. Element
groups are kept as lists where iteration order is useful to readers and as
sets or dicts where the code only needs lookups.

Usage:
    from turbomin.constants import VOID_ELEMENTS, OMIT_END_TAG_BEFORE

References:
    - https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    - https://html.spec.whatwg.org/multipage/syntax.html#optional-tags
    - https://html.spec.whatwg.org/multipage/parsing.html#tree-construction
"""

WHITESPACE = "\t\n\f\r "

# HTML Element Sets
VOID_ELEMENTS = frozenset(
    [
        "area",
        "base",
        "basefont",
        "bgsound",
        "br",
        "col",
        "embed",
        "frame",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    ]
)

# Content is captured verbatim up to the matching end tag
RAWTEXT_ELEMENTS = frozenset(
    [
        "iframe",
        "noembed",
        "noframes",
        "script",
        "style",
        "xmp",
    ]
)

# Content is text with character references, up to the matching end tag
RCDATA_ELEMENTS = frozenset(["textarea", "title"])

# Text inside these is rendered (or submitted) with its whitespace intact
WHITESPACE_SENSITIVE_ELEMENTS = frozenset(["listing", "plaintext", "pre", "textarea"])

# Inline text semantics: whitespace around and inside these renders
FORMATTING_ELEMENTS = frozenset(
    [
        "a",
        "abbr",
        "b",
        "bdi",
        "bdo",
        "cite",
        "data",
        "del",
        "dfn",
        "em",
        "i",
        "ins",
        "kbd",
        "mark",
        "q",
        "rp",
        "rt",
        "rtc",
        "ruby",
        "s",
        "samp",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "time",
        "u",
        "var",
        "wbr",
    ]
)

# Formatting elements that draw nothing of their own at their edges, so a
# collapsible space on one side of the tag collapses with one on the other side.
# Ruby parts and q (generated quotes) are excluded.
TRANSPARENT_INLINE_ELEMENTS = FORMATTING_ELEMENTS - frozenset(["q", "rp", "rt", "rtc", "ruby"])

# Elements rendered as blocks: whitespace at their boundaries never renders
BLOCK_ELEMENTS = frozenset(
    [
        "address",
        "article",
        "aside",
        "blockquote",
        "body",
        "caption",
        "center",
        "colgroup",
        "dd",
        "details",
        "dialog",
        "dir",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "frameset",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "head",
        "header",
        "hgroup",
        "hr",
        "html",
        "legend",
        "li",
        "listing",
        "main",
        "menu",
        "nav",
        "ol",
        "optgroup",
        "option",
        "p",
        "pre",
        "search",
        "section",
        "summary",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "title",
        "tr",
        "ul",
    ]
)

# Content models that admit no text: whitespace-only children are dropped
LAYOUT_ELEMENTS = frozenset(
    [
        "audio",
        "colgroup",
        "datalist",
        "dl",
        "frameset",
        "head",
        "hgroup",
        "html",
        "menu",
        "ol",
        "optgroup",
        "picture",
        "select",
        "table",
        "tbody",
        "tfoot",
        "thead",
        "tr",
        "ul",
        "video",
    ]
)

# Start tags that do not take the parser out of <head>
HEAD_CONTENT_ELEMENTS = frozenset(
    [
        "base",
        "basefont",
        "bgsound",
        "link",
        "meta",
        "noframes",
        "noscript",
        "script",
        "style",
        "template",
        "title",
    ]
)

# Start tags that close an open <p> (tree construction, "close a p element")
P_CLOSING_START_TAGS = frozenset(
    [
        "address",
        "article",
        "aside",
        "blockquote",
        "center",
        "dd",
        "details",
        "dialog",
        "dir",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "listing",
        "main",
        "menu",
        "nav",
        "ol",
        "p",
        "plaintext",
        "pre",
        "search",
        "section",
        "summary",
        "table",
        "ul",
        "xmp",
    ]
)

_RUBY_PARTS = frozenset(["rb", "rp", "rt", "rtc"])
_TABLE_SECTIONS = frozenset(["tbody", "tfoot", "thead"])

# Parser: current element -> start tags that implicitly end it
IMPLIED_END_BY_START = {
    "p": P_CLOSING_START_TAGS,
    "li": frozenset(["li"]),
    "dt": frozenset(["dd", "dt"]),
    "dd": frozenset(["dd", "dt"]),
    "rb": _RUBY_PARTS,
    "rp": _RUBY_PARTS,
    "rt": _RUBY_PARTS,
    "rtc": frozenset(["rb", "rtc"]),
    "option": frozenset(["hr", "optgroup", "option"]),
    "optgroup": frozenset(["hr", "optgroup"]),
    "caption": frozenset(["caption", "col", "colgroup", "td", "th", "tr"]) | _TABLE_SECTIONS,
    "thead": _TABLE_SECTIONS,
    "tbody": _TABLE_SECTIONS,
    "tfoot": _TABLE_SECTIONS,
    "tr": frozenset(["tr"]) | _TABLE_SECTIONS,
    "td": frozenset(["td", "th", "tr"]) | _TABLE_SECTIONS,
    "th": frozenset(["td", "th", "tr"]) | _TABLE_SECTIONS,
}

# Start tags that keep an open <colgroup> open
COLGROUP_CONTENT_ELEMENTS = frozenset(["col", "template"])

# Block siblings whose start tag closes a preceding <p>. Narrower than
# P_CLOSING_START_TAGS: these are the siblings before which the end tag may
# be dropped from valid documents.
P_OMISSION_SIBLINGS = frozenset(
    [
        "address",
        "article",
        "aside",
        "blockquote",
        "details",
        "dialog",
        "div",
        "dl",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "main",
        "menu",
        "nav",
        "ol",
        "p",
        "pre",
        "search",
        "section",
        "table",
        "ul",
    ]
)

# Minifier: element -> next sibling start tags before which its end tag is omitted
OMIT_END_TAG_BEFORE = {
    "li": frozenset(["li"]),
    "dt": frozenset(["dd", "dt"]),
    "dd": frozenset(["dd", "dt"]),
    "p": P_OMISSION_SIBLINGS,
    "rt": frozenset(["rp", "rt"]),
    "rp": frozenset(["rp", "rt"]),
    "optgroup": frozenset(["hr", "optgroup"]),
    "option": frozenset(["hr", "optgroup", "option"]),
    "thead": frozenset(["tbody", "tfoot"]),
    "tbody": frozenset(["tbody", "tfoot"]),
    "tr": frozenset(["tr"]),
    "td": frozenset(["td", "th"]),
    "th": frozenset(["td", "th"]),
}

# Minifier: element -> parents in which its end tag may be omitted when it is
# the last child (the parent's own end tag then closes it)
OMIT_END_TAG_AT_END = {
    "li": frozenset(["menu", "ol", "ul"]),
    "dd": frozenset(["div", "dl"]),
    "rt": frozenset(["ruby", "rtc"]),
    "rp": frozenset(["ruby", "rtc"]),
    "optgroup": frozenset(["select"]),
    "option": frozenset(["datalist", "optgroup", "select"]),
    "tbody": frozenset(["table"]),
    "tfoot": frozenset(["table"]),
    "tr": frozenset(["table", "tbody", "tfoot", "thead"]),
    "td": frozenset(["tr"]),
    "th": frozenset(["tr"]),
}

# Foreign content
SVG_HTML_INTEGRATION_POINTS = frozenset(["desc", "foreignobject", "title"])
MATHML_TEXT_INTEGRATION_POINTS = frozenset(["mi", "mn", "mo", "ms", "mtext"])
MATHML_HTML_ENCODINGS = frozenset(["application/xhtml+xml", "text/html"])

# Foreign elements whose text content renders, so whitespace is not dropped
FOREIGN_TEXT_ELEMENTS = frozenset(
    [
        "desc",
        "mi",
        "mn",
        "mo",
        "ms",
        "mtext",
        "text",
        "textpath",
        "title",
        "tspan",
    ]
)

# Foreign elements whose text is code
FOREIGN_WHITESPACE_SENSITIVE_ELEMENTS = frozenset(["script", "style"])

# HTML elements that break out of foreign content (SVG/MathML)
HTML_BREAK_OUT_ELEMENTS = frozenset(
    [
        "b",
        "big",
        "blockquote",
        "body",
        "br",
        "center",
        "code",
        "dd",
        "div",
        "dl",
        "dt",
        "em",
        "embed",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "head",
        "hr",
        "i",
        "img",
        "li",
        "listing",
        "menu",
        "meta",
        "nobr",
        "ol",
        "p",
        "pre",
        "ruby",
        "s",
        "small",
        "span",
        "strong",
        "strike",
        "sub",
        "sup",
        "table",
        "tt",
        "u",
        "ul",
        "var",
    ]
)

# <font> only breaks out when it carries one of these attributes
FONT_BREAK_OUT_ATTRIBUTES = frozenset(["color", "face", "size"])

# Attributes
# Attribute -> elements on which any value means "on" (None: every element)
BOOLEAN_ATTRIBUTES = {
    "allowfullscreen": frozenset(["iframe"]),
    "async": frozenset(["script"]),
    "autofocus": None,
    "autoplay": frozenset(["audio", "video"]),
    "checked": frozenset(["input"]),
    "controls": frozenset(["audio", "video"]),
    "default": frozenset(["track"]),
    "defer": frozenset(["script"]),
    "disabled": frozenset(["button", "fieldset", "input", "optgroup", "option", "select", "textarea"]),
    "formnovalidate": frozenset(["button", "input"]),
    "inert": None,
    "ismap": frozenset(["img"]),
    "itemscope": None,
    "loop": frozenset(["audio", "video"]),
    "multiple": frozenset(["input", "select"]),
    "muted": frozenset(["audio", "video"]),
    "nomodule": frozenset(["script"]),
    "novalidate": frozenset(["form"]),
    "open": frozenset(["details", "dialog"]),
    "playsinline": frozenset(["video"]),
    "readonly": frozenset(["input", "textarea"]),
    "required": frozenset(["input", "select", "textarea"]),
    "reversed": frozenset(["ol"]),
    "selected": frozenset(["option"]),
}

JAVASCRIPT_MIME_TYPES = frozenset(
    [
        "application/ecmascript",
        "application/javascript",
        "application/x-ecmascript",
        "application/x-javascript",
        "text/ecmascript",
        "text/javascript",
        "text/javascript1.0",
        "text/javascript1.1",
        "text/javascript1.2",
        "text/javascript1.3",
        "text/javascript1.4",
        "text/javascript1.5",
        "text/jscript",
        "text/livescript",
        "text/x-ecmascript",
        "text/x-javascript",
    ]
)

# Element -> attribute -> values (ASCII lowercase) equal to the missing-value default
DEFAULT_ATTRIBUTE_VALUES = {
    "area": {"shape": frozenset(["rect"])},
    "button": {"type": frozenset(["submit"])},
    "canvas": {"height": frozenset(["150"]), "width": frozenset(["300"])},
    "col": {"span": frozenset(["1"])},
    "colgroup": {"span": frozenset(["1"])},
    "form": {
        "autocomplete": frozenset(["on"]),
        "enctype": frozenset(["application/x-www-form-urlencoded"]),
        "method": frozenset(["get"]),
    },
    "iframe": {"loading": frozenset(["eager"])},
    "img": {"decoding": frozenset(["auto"]), "loading": frozenset(["eager"])},
    "input": {"type": frozenset(["text"])},
    "link": {"media": frozenset(["all"])},
    "script": {"type": JAVASCRIPT_MIME_TYPES},
    "style": {"media": frozenset(["all"]), "type": frozenset(["text/css"])},
    "td": {"colspan": frozenset(["1"]), "rowspan": frozenset(["1"])},
    "textarea": {"wrap": frozenset(["soft"])},
    "th": {"colspan": frozenset(["1"]), "rowspan": frozenset(["1"])},
    "track": {"kind": frozenset(["subtitles"])},
}

# Whitespace-separated token lists: runs collapse, ends trim
COLLAPSIBLE_ATTRIBUTES = frozenset(
    [
        "accesskey",
        "aria-controls",
        "aria-describedby",
        "aria-flowto",
        "aria-labelledby",
        "aria-owns",
        "blocking",
        "class",
        "headers",
        "itemprop",
        "itemref",
        "itemtype",
        "ping",
        "rel",
        "rev",
        "sandbox",
    ]
)

# URL-valued attributes: the URL parser strips leading and trailing whitespace
URL_ATTRIBUTES = frozenset(
    [
        "action",
        "cite",
        "formaction",
        "href",
        "longdesc",
        "poster",
        "src",
    ]
)

REDUNDANT_IF_EMPTY_ATTRIBUTES = frozenset(["class", "style"])

# Tree construction "special" category: a <li>/<dd>/<dt> start tag does not
# look for an open list item past these (address, div and p excepted), and an
# end tag without its own scope rule is ignored when one of these is in the way
SPECIAL_ELEMENTS = frozenset(
    [
        "address",
        "applet",
        "area",
        "article",
        "aside",
        "base",
        "basefont",
        "bgsound",
        "blockquote",
        "body",
        "br",
        "button",
        "caption",
        "center",
        "col",
        "colgroup",
        "dd",
        "details",
        "dir",
        "div",
        "dl",
        "dt",
        "embed",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "frame",
        "frameset",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "head",
        "header",
        "hgroup",
        "hr",
        "html",
        "iframe",
        "img",
        "input",
        "li",
        "link",
        "listing",
        "main",
        "marquee",
        "menu",
        "meta",
        "nav",
        "noembed",
        "noframes",
        "noscript",
        "object",
        "ol",
        "p",
        "param",
        "plaintext",
        "pre",
        "script",
        "search",
        "section",
        "select",
        "source",
        "style",
        "summary",
        "table",
        "tbody",
        "td",
        "template",
        "textarea",
        "tfoot",
        "th",
        "thead",
        "title",
        "tr",
        "track",
        "ul",
        "wbr",
        "xmp",
    ]
)

LIST_ITEM_SEARCH_PASSTHROUGH = frozenset(["address", "div", "p"])

# Elements that stop the search for an open element ("in scope")
SCOPE_BOUNDARIES = frozenset(
    [
        "applet",
        "caption",
        "html",
        "marquee",
        "object",
        "table",
        "td",
        "template",
        "th",
    ]
)

# <p> is looked for in "button scope"
BUTTON_SCOPE_BOUNDARIES = SCOPE_BOUNDARIES | frozenset(["button"])

LIST_ITEM_SCOPE_BOUNDARIES = SCOPE_BOUNDARIES | frozenset(["ol", "ul"])

TABLE_SCOPE_BOUNDARIES = frozenset(["html", "table", "template"])

HEADING_ELEMENTS = frozenset(["h1", "h2", "h3", "h4", "h5", "h6"])

# End tags that close their element only when it is in scope, and are
# ignored otherwise
SCOPED_END_TAG_ELEMENTS = frozenset(
    [
        "address",
        "applet",
        "article",
        "aside",
        "blockquote",
        "body",
        "button",
        "center",
        "dd",
        "details",
        "dialog",
        "dir",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "header",
        "hgroup",
        "html",
        "listing",
        "main",
        "marquee",
        "menu",
        "nav",
        "object",
        "ol",
        "pre",
        "search",
        "section",
        "summary",
        "ul",
    ]
)

# End tags looked up in "table scope"
TABLE_END_TAG_ELEMENTS = frozenset(["caption", "colgroup", "table", "tbody", "td", "tfoot", "th", "thead", "tr"])

# Browsers re-nest misplaced end tags of these (the adoption agency), which
# the tree does not model
ADOPTION_AGENCY_ELEMENTS = frozenset(
    ["a", "b", "big", "code", "em", "font", "i", "nobr", "s", "small", "strike", "strong", "tt", "u"]
)
