class Tag:
    __slots__ = ("attrs", "kind", "name", "self_closing", "verbatim_names")

    START = 0
    END = 1

    def __init__(self, kind, name, attrs=None, self_closing=False):
        self.kind = kind
        self.name = name
        # (name, value) pairs in source order, duplicates included
        self.attrs = attrs if attrs is not None else []
        self.self_closing = bool(self_closing)
        # Names holding template syntax, exempt from case folding
        self.verbatim_names = frozenset()

    def __repr__(self):
        attrs = " ".join(f"{name}={value!r}" for name, value in self.attrs)
        closing = " /" if self.self_closing else ""
        kind_str = "start" if self.kind == self.START else "end"
        return f"<{kind_str}:{self.name}{closing} {attrs}>"


class CharacterTokens:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data


class RawTextToken:
    """Verbatim body of a script or style-like raw text element."""

    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data


class CommentToken:
    __slots__ = ("data", "ended", "source")

    def __init__(self, data, ended=True, source=None):
        self.data = data
        self.ended = ended
        self.source = source


class BangToken:
    __slots__ = ("data", "ended")

    def __init__(self, data, ended=True):
        self.data = data
        self.ended = ended


class InstructionToken:
    __slots__ = ("data", "ended")

    def __init__(self, data, ended=True):
        self.data = data
        self.ended = ended


class VerbatimToken:
    __slots__ = ("data", "ended")

    def __init__(self, data, ended=True):
        self.data = data
        self.ended = ended


class EOFToken:
    __slots__ = ()


class ParseError:
    """Represents a parse error with location information."""

    __slots__ = ("code", "column", "line", "message")

    def __init__(self, code, line=None, column=None, message=None):
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code

    def __repr__(self):
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self):
        if self.line is not None and self.column is not None:
            if self.message != self.code:
                return f"({self.line},{self.column}): {self.code} - {self.message}"
            return f"({self.line},{self.column}): {self.code}"
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.line == other.line and self.column == other.column

    __hash__ = None  # Unhashable since we define __eq__


class TokenSinkResult:
    __slots__ = ()

    Continue = 0
    Plaintext = 1
    RawData = 2
    Script = 3
    RCData = 4
