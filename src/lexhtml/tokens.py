class Attribute:
    __slots__ = ("name", "value")

    def __init__(self, name, value=""):
        self.name = name
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Attribute):
            return NotImplemented
        return self.name == other.name and self.value == other.value

    __hash__ = None

    def __repr__(self):
        if self.value == "":
            return f"Attribute({self.name!r})"
        return f"Attribute({self.name!r}={self.value!r})"


class Tag:
    __slots__ = ("attrs", "kind", "name", "self_closing")

    START = 0
    END = 1

    def __init__(self, kind, name, attrs=None, self_closing=False):
        self.kind = kind
        self.name = name
        self.attrs = attrs if attrs is not None else []
        self.self_closing = bool(self_closing)

    def get(self, name, default=None):
        """Return the value of attribute ``name`` or ``default``."""
        for attr in self.attrs:
            if attr.name == name:
                return attr.value
        return default

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.name == other.name
            and self.attrs == other.attrs
            and self.self_closing == other.self_closing
        )

    __hash__ = None

    def __repr__(self):
        if self.attrs:
            attrs = " " + " ".join(
                attr.name if attr.value == "" else f"{attr.name}={attr.value!r}" for attr in self.attrs
            )
        else:
            attrs = ""
        closing = " /" if self.self_closing else ""
        kind_str = "start" if self.kind == self.START else "end"
        return f"<{kind_str}:{self.name}{attrs}{closing}>"


class CharacterToken:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data

    def __eq__(self, other):
        if not isinstance(other, CharacterToken):
            return NotImplemented
        return self.data == other.data

    __hash__ = None

    def __repr__(self):
        return f"CharacterToken({self.data!r})"


class CommentToken:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data

    def __eq__(self, other):
        if not isinstance(other, CommentToken):
            return NotImplemented
        return self.data == other.data

    __hash__ = None

    def __repr__(self):
        return f"CommentToken({self.data!r})"


class Doctype:
    __slots__ = ("force_quirks", "name", "public_id", "system_id")

    def __init__(self, name=None, public_id=None, system_id=None, force_quirks=False):
        self.name = name
        self.public_id = public_id
        self.system_id = system_id
        self.force_quirks = bool(force_quirks)

    def __eq__(self, other):
        if not isinstance(other, Doctype):
            return NotImplemented
        return (
            self.name == other.name
            and self.public_id == other.public_id
            and self.system_id == other.system_id
            and self.force_quirks == other.force_quirks
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"Doctype(name={self.name!r}, public_id={self.public_id!r}, "
            f"system_id={self.system_id!r}, force_quirks={self.force_quirks})"
        )


class DoctypeToken:
    __slots__ = ("doctype",)

    def __init__(self, doctype):
        self.doctype = doctype

    def __eq__(self, other):
        if not isinstance(other, DoctypeToken):
            return NotImplemented
        return self.doctype == other.doctype

    __hash__ = None

    def __repr__(self):
        return f"DoctypeToken({self.doctype!r})"


class EOFToken:
    __slots__ = ()

    def __eq__(self, other):
        return isinstance(other, EOFToken)

    __hash__ = None

    def __repr__(self):
        return "EOFToken()"


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
