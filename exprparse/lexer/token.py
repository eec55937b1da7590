r"""@package exprparse.lexer.token

Tokens produced by the tokenizer and the builder used to assemble them.

A token consists of a position, a type and three strings. The *trigger*,
along with the type, identifies what kind of token we're looking at. For
example, the string `"Hello"`, the identifier `Hello` and the special id
`#Hello` all have the same content (`Hello`) but different types
(`STRING`, `ID`, `SPECIAL_ID`). The two special ids `$Hello` and `#Hello`
have the same type and content but differ in their trigger (`$` and `#`).

The *content* holds the effective value of the token used for further
processing, while the *source* holds the complete text consumed while reading
the token. For the string constant `"Hello"`, the content is `Hello` and the
source is `"Hello"`.

Operator symbols like `+` or `<=` are described by their trigger alone; their
content is empty. Brackets (and `|` used as a bracket) carry their character
as trigger and content.

Tokens are immutable. The tokenizer assembles each token using a
TokenBuilder, which is discarded once the token has been frozen. Changing the
kind of a token while reading it (e.g. an `INTEGER` turning out to be a
`DECIMAL`, or an `ID` being a `KEYWORD`) creates a new builder carrying
forward the accumulated fields (see TokenBuilder.retype()).
"""

from enum import Enum

from .problems import Position


__all__ = [
    "TokenType",
    "Token",
    "TokenBuilder",
]


class TokenType(Enum):
    r"""The basic token types.

    * `ID`: a name or reference like a function name or variable
    * `SPECIAL_ID`: an id starting with a special character like `$` or `#`
      (or ending in a special id terminator)
    * `STRING`: a string constant
    * `DECIMAL`: a decimal constant
    * `SCIENTIFIC_DECIMAL`: a decimal constant in scientific notation
    * `INTEGER`: an integer constant
    * `SYMBOL`: any operator like `+`, `-`, `**` as well as brackets
    * `KEYWORD`: an `ID` identified as a keyword
    * `EOI`: the end of the input
    """
    ID = 'ID'
    SPECIAL_ID = 'SPECIAL_ID'
    STRING = 'STRING'
    DECIMAL = 'DECIMAL'
    SCIENTIFIC_DECIMAL = 'SCIENTIFIC_DECIMAL'
    INTEGER = 'INTEGER'
    SYMBOL = 'SYMBOL'
    KEYWORD = 'KEYWORD'
    EOI = 'EOI'


_NUMBER_TYPES = (TokenType.INTEGER, TokenType.DECIMAL,
                 TokenType.SCIENTIFIC_DECIMAL)


class Token(object):
    r"""Immutable lexical unit read by the tokenizer."""

    __slots__ = ("_type", "_trigger", "_content", "_source", "_line", "_pos")

    def __init__(self, type, trigger, content, source, line, pos):
        # pylint: disable=redefined-builtin
        self._type = type
        self._trigger = trigger
        self._content = content
        self._source = source
        self._line = line
        self._pos = pos

    @property
    def type(self):
        r"""The TokenType of this token."""
        return self._type

    @property
    def trigger(self):
        r"""Characters which further specify the token (e.g. the operator)."""
        return self._trigger

    @property
    def content(self):
        r"""The effective content of this token."""
        return self._content

    @property
    def source(self):
        r"""All characters consumed while reading this token."""
        return self._source

    @property
    def line(self):
        return self._line

    @property
    def pos(self):
        return self._pos

    @property
    def position(self):
        return Position(self._line, self._pos)

    def is_type(self, type):
        # pylint: disable=redefined-builtin
        return self._type is type

    def is_end(self):
        r"""Return whether this is the end of input token."""
        return self._type is TokenType.EOI

    def is_not_end(self):
        return self._type is not TokenType.EOI

    def matches(self, type, trigger):
        r"""Return whether this token has the given type and trigger."""
        # pylint: disable=redefined-builtin
        if not self.is_type(type):
            return False
        if trigger is None:
            raise ValueError("trigger must not be None")
        return self._trigger == trigger

    def was_triggered_by(self, *triggers):
        r"""Return whether the trigger is one of the given ones."""
        return any(t is not None and t == self._trigger for t in triggers)

    def has_content(self, content):
        r"""Return whether the content equals the given one, ignoring case."""
        if content is None:
            raise ValueError("content must not be None")
        return content.lower() == self._content.lower()

    def _is_type_with_trigger(self, type, triggers):
        # pylint: disable=redefined-builtin
        if not triggers:
            return self.is_type(type)
        return any(self.matches(type, t) for t in triggers)

    def is_symbol(self, *symbols):
        r"""Return whether this is a symbol, optionally one of the given ones."""
        return self._is_type_with_trigger(TokenType.SYMBOL, symbols)

    def is_keyword(self, *keywords):
        r"""Return whether this is a keyword, optionally one of the given ones."""
        return self._is_type_with_trigger(TokenType.KEYWORD, keywords)

    def is_special_identifier(self, *triggers):
        r"""Return whether this is a special id, optionally with one of the given triggers."""
        return self._is_type_with_trigger(TokenType.SPECIAL_ID, triggers)

    def is_identifier(self, *values):
        r"""Return whether this is an identifier, optionally with one of the given contents."""
        if not self.is_type(TokenType.ID):
            return False
        if not values:
            return True
        return self._content in values

    def is_special_identifier_with_content(self, trigger, *contents):
        r"""Return whether this is a special id with the given trigger and one of the contents."""
        if not self.matches(TokenType.SPECIAL_ID, trigger):
            return False
        if not contents:
            return True
        return self._content in contents

    def is_integer(self):
        return self._type is TokenType.INTEGER

    def is_decimal(self):
        return self._type is TokenType.DECIMAL

    def is_scientific_decimal(self):
        return self._type is TokenType.SCIENTIFIC_DECIMAL

    def is_number(self):
        r"""Return whether this is an integer, decimal or scientific decimal."""
        return self._type in _NUMBER_TYPES

    def is_string(self):
        return self._type is TokenType.STRING

    def __str__(self):
        return "%s:%s (%d:%d)" % (self._type.value, self._source,
                                  self._line, self._pos)

    def __repr__(self):
        return "<Token %s>" % self


class TokenBuilder(object):
    r"""Mutable token under construction.

    Only used during the single lexing step producing one token, then
    frozen into a Token.
    """

    __slots__ = ("type", "trigger", "content", "source", "line", "pos")

    def __init__(self, type, position, trigger="", content="", source=""):
        # pylint: disable=redefined-builtin
        position = Position.of(position)
        self.type = type
        self.trigger = trigger
        self.content = content
        self.source = source
        self.line = position.line
        self.pos = position.pos

    @classmethod
    def create_and_fill(cls, type, ch):
        r"""Create a builder using `ch` as initial trigger, content and source.

        The position of the char becomes the position of the token.
        """
        # pylint: disable=redefined-builtin
        return cls(type, ch, trigger=ch.string_value,
                   content=ch.string_value, source=str(ch))

    def retype(self, type, trigger=None, content=None, source=None):
        r"""Create a new builder of another type carrying forward all fields.

        Any of `trigger`, `content` and `source` may be given to replace the
        respective field in the new builder.
        """
        # pylint: disable=redefined-builtin
        return TokenBuilder(
            type, Position(self.line, self.pos),
            trigger=self.trigger if trigger is None else trigger,
            content=self.content if content is None else content,
            source=self.source if source is None else source,
        )

    def is_type(self, type):
        # pylint: disable=redefined-builtin
        return self.type is type

    def add_to_trigger(self, ch):
        r"""Add a char to the trigger and the source, but not to the content."""
        self.trigger += ch.value
        self.source += ch.value
        return self

    def add_to_source(self, ch):
        r"""Add a char to the source only."""
        self.source += ch.value
        return self

    def add_to_content(self, ch):
        r"""Add a char (or a plain string) to the content and the source."""
        value = ch if isinstance(ch, str) else ch.value
        self.content += value
        self.source += value
        return self

    def silent_add_to_content(self, value):
        r"""Add a string to the content without adding it to the source."""
        self.content += value
        return self

    def freeze(self):
        r"""Create the immutable Token from the current state."""
        return Token(self.type, self.trigger, self.content, self.source,
                     self.line, self.pos)
