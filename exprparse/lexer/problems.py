r"""@package exprparse.lexer.problems

Positions, collected problems and the exception bundling them.

Instead of raising on the first problem, the character reader, the tokenizer
and the parser append ParseError objects to one shared list (the *problem
collector*). Lexical, syntactic and semantic problems therefore appear in
source order. Only once processing is complete, the collected list is turned
into a single ParseException (see ParseException.create()).
"""

from collections import namedtuple
from enum import Enum


__all__ = [
    "Position",
    "UNKNOWN",
    "Severity",
    "ParseError",
    "ParseException",
]


class Position(namedtuple('Position', ['line', 'pos'])):
    r"""One-based line and character position within a line.

    Anything with `line` and `pos` attributes (chars, tokens) can be used
    where a position is expected.
    """
    __slots__ = ()

    @classmethod
    def of(cls, obj):
        r"""Return the position of an object having `line` and `pos` attributes."""
        if isinstance(obj, Position):
            return obj
        return cls(obj.line, obj.pos)

    def __str__(self):
        return "%d:%d" % (self.line, self.pos)


## Position of problems which cannot be associated with a place in the input.
UNKNOWN = Position(0, 0)


class Severity(Enum):
    r"""Whether a problem is a warning or an error."""
    WARNING = 'WARNING'
    ERROR = 'ERROR'


class ParseError(object):
    r"""An error or warning which occurred when processing an input.

    Create instances using the factory methods warning() and error(). The
    message is prefixed with the line and character position, unless the
    position is UNKNOWN.
    """

    __slots__ = ("_position", "_message", "_severity")

    def __init__(self, position, message, severity):
        self._position = Position.of(position)
        self._message = message
        self._severity = severity

    @classmethod
    def _create(cls, pos, msg, severity):
        pos = Position.of(pos)
        if pos.line > 0:
            msg = "%3d:%2d: %s" % (pos.line, pos.pos, msg)
        return cls(pos, msg, severity)

    @classmethod
    def warning(cls, pos, msg):
        r"""Create a warning for the given position (which may be UNKNOWN)."""
        return cls._create(pos, msg, Severity.WARNING)

    @classmethod
    def error(cls, pos, msg):
        r"""Create an error for the given position (which may be UNKNOWN)."""
        return cls._create(pos, msg, Severity.ERROR)

    @property
    def position(self):
        r"""Position at which the problem occurred."""
        return self._position

    @property
    def message(self):
        r"""Message explaining the problem, including the position prefix."""
        return self._message

    @property
    def severity(self):
        r"""One of the Severity values."""
        return self._severity

    def is_error(self):
        return self._severity is Severity.ERROR

    def is_warning(self):
        return self._severity is Severity.WARNING

    def __str__(self):
        return "%s %s" % (self._severity.value, self._message)

    def __repr__(self):
        return "<ParseError(%s)>" % self


class ParseException(Exception):
    r"""Signals that processing an input failed.

    The exception carries every problem collected while processing the input,
    so that callers can e.g. highlight all mistakes at once instead of only
    the first one.
    """

    def __init__(self, message, errors):
        super(ParseException, self).__init__(message)
        ## The ordered list of ParseError objects (errors and warnings).
        self.errors = list(errors)

    @classmethod
    def create(cls, errors):
        r"""Create an exception summarizing the given list of problems."""
        errors = list(errors)
        if len(errors) == 1:
            return cls(errors[0].message, errors)
        if len(errors) > 1:
            return cls("%d errors occurred. First: %s"
                       % (len(errors), errors[0].message), errors)
        return cls("An unknown error occurred", errors)

    @property
    def message(self):
        r"""The summary message."""
        return self.args[0]

    def details(self):
        r"""Return all problems as one string, one problem per line."""
        return "\n".join(str(e) for e in self.errors)
