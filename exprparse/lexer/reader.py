r"""@package exprparse.lexer.reader

Character level input: positioned characters read with lookahead.

The LookaheadReader wraps a text stream (or a plain string) and hands out
Char objects, each knowing its line and position within the line. Once the
input is exhausted, a Char holding the reserved null character is returned
forever (see Char.is_end_of_input()).
"""

import io
import unicodedata

from .lookahead import Lookahead
from .problems import ParseError, Position


__all__ = [
    "Char",
    "LookaheadReader",
]


## Reserved value marking the end of the input (never a legal source char).
END_OF_INPUT = '\0'


class Char(object):
    r"""A single character read from a LookaheadReader plus its position.

    Besides the value, some predicates determine the character class.
    Instances are immutable.
    """

    __slots__ = ("_value", "_line", "_pos")

    def __init__(self, value, line, pos):
        self._value = value
        self._line = line
        self._pos = pos

    @property
    def value(self):
        r"""The character itself (`'\0'` at the end of the input)."""
        return self._value

    @property
    def line(self):
        return self._line

    @property
    def pos(self):
        return self._pos

    @property
    def position(self):
        return Position(self._line, self._pos)

    def is_digit(self):
        r"""Return whether the value is a decimal digit."""
        return self._value.isdecimal()

    def is_letter(self):
        r"""Return whether the value is a (unicode) letter."""
        return self._value.isalpha()

    def is_whitespace(self):
        r"""Return whether the value is a blank, tab, line break or similar."""
        return self._value.isspace() and not self.is_end_of_input()

    def is_new_line(self):
        return self._value == '\n'

    def is_end_of_input(self):
        r"""Return whether this is the end of input indicator."""
        return self._value == END_OF_INPUT

    def is_control(self):
        r"""Return whether the value is an ISO control character."""
        return unicodedata.category(self._value) == 'Cc'

    def is_any(self, *tests):
        r"""Return whether the value equals one of the given characters.

        The end of input indicator never matches, even if `'\0'` is given.
        """
        for test in tests:
            if test == self._value and test != END_OF_INPUT:
                return True
        return False

    @property
    def string_value(self):
        r"""The value as string, or `""` for the end of input indicator."""
        if self.is_end_of_input():
            return ""
        return self._value

    def __str__(self):
        if self.is_end_of_input():
            return "<End Of Input>"
        return self._value

    def __repr__(self):
        return "<Char(%r, %d:%d)>" % (self._value, self._line, self._pos)


class LookaheadReader(Lookahead):
    r"""Reader of character streams supporting lookahead.

    Reads characters one after another from the given input. Using next(),
    upcoming characters can be inspected without consuming the current one.

    Lines and positions are one-based. A line break belongs to the line it
    terminates; the first character after it is at position 1 of the next
    line. The given stream is never closed by this class.
    """

    def __init__(self, source):
        r"""Create a reader for a text stream or a string.

        @param source
            A string or any object with a `read(size)` method returning
            strings (e.g. an open text file or `io.StringIO`).
        """
        super(LookaheadReader, self).__init__()
        if source is None:
            raise ValueError("source must not be None")
        if isinstance(source, str):
            source = io.StringIO(source)
        self._input = source
        self._line = 1
        self._pos = 0

    def _end_of_input(self):
        return Char(END_OF_INPUT, self._line, self._pos)

    def _fetch(self):
        try:
            character = self._input.read(1)
        except (OSError, ValueError) as e:
            self.problem_collector.append(
                ParseError.error(Position(self._line, self._pos), str(e))
            )
            return None
        if not character:
            return None
        self._pos += 1
        result = Char(character, self._line, self._pos)
        if character == '\n':
            self._line += 1
            self._pos = 0
        return result

    def __str__(self):
        items = self._buffered()
        if not items:
            return "%d:%d: Buffer empty" % (self._line, self._pos)
        return "%d:%d: %s" % (self._line, self._pos,
                              ", ".join(str(c) for c in items))
