r"""@package exprparse.lexer.tokenizer

Turns a stream of characters into a stream of tokens, supporting lookahead.

The Tokenizer reads from a reader.LookaheadReader and is itself a
lookahead.Lookahead of token.Token objects, i.e. each fetch performs one
complete lexical analysis step. By default it operates as follows:

* Whitespace is consumed and ignored.
* Line comments (`// ...`) and block comments (`/* ... */`) are ignored.
* A digit starts a number. Also a `-` followed by a digit (or by the decimal
  separator and a digit) and a decimal separator followed by a digit start a
  number. Numbers are read as `INTEGER` and promoted to `DECIMAL` or
  `SCIENTIFIC_DECIMAL` on the fly. Grouping separators (`1_000`) are
  accepted but left out of the content.
* A letter starts an `ID`, which may be converted to a `KEYWORD` or, if
  followed by a special id terminator, to a `SPECIAL_ID`.
* A string delimiter (`"` with escape character `\`, `'` without escaping)
  starts a `STRING`.
* Brackets are returned as single-character `SYMBOL`s, so `((` yields two
  symbols. Optionally, a lone `|` is treated as a bracket too.
* A special id starter (none by default, e.g. `$` or `#`) starts a
  `SPECIAL_ID`.
* Any other printable character starts a `SYMBOL`. Symbols are one or two
  characters long: `**`, `&&`, `||` and anything followed by `=`.

Problems are never raised while tokenizing. They are appended to the problem
collector and the tokenizer continues with the next character.

@b Examples

```
    tokenizer = Tokenizer("3 + a * 4")
    while tokenizer.more():
        print(tokenizer.consume())
```
"""

import logging
import warnings

from ..numutils import ExpressionWarning
from .lookahead import Lookahead
from .problems import ParseError, ParseException, Severity
from .reader import LookaheadReader
from .token import TokenBuilder, TokenType


__all__ = [
    "Tokenizer",
]


logger = logging.getLogger(__name__)


def _setting(attr, doc):
    r"""Create a property for a tokenizer setting.

    Changing a setting after the first token was fetched issues an
    ExpressionWarning, since tokens already in the lookahead buffer were read
    with the old setting.
    """
    def getter(self):
        return getattr(self, attr)
    def setter(self, value):
        self._check_not_started(attr.lstrip('_'))
        setattr(self, attr, value)
    return property(getter, setter, doc=doc)


class Tokenizer(Lookahead):
    r"""Lookahead stream of tokens read from a character source.

    All settings may be changed before the first token is requested. Use
    configure() to change several settings at once.
    """

    ## Names accepted by configure().
    SETTINGS = (
        "decimal_separator",
        "effective_decimal_separator",
        "grouping_separator",
        "scientific_notation_separator",
        "alternate_scientific_notation_separator",
        "effective_scientific_notation_separator",
        "line_comment",
        "block_comment_start",
        "block_comment_end",
        "brackets",
        "treat_single_pipe_as_bracket",
        "special_id_starters",
        "special_id_terminators",
        "keywords",
        "keywords_case_sensitive",
        "string_delimiters",
    )

    def __init__(self, source):
        r"""Create a tokenizer reading from a string or text stream."""
        super(Tokenizer, self).__init__()
        self._input = LookaheadReader(source)
        self._input.problem_collector = self.problem_collector
        self._started = False
        self._decimal_separator = '.'
        self._effective_decimal_separator = '.'
        self._grouping_separator = '_'
        self._scientific_notation_separator = 'e'
        self._alternate_scientific_notation_separator = 'E'
        self._effective_scientific_notation_separator = 'e'
        self._line_comment = "//"
        self._block_comment_start = "/*"
        self._block_comment_end = "*/"
        self._brackets = set("([{}])")
        self._treat_single_pipe_as_bracket = True
        self._special_id_starters = set()
        self._special_id_terminators = set()
        self._keywords_case_sensitive = False
        self._keywords = dict()
        self._string_delimiters = dict()
        self.add_string_delimiter('"', '\\')
        self.add_unescaped_string_delimiter("'")

    decimal_separator = _setting(
        "_decimal_separator",
        "Character separating the integer and fractional part in the input."
    )
    effective_decimal_separator = _setting(
        "_effective_decimal_separator",
        "Decimal separator put into the content of number tokens."
    )
    grouping_separator = _setting(
        "_grouping_separator",
        "Character accepted between digits but left out of the content."
    )
    scientific_notation_separator = _setting(
        "_scientific_notation_separator",
        "Character introducing the exponent of a number (e.g. `e`)."
    )
    alternate_scientific_notation_separator = _setting(
        "_alternate_scientific_notation_separator",
        "Alternative exponent character (e.g. `E`)."
    )
    effective_scientific_notation_separator = _setting(
        "_effective_scientific_notation_separator",
        "Exponent character put into the content of number tokens."
    )
    line_comment = _setting(
        "_line_comment",
        "String starting a comment up to the end of the line (`None` to disable)."
    )
    block_comment_start = _setting(
        "_block_comment_start",
        "String starting a block comment (`None` to disable)."
    )
    block_comment_end = _setting(
        "_block_comment_end",
        "String ending a block comment."
    )
    brackets = _setting(
        "_brackets",
        "Set of characters which are always returned as single symbols."
    )
    treat_single_pipe_as_bracket = _setting(
        "_treat_single_pipe_as_bracket",
        "Whether a lone `|` (not followed by another `|`) is a bracket."
    )
    special_id_starters = _setting(
        "_special_id_starters",
        "Set of characters starting a special id (e.g. `$`)."
    )
    special_id_terminators = _setting(
        "_special_id_terminators",
        "Set of characters turning a preceding id into a special id (e.g. `:`)."
    )
    keywords_case_sensitive = _setting(
        "_keywords_case_sensitive",
        "Whether keywords are matched case sensitively."
    )
    string_delimiters = _setting(
        "_string_delimiters",
        "Dict mapping string delimiters to their escape character (`'\\0'` for none)."
    )

    @property
    def keywords(self):
        r"""List of the registered keywords (in their canonical spelling)."""
        return list(self._keywords.values())
    @keywords.setter
    def keywords(self, keywords):
        self._check_not_started("keywords")
        self._keywords = dict()
        for keyword in keywords:
            self.add_keyword(keyword)

    @Lookahead.problem_collector.setter
    def problem_collector(self, problem_collector):
        self._problem_collector = problem_collector
        self._input.problem_collector = problem_collector

    def configure(self, **settings):
        r"""Change several settings at once.

        Each keyword argument must be one of the names in #SETTINGS.
        """
        for name, value in settings.items():
            if name not in self.SETTINGS:
                raise ValueError("Unknown tokenizer setting: %s" % name)
            if name in ("brackets", "special_id_starters",
                        "special_id_terminators"):
                value = set(value)
            elif name == "string_delimiters":
                value = dict(value)
            setattr(self, name, value)
        return self

    def _check_not_started(self, name):
        if self._started:
            warnings.warn(
                "Tokenizer setting `%s` changed after tokens were fetched. "
                "Tokens already read are not affected." % name,
                ExpressionWarning,
            )

    def add_keyword(self, keyword):
        r"""Register a keyword, turning matching ids into `KEYWORD` tokens."""
        self._keywords[keyword] = keyword

    def add_special_id_starter(self, character):
        r"""Add a character starting special ids (e.g. `$` for `$var`)."""
        self._special_id_starters.add(character)

    def add_special_id_terminator(self, character):
        r"""Add a character making a preceding id a special id (e.g. `:`)."""
        self._special_id_terminators.add(character)

    def clear_string_delimiters(self):
        r"""Remove all string delimiters (including the default ones)."""
        self._string_delimiters.clear()

    def add_string_delimiter(self, delimiter, escape_character):
        r"""Register a string delimiter along with its escape character.

        Use `'\0'` as `escape_character` to disable escaping.
        """
        self._string_delimiters[delimiter] = escape_character

    def add_unescaped_string_delimiter(self, delimiter):
        r"""Register a string delimiter for strings without escaping."""
        self._string_delimiters[delimiter] = '\0'

    def _end_of_input(self):
        return TokenBuilder.create_and_fill(TokenType.EOI,
                                            self._input.current()).freeze()

    def _fetch(self):
        self._started = True
        inp = self._input
        while True:
            while inp.current().is_whitespace():
                inp.consume()

            if inp.current().is_end_of_input():
                return None

            if self._is_at_start_of_line_comment(consume=True):
                self._skip_to_end_of_line()
                continue

            if self._is_at_start_of_block_comment(consume=True):
                self._skip_block_comment()
                continue

            if self._is_at_start_of_number():
                return self._fetch_number()

            if self._is_at_start_of_identifier():
                return self._fetch_id()

            if inp.current().value in self._string_delimiters:
                return self._fetch_string()

            # Brackets are single symbols: `((` yields two symbols `(`.
            if self._is_at_bracket(in_symbol=False):
                return TokenBuilder.create_and_fill(TokenType.SYMBOL,
                                                    inp.consume()).freeze()

            if self._is_at_start_of_special_id():
                return self._fetch_special_id()

            if self._is_symbol_character():
                return self._fetch_symbol()

            self.add_error(inp.current(), "Invalid character in input: '%s'",
                           inp.current().string_value)
            inp.consume()

    def _is_at_start_of_special_id(self):
        return self._input.current().value in self._special_id_starters

    def _is_at_start_of_number(self):
        inp = self._input
        cur, nxt = inp.current(), inp.next()
        dec = self._decimal_separator
        return (cur.is_digit()
                or cur.is_any('-') and nxt.is_digit()
                or cur.is_any('-') and nxt.is_any(dec) and inp.next(2).is_digit()
                or cur.is_any(dec) and nxt.is_digit())

    def _is_at_bracket(self, in_symbol):
        cur = self._input.current()
        return (cur.is_any(*self._brackets)
                or not in_symbol
                and self._treat_single_pipe_as_bracket
                and cur.is_any('|')
                and not self._input.next().is_any('|'))

    def _can_consume_this_string(self, string, consume):
        r"""Check whether the input continues with `string` and optionally consume it."""
        if not string:
            return False
        for i, c in enumerate(string):
            if not self._input.next(i).is_any(c):
                return False
        if consume:
            self._input.consume(len(string))
        return True

    def _is_at_start_of_line_comment(self, consume):
        return self._can_consume_this_string(self._line_comment, consume)

    def _skip_to_end_of_line(self):
        inp = self._input
        while not inp.current().is_end_of_input() and not inp.current().is_new_line():
            inp.consume()

    def _is_at_start_of_block_comment(self, consume):
        return self._can_consume_this_string(self._block_comment_start, consume)

    def _is_at_end_of_block_comment(self):
        return self._can_consume_this_string(self._block_comment_end, True)

    def _skip_block_comment(self):
        inp = self._input
        while not inp.current().is_end_of_input():
            if self._is_at_end_of_block_comment():
                return
            inp.consume()
        self.add_error(inp.current(), "Premature end of block comment")

    def _fetch_string(self):
        inp = self._input
        separator = inp.current().value
        escape_char = self._string_delimiters[separator]
        result = TokenBuilder(TokenType.STRING, inp.current())
        result.add_to_trigger(inp.consume())
        while (not inp.current().is_new_line()
               and not inp.current().is_any(separator)
               and not inp.current().is_end_of_input()):
            if escape_char != '\0' and inp.current().is_any(escape_char):
                result.add_to_source(inp.consume())
                if not self._handle_string_escape(separator, escape_char, result):
                    self.add_error(inp.current(),
                                   "Cannot use '%s' as escaped character",
                                   inp.current().string_value)
            else:
                result.add_to_content(inp.consume())
        if inp.current().is_any(separator):
            result.add_to_source(inp.consume())
        else:
            self.add_error(inp.current(), "Premature end of string constant")
        return result.freeze()

    def _handle_string_escape(self, separator, escape_char, result):
        r"""Decode the escaped char at the current position into `result`.

        Returns `False` (consuming nothing) if the char cannot be escaped.
        """
        inp = self._input
        cur = inp.current()
        if cur.is_any(separator):
            decoded = separator
        elif cur.is_any(escape_char):
            decoded = escape_char
        elif cur.is_any('n'):
            decoded = '\n'
        elif cur.is_any('r'):
            decoded = '\r'
        else:
            return False
        result.silent_add_to_content(decoded)
        result.add_to_source(inp.consume())
        return True

    def _is_at_start_of_identifier(self):
        return self._input.current().is_letter()

    def _is_identifier_char(self, ch):
        return ch.is_digit() or ch.is_letter() or ch.is_any('_')

    def _fetch_id(self):
        inp = self._input
        result = TokenBuilder(TokenType.ID, inp.current())
        result.add_to_content(inp.consume())
        while self._is_identifier_char(inp.current()):
            result.add_to_content(inp.consume())
        cur = inp.current()
        if not cur.is_end_of_input() and cur.value in self._special_id_terminators:
            special_id = result.retype(TokenType.SPECIAL_ID,
                                       trigger=cur.string_value)
            special_id.add_to_source(inp.consume())
            return self._handle_keywords(special_id)
        return self._handle_keywords(result)

    def _handle_keywords(self, builder):
        r"""Freeze the id builder, turning it into a `KEYWORD` if it is one."""
        keyword = self._find_keyword(builder.content)
        if keyword is not None:
            return builder.retype(TokenType.KEYWORD, trigger=keyword).freeze()
        return builder.freeze()

    def _find_keyword(self, content):
        if self._keywords_case_sensitive:
            return self._keywords.get(content)
        content = content.lower()
        for key, keyword in self._keywords.items():
            if key.lower() == content:
                return keyword
        return None

    def _fetch_special_id(self):
        inp = self._input
        result = TokenBuilder(TokenType.SPECIAL_ID, inp.current())
        result.add_to_trigger(inp.consume())
        while self._is_identifier_char(inp.current()):
            result.add_to_content(inp.consume())
        return self._handle_keywords(result)

    def _fetch_symbol(self):
        inp = self._input
        result = TokenBuilder(TokenType.SYMBOL, inp.current())
        result.add_to_trigger(inp.consume())
        cur = inp.current()
        if (result.trigger in ('*', '&', '|') and cur.is_any(result.trigger)
                or cur.is_any('=')):
            result.add_to_trigger(inp.consume())
        return result.freeze()

    def _is_symbol_character(self):
        ch = self._input.current()
        if (ch.is_end_of_input() or ch.is_digit() or ch.is_letter()
                or ch.is_whitespace()):
            return False
        if ch.is_control():
            return False
        return not (self._is_at_bracket(in_symbol=True)
                    or self._is_at_start_of_block_comment(consume=False)
                    or self._is_at_start_of_line_comment(consume=False)
                    or self._is_at_start_of_number()
                    or self._is_at_start_of_identifier()
                    or ch.value in self._string_delimiters)

    def _is_scientific_separator(self, ch):
        return ch.is_any(self._scientific_notation_separator,
                         self._alternate_scientific_notation_separator)

    def _continues_number(self):
        inp = self._input
        cur, nxt = inp.current(), inp.next()
        return (cur.is_digit()
                or cur.is_any(self._decimal_separator)
                or cur.is_any(self._grouping_separator) and nxt.is_digit()
                or self._is_scientific_separator(cur)
                and (nxt.is_digit()
                     or nxt.is_any('+', '-') and inp.next(2).is_digit()))

    def _fetch_number(self):
        inp = self._input
        result = TokenBuilder(TokenType.INTEGER, inp.current())
        if inp.current().is_any(self._decimal_separator):
            result = result.retype(TokenType.DECIMAL)
            result.silent_add_to_content(self._effective_decimal_separator)
            result.add_to_source(inp.consume())
        else:
            result.add_to_content(inp.consume())
        while self._continues_number():
            cur = inp.current()
            if cur.is_any(self._grouping_separator):
                result.add_to_source(inp.consume())
            elif cur.is_any(self._decimal_separator):
                if result.is_type(TokenType.INTEGER):
                    result = result.retype(TokenType.DECIMAL)
                    result.silent_add_to_content(self._effective_decimal_separator)
                else:
                    self.add_error(cur, "Unexpected decimal separators")
                result.add_to_source(inp.consume())
            elif self._is_scientific_separator(cur):
                if result.is_type(TokenType.SCIENTIFIC_DECIMAL):
                    self.add_error(cur, "Unexpected scientific notation separators")
                    result.add_to_source(inp.consume())
                else:
                    result = result.retype(TokenType.SCIENTIFIC_DECIMAL)
                    result.silent_add_to_content(
                        self._effective_scientific_notation_separator
                    )
                    result.add_to_source(inp.consume())
                    if inp.current().is_any('+', '-'):
                        result.add_to_content(inp.consume())
            else:
                result.add_to_content(inp.consume())
        return result.freeze()

    def more(self):
        r"""Return whether there are tokens left (i.e. the current one is not EOI)."""
        return self.current().is_not_end()

    def at_end(self):
        return self.current().is_end()

    def add_error(self, pos, message, *parameters):
        r"""Add an error for the given position, formatting `message` with `parameters`."""
        if parameters:
            message = message % parameters
        self.problem_collector.append(ParseError.error(pos, message))

    def add_warning(self, pos, message, *parameters):
        r"""Add a warning for the given position, formatting `message` with `parameters`."""
        if parameters:
            message = message % parameters
        self.problem_collector.append(ParseError.warning(pos, message))

    def consume_expected_symbol(self, symbol):
        r"""Consume the given symbol or add an error (consuming nothing)."""
        if self.current().matches(TokenType.SYMBOL, symbol):
            self.consume()
        else:
            self.add_error(self.current(), "Unexpected token: '%s'. Expected: '%s'",
                           self.current().source, symbol)

    def consume_expected_keyword(self, keyword):
        r"""Consume the given keyword or add an error (consuming nothing)."""
        if self.current().matches(TokenType.KEYWORD, keyword):
            self.consume()
        else:
            self.add_error(self.current(), "Unexpected token: '%s'. Expected: '%s'",
                           self.current().source, keyword)

    def raise_on_error_or_warning(self):
        r"""Raise a ParseException if any problem was collected."""
        if self.problem_collector:
            logger.debug("Raising for %d collected problems.",
                         len(self.problem_collector))
            raise ParseException.create(self.problem_collector)

    def raise_on_error(self):
        r"""Raise a ParseException if an error (not only warnings) was collected."""
        for problem in self.problem_collector:
            if problem.severity is Severity.ERROR:
                logger.debug("Raising for %d collected problems.",
                             len(self.problem_collector))
                raise ParseException.create(self.problem_collector)

    def __str__(self):
        # Only look at the buffer so that no tokens are fetched.
        items = self._buffered()
        if not items:
            return "No Token fetched..."
        if len(items) < 2:
            return "Current: %s" % items[0]
        return "Current: %s, Next: %s" % (items[0], items[1])
