r"""@package exprparse.lexer

Character and token level input processing.

The lexer is organized in layers, each one a lookahead.Lookahead stream:

* reader.LookaheadReader reads reader.Char objects from a string or text
  stream, keeping track of lines and positions.
* tokenizer.Tokenizer groups these characters into token.Token objects
  (numbers, identifiers, strings, symbols, ...), skipping whitespace and
  comments.

Neither layer raises on malformed input. Instead, problems.ParseError objects
are appended to a problem collector shared with the parser, and the first
problem, together with all others, is reported via problems.ParseException
once processing is complete.
"""

from .problems import Position, Severity, ParseError, ParseException
from .lookahead import Lookahead
from .reader import Char, LookaheadReader
from .token import Token, TokenType, TokenBuilder
from .tokenizer import Tokenizer
