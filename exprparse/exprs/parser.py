r"""@package exprparse.exprs.parser

Recursive descent parser turning expression strings into syntax trees.

The grammar, from the lowest to the highest precedence, is:

```
    expression          := relational (('&&' | '||') expression)?
    relational          := term (('<' | '<=' | '=' | '>=' | '>' | '!=') relational)?
    term                := product (('+' | '-') term)?
    product             := power (('*' | '/' | '%') product)?
    power               := atom (('^' | '**') power)?
    atom                := '-' atom
                         | '+'? '(' expression ')'
                         | '|' expression '|'
                         | identifier '(' (expression (',' expression)*)? ')'
                         | identifier
                         | '+'? number quantifier?
```

Each rule is parsed right recursively, which yields right leaning trees for
chains of operators of equal precedence (i.e. `a - b - c` would be parsed as
`a - (b - c)`). To obtain the expected left to right evaluation, the results
are re-ordered as they are combined (see Parser.re_order()). Parenthesized
operations are *sealed* and never re-ordered.

Numbers may carry one of the quantifiers `n` (1e-9), `u` (1e-6), `m` (1e-3),
`k` or `K` (1e3), `M` (1e6) and `G` (1e9), e.g. `10k` is `10000`.

Parsing does not stop at the first problem. All problems found while lexing
and parsing are collected and reported together by one
lexer.problems.ParseException at the end.

@b Examples

```
    scope = Scope()
    expr = parse("3 * a + 4 * b", scope)
    scope.get_variable("a").set_value(2)
    expr.evaluate()     # 6.0
```
"""

import logging

from ..lexer.tokenizer import Tokenizer
from ..lexer.token import TokenType
from ..numutils import to_number
from .basics import Constant, VariableReference, BinaryOperation, FunctionCall, Op
from .functions import BUILTIN_FUNCTIONS, FunctionRegistry
from .scope import Scope, UnknownVariableError


__all__ = [
    "Parser",
    "parse",
]


logger = logging.getLogger(__name__)


## Operators of the right recursive grammar levels by symbol.
_LOGICAL_OPS = {"&&": Op.AND, "||": Op.OR}
_RELATIONAL_OPS = {
    "<": Op.LT, "<=": Op.LT_EQ, "=": Op.EQ, ">=": Op.GT_EQ, ">": Op.GT,
    "!=": Op.NEQ,
}
_TERM_OPS = {"+": Op.ADD, "-": Op.SUBTRACT}
_PRODUCT_OPS = {"*": Op.MULTIPLY, "/": Op.DIVIDE, "%": Op.MODULO}
_POWER_OPS = {"^": Op.POWER, "**": Op.POWER}

## Decimal exponents of the quantifiers allowed after numbers.
_QUANTIFIERS = {"n": -9, "u": -6, "m": -3, "k": 3, "K": 3, "M": 6, "G": 9}


class Parser(object):
    r"""Parser for one expression.

    A parser is used once: create it for a source and call parse(). Problems
    found during parsing are available in #problems afterwards, even if
    parsing succeeded (e.g. warnings with `fail_on_warnings=False`).
    """

    def __init__(self, source, scope=None, functions=None,
                 fail_on_warnings=True, tokenizer_settings=None):
        r"""Create a parser for a string or text stream.

        @param source
            The expression as string or a text stream (anything with a
            `read(size)` method).
        @param scope
            scope.Scope used to resolve variables. Unknown variables are
            created in this scope (unless it is strict). The numeric mode of
            the scope determines how numbers are represented. If not given, a
            new floating point scope is created.
        @param functions
            functions.FunctionRegistry (or a dict) of callable functions.
            Default is the process wide registry.
        @param fail_on_warnings
            Whether parsing fails if only warnings were collected. Default is
            `True`.
        @param tokenizer_settings
            Optional dict of tokenizer settings (see
            lexer.tokenizer.Tokenizer.configure()).
        """
        ## The scope variables are resolved in.
        self.scope = scope if scope is not None else Scope()
        ## The registry functions are looked up in.
        self.functions = FunctionRegistry.of(functions)
        self.fail_on_warnings = fail_on_warnings
        ## All problems collected while lexing and parsing.
        self.problems = []
        self._tokenizer = Tokenizer(source)
        if tokenizer_settings:
            self._tokenizer.configure(**tokenizer_settings)
        self._tokenizer.problem_collector = self.problems

    @property
    def tokenizer(self):
        return self._tokenizer

    def parse(self):
        r"""Parse the complete input and return the simplified expression.

        Operator chains and nestings too deep for the recursion limit of the
        interpreter are reported as an error.

        @raise ParseException if any problems were found (only errors if
            `fail_on_warnings` is `False`).
        """
        tok = self._tokenizer
        try:
            result = self.expression().simplify()
        except RecursionError:
            self._error(tok.current(), "Expression is nested too deeply.")
            tok.raise_on_error()
        if tok.current().is_not_end():
            token = tok.consume()
            self._error(token, "Unexpected token: '%s'. Expected an expression.",
                        token.source)
        if self.fail_on_warnings:
            tok.raise_on_error_or_warning()
        else:
            tok.raise_on_error()
        logger.debug("Parsed expression: %s", result)
        return result

    def _error(self, pos, message, *parameters):
        self._tokenizer.add_error(pos, message, *parameters)

    def _binary(self, ops, operand, same_level):
        r"""Parse `operand (op same_level)?` for the operators in `ops`."""
        left = operand()
        current = self._tokenizer.current()
        if current.is_symbol() and current.trigger in ops:
            op = ops[current.trigger]
            self._tokenizer.consume()
            right = same_level()
            return self.re_order(left, right, op)
        return left

    def expression(self):
        return self._binary(_LOGICAL_OPS, self.relational_expression,
                            self.expression)

    def relational_expression(self):
        return self._binary(_RELATIONAL_OPS, self.term,
                            self.relational_expression)

    def term(self):
        left = self.product()
        current = self._tokenizer.current()
        if current.is_symbol() and current.trigger in _TERM_OPS:
            self._tokenizer.consume()
            right = self.term()
            return self.re_order(left, right, _TERM_OPS[current.trigger])
        # A negative number directly following an operand, like the `-2` in
        # `1 -2`, is lexed as one token. Treat it as addition.
        if current.is_number() and current.content.startswith("-"):
            right = self.term()
            return self.re_order(left, right, Op.ADD)
        return left

    def product(self):
        return self._binary(_PRODUCT_OPS, self.power, self.product)

    def power(self):
        return self._binary(_POWER_OPS, self.atom, self.power)

    def re_order(self, left, right, op):
        r"""Combine two operands such that equal precedence evaluates left to right.

        If `right` is an unsealed operation of the same priority as `op`,
        `left` is inserted as new leftmost operand of `right` (which is then
        returned). Otherwise, a new operation combining `left` and `right`
        is returned.
        """
        if (isinstance(right, BinaryOperation) and not right.sealed
                and right.op.priority == op.priority):
            self._replace_left(right, left, op)
            return right
        return BinaryOperation(op, left, right)

    def _replace_left(self, target, new_left, op):
        r"""Replace the bottom-left operand `x` of `target` by `new_left op x`."""
        while True:
            left = target.left
            if (isinstance(left, BinaryOperation) and not left.sealed
                    and left.op.priority == op.priority):
                target = left
                continue
            target.left = BinaryOperation(op, new_left, left)
            return

    def atom(self):
        tok = self._tokenizer
        if tok.current().is_symbol("-"):
            tok.consume()
            result = BinaryOperation(Op.SUBTRACT, self._constant(0), self.atom())
            result.seal()
            return result
        if tok.current().is_symbol("+") and tok.next().is_symbol("("):
            tok.consume()
        if tok.current().is_symbol("("):
            tok.consume()
            result = self.expression()
            if isinstance(result, BinaryOperation):
                result.seal()
            self.expect(TokenType.SYMBOL, ")")
            return result
        if tok.current().is_symbol("|"):
            tok.consume()
            call = FunctionCall(BUILTIN_FUNCTIONS["abs"], "abs")
            call.add_parameter(self.expression())
            self.expect(TokenType.SYMBOL, "|")
            return call
        if tok.current().is_identifier():
            if tok.next().is_symbol("("):
                return self.function_call()
            name = tok.consume()
            try:
                return VariableReference(self.scope.get_variable(name.content))
            except UnknownVariableError:
                self._error(name, "Unknown variable: '%s'", name.content)
                return self._constant(0)
        return self._literal_atom()

    def _constant(self, value):
        return Constant(to_number(str(value), self.scope.use_mp))

    def _literal_atom(self):
        tok = self._tokenizer
        if tok.current().is_symbol("+") and tok.next().is_number():
            tok.consume()
        if tok.current().is_number():
            number = tok.consume()
            try:
                value = to_number(number.content, self.scope.use_mp)
            except ValueError:
                self._error(number, "Invalid number: '%s'", number.source)
                return Constant.EMPTY
            if tok.current().is_type(TokenType.ID):
                exponent = _QUANTIFIERS.get(tok.current().content)
                token = tok.consume()
                if exponent is None:
                    self._error(token,
                                "Unexpected token: '%s'. Expected a valid quantifier.",
                                token.source)
                elif exponent < 0:
                    value /= 10**-exponent
                else:
                    value *= 10**exponent
            return Constant(value)
        token = tok.consume()
        self._error(token, "Unexpected token: '%s'. Expected an expression.",
                    token.source)
        return Constant.EMPTY

    def function_call(self):
        tok = self._tokenizer
        fun_token = tok.consume()
        name = fun_token.content
        fun = self.functions.get(name)
        if fun is None:
            self._error(fun_token, "Unknown function: '%s'", name)
        call = FunctionCall(fun, name)
        tok.consume()
        while not tok.current().is_symbol(")") and tok.current().is_not_end():
            if call.parameters:
                self.expect(TokenType.SYMBOL, ",")
            call.add_parameter(self.expression())
        self.expect(TokenType.SYMBOL, ")")
        if fun is None:
            return Constant.EMPTY
        expected = fun.number_of_arguments
        if expected >= 0 and len(call.parameters) != expected:
            self._error(fun_token,
                        "Number of arguments for function '%s' do not match. "
                        "Expected: %d, Found: %d",
                        name, expected, len(call.parameters))
            return Constant.EMPTY
        return call

    def expect(self, type, trigger):
        r"""Consume the current token if it matches, else add an error."""
        # pylint: disable=redefined-builtin
        tok = self._tokenizer
        if tok.current().matches(type, trigger):
            tok.consume()
        else:
            self._error(tok.current(), "Unexpected token '%s'. Expected: '%s'",
                        tok.current().source, trigger)


def parse(source, scope=None, functions=None, **kw):
    r"""Parse an expression from a string or text stream.

    Convenience function creating a Parser and calling Parser.parse(). All
    arguments are passed on to Parser.

    @raise ParseException if the expression contains any problems.
    """
    return Parser(source, scope=scope, functions=functions, **kw).parse()
