r"""@package exprparse

Parser and evaluator for mathematical expressions.

An expression like `"3 + a * sin(pi / 4)"` is parsed once into a syntax tree
(see exprs.basics.Expression) which can then be evaluated any number of
times. Variables are bound to the tree by reference, so changing their value
changes the result of the next evaluation without parsing again.

The package consists of the lexer sub-package, turning text into tokens, and
the exprs sub-package, containing the parser, the syntax tree, scopes of
variables and the callable functions. Expressions evaluate either using
floats (with `numpy` semantics for invalid operations) or using `mpmath`
arbitrary precision numbers.

@b Examples

```
    from exprparse import parse, Scope

    scope = Scope()
    expr = parse("3 * a + 4 * b", scope)
    scope.get_variable("a").set_value(2)
    scope.get_variable("b").set_value(3)
    print(expr.evaluate())     # 18.0
```
"""

from .numutils import ExpressionWarning
from .lexer import Position, Severity, ParseError, ParseException
from .lexer import Tokenizer, Token, TokenType
from .exprs import Variable, Scope, UnknownVariableError, ConstantVariableError
from .exprs import Expression, Constant, VariableReference, Op
from .exprs import BinaryOperation, FunctionCall
from .exprs import Function, UnaryFunction, BinaryFunction, FunctionRegistry
from .exprs import register_function, Parser, parse


__version__ = "1.0.0"
