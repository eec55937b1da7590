r"""@package exprparse.exprs

Syntax trees of parsed expressions, the scopes their variables live in and the
functions they may call.

The parser.Parser reads tokens from a lexer.tokenizer.Tokenizer and builds a
tree of basics.Expression nodes. Variables are resolved through a
scope.Scope at parse time: the tree holds references to scope.Variable
objects, so that changing a variable's value changes the result of the next
evaluation without parsing the expression again.

Functions are looked up by name in a functions.FunctionRegistry. The built-in
functions evaluate using `numpy` for floats and `mpmath` for arbitrary
precision numbers, depending on the numeric mode of the scope the expression
was parsed in.
"""

from .scope import Variable, Scope, UnknownVariableError, ConstantVariableError
from .basics import Expression, Constant, VariableReference, Op
from .basics import BinaryOperation, FunctionCall
from .functions import Function, UnaryFunction, BinaryFunction, IfFunction
from .functions import FunctionRegistry, register_function, default_registry
from .parser import Parser, parse
