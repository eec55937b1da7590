r"""@package exprparse.exprs.basics

Nodes of the abstract syntax tree produced by the parser.

An Expression is evaluated by walking the tree: constants return their value,
variable references the current value of their Variable, operations combine
the values of their operands and function calls delegate to their bound
functions.Function. Evaluation never raises for numerical problems (division
by zero, invalid arguments, ...). Instead, `nan` or `inf` are returned.

Calling Expression.simplify() returns an equivalent tree with all constant
sub-trees folded into Constant nodes. This is done once by the parser, so
that repeated evaluations only pay for the parts actually depending on
variables.
"""

from abc import ABCMeta, abstractmethod
from enum import Enum

from ..numutils import EPSILON, NAN, divide, modulo, power


__all__ = [
    "Expression",
    "Constant",
    "VariableReference",
    "Op",
    "BinaryOperation",
    "FunctionCall",
]


class Expression(metaclass=ABCMeta):
    r"""Base class for all nodes of the syntax tree."""

    @abstractmethod
    def evaluate(self):
        r"""Compute the value of this expression.

        Numerical problems result in `nan` (or `inf`) and are not raised.
        """
        pass

    def simplify(self):
        r"""Return a (possibly new) equivalent expression with constants folded.

        The default implementation returns the expression itself.
        """
        return self

    def is_constant(self):
        r"""Return whether this expression always evaluates to the same value."""
        return False

    def children(self):
        r"""List of `(key, expression)` pairs of the direct sub-expressions."""
        return []

    def traverse_tree(self, include_root=False, parents=None):
        r"""Generator that walks through a complete expression tree.

        In each iteration, the returned values represent the current node's
        parents (as a list from root to immediate parent), its key under which
        it is stored in its parent, and the node itself.

        Args:
            include_root: Whether to include the root as first item. Default
                is `False`.
            parents: Optional list of parents of the root. Normally only used
                internally for the recursion.

        @b Examples
        \code
            for parents, name, expr in root_expr.traverse_tree():
                print("-"*len(parents), name)
        \endcode
        """
        if parents is None:
            parents = []
        if include_root:
            yield parents, "", self
        for key, expr in self.children():
            yield parents + [self], key, expr
            for item in expr.traverse_tree(parents=parents + [self]):
                yield item

    def print_tree(self, root_name='root'):
        r"""Print the whole expression tree.

        Each node is printed along with the key under which it is stored in
        its parent and its class name.
        """
        def _p(expr, name, parents=()):
            print("%s%s [%s] <%s>" % (
                ". " * len(parents), name, expr.nice_name, type(expr).__name__
            ))
        _p(self, root_name)
        for parents, name, expr in self.traverse_tree():
            _p(expr, name, parents)

    @property
    def nice_name(self):
        r"""Short description of this node (not including sub-expressions)."""
        return self.str()

    def str(self):
        r"""Return the expression as a string."""
        return self._expr_str()

    @abstractmethod
    def _expr_str(self):
        r"""String representing the expression.

        Sub-expressions should be included using their `str` method.
        """
        pass

    def __str__(self):
        return self.str()

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.str())


class Constant(Expression):
    r"""Expression with a fixed value."""

    ## Placeholder used where no valid expression could be parsed (`nan`).
    EMPTY = None

    def __init__(self, value):
        super(Constant, self).__init__()
        self._value = value

    @property
    def value(self):
        return self._value

    def evaluate(self):
        return self._value

    def is_constant(self):
        return True

    def _expr_str(self):
        return "%s" % self._value


Constant.EMPTY = Constant(NAN)


class VariableReference(Expression):
    r"""Reference to a scope.Variable, evaluating to its current value."""

    def __init__(self, variable):
        super(VariableReference, self).__init__()
        self._variable = variable

    @property
    def variable(self):
        return self._variable

    def evaluate(self):
        return self._variable.value

    def is_constant(self):
        return self._variable.is_constant()

    def simplify(self):
        if self.is_constant():
            return Constant(self.evaluate())
        return self

    def _expr_str(self):
        return self._variable.name


class Op(Enum):
    r"""Binary operators along with their symbol and priority.

    Operators with a higher priority bind stronger. Operators of equal
    priority are evaluated left to right.
    """
    ADD = ('+', 3)
    SUBTRACT = ('-', 3)
    MULTIPLY = ('*', 4)
    DIVIDE = ('/', 4)
    MODULO = ('%', 4)
    POWER = ('^', 5)
    LT = ('<', 2)
    LT_EQ = ('<=', 2)
    EQ = ('=', 2)
    GT_EQ = ('>=', 2)
    GT = ('>', 2)
    NEQ = ('!=', 2)
    AND = ('&&', 1)
    OR = ('||', 1)

    def __init__(self, symbol, priority):
        self.symbol = symbol
        self.priority = priority


def _bool(value):
    return 1.0 if value else 0.0


_OPERATIONS = {
    Op.ADD: lambda a, b: a + b,
    Op.SUBTRACT: lambda a, b: a - b,
    Op.MULTIPLY: lambda a, b: a * b,
    Op.DIVIDE: divide,
    Op.MODULO: modulo,
    Op.POWER: power,
    Op.LT: lambda a, b: _bool(a < b),
    Op.LT_EQ: lambda a, b: _bool(a < b or abs(a - b) < EPSILON),
    Op.EQ: lambda a, b: _bool(abs(a - b) < EPSILON),
    Op.GT_EQ: lambda a, b: _bool(a > b or abs(a - b) < EPSILON),
    Op.GT: lambda a, b: _bool(a > b),
    Op.NEQ: lambda a, b: _bool(abs(a - b) > EPSILON),
    Op.AND: lambda a, b: _bool(abs(a) > 0 and abs(b) > 0),
    Op.OR: lambda a, b: _bool(abs(a) > 0 or abs(b) > 0),
}


class BinaryOperation(Expression):
    r"""Operation combining two sub-expressions using an Op.

    Both operands are always evaluated (there is no short-circuiting for
    `&&` and `||`). Relational operators and the logical ones return `1.0`
    for true and `0.0` for false. Comparisons for equality accept
    differences smaller than numutils.EPSILON.

    A *sealed* operation originates from a parenthesized expression. The
    parser never re-orders it and simplify() never rebalances it.
    """

    def __init__(self, op, left, right):
        super(BinaryOperation, self).__init__()
        self._op = op
        self._left = left
        self._right = right
        self._sealed = False

    @property
    def op(self):
        return self._op

    @property
    def left(self):
        return self._left
    @left.setter
    def left(self, left):
        self._left = left

    @property
    def right(self):
        return self._right

    def seal(self):
        r"""Protect the operand order of this operation."""
        self._sealed = True

    @property
    def sealed(self):
        return self._sealed

    def is_sealed(self):
        return self._sealed

    def children(self):
        return [("left", self._left), ("right", self._right)]

    def evaluate(self):
        a = self._left.evaluate()
        b = self._right.evaluate()
        try:
            return _OPERATIONS[self._op](a, b)
        except (ArithmeticError, ValueError):
            return NAN

    def simplify(self):
        self._left = self._left.simplify()
        self._right = self._right.simplify()
        if self._left.is_constant() and self._right.is_constant():
            return Constant(self.evaluate())
        if self._op not in (Op.ADD, Op.MULTIPLY) or self._sealed:
            return self
        # Move constants to the left, so that only the left side has to be
        # considered for further folding.
        if self._right.is_constant():
            self._left, self._right = self._right, self._left
        child = self._right
        if (not isinstance(child, BinaryOperation) or child.op is not self._op
                or child.sealed):
            return self
        if self._left.is_constant():
            if child.left.is_constant():
                combined = _OPERATIONS[self._op](self._left.evaluate(),
                                                 child.left.evaluate())
                return BinaryOperation(self._op, Constant(combined), child.right)
        elif child.left.is_constant():
            # Push the constant of the child up for later simplifications.
            return BinaryOperation(
                self._op, child.left,
                BinaryOperation(self._op, self._left, child.right)
            )
        return self

    @property
    def nice_name(self):
        return "%s%s" % (self._op.name, " (sealed)" if self._sealed else "")

    def _expr_str(self):
        return "(%s %s %s)" % (self._left.str(), self._op.name,
                               self._right.str())


class FunctionCall(Expression):
    r"""Call of a functions.Function with a list of argument expressions.

    The arguments are handed to the function unevaluated, so that functions
    like `if` can decide which of them to evaluate.
    """

    def __init__(self, function, name=None, parameters=()):
        super(FunctionCall, self).__init__()
        self._function = function
        self._name = name or getattr(function, 'name', None) or "f"
        self._parameters = list(parameters)

    @property
    def function(self):
        return self._function
    @function.setter
    def function(self, function):
        self._function = function

    @property
    def name(self):
        return self._name

    @property
    def parameters(self):
        r"""The list of argument expressions."""
        return self._parameters

    def add_parameter(self, expression):
        self._parameters.append(expression)

    def children(self):
        return [("arg%d" % i, p) for i, p in enumerate(self._parameters)]

    def evaluate(self):
        return self._function.eval(self._parameters)

    def simplify(self):
        r"""Simplify the arguments and fold the call if possible.

        Only calls of natural functions (see
        functions.Function.is_natural_function()) with constant arguments are
        replaced by their value.
        """
        self._parameters = [p.simplify() for p in self._parameters]
        if not self._function.is_natural_function():
            return self
        if not all(p.is_constant() for p in self._parameters):
            return self
        return Constant(self.evaluate())

    @property
    def nice_name(self):
        return "%s()" % self._name

    def _expr_str(self):
        return "%s(%s)" % (self._name,
                           ", ".join(p.str() for p in self._parameters))
