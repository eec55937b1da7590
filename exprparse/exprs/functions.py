r"""@package exprparse.exprs.functions

Functions callable from within expressions and the registry providing them.

A Function receives the *unevaluated* argument expressions. This allows
functions like `if` to evaluate only the branch actually taken. Most
functions, however, simply evaluate all their arguments and compute a value.
These derive from UnaryFunction or BinaryFunction, which evaluate the
arguments and skip the computation if an argument is `nan`.

The numerical work is done by `numpy` ufuncs for floating point values and by
the `mpmath` functions for arbitrary precision values (see
numutils.apply_function()). Hence, each built-in function is defined by a
pair of callables.

Functions are looked up by name in a FunctionRegistry when parsing. The
process wide default registry holds all built-in functions; more functions
can be added using register_function().

@b Examples

```
    class Average(Function):
        number_of_arguments = -1
        def eval(self, args):
            return sum(a.evaluate() for a in args) / len(args)

    register_function("avg", Average("avg"))
    parse("avg(3, 2, 1, 7)").evaluate()     # 3.25
```
"""

from abc import ABCMeta, abstractmethod
import logging
import threading
import warnings

import numpy as np
from mpmath import mp

from ..numutils import ExpressionWarning, apply_function, is_mp, isnan


__all__ = [
    "Function",
    "UnaryFunction",
    "BinaryFunction",
    "IfFunction",
    "RandomFunction",
    "FunctionRegistry",
    "BUILTIN_FUNCTIONS",
    "default_registry",
    "register_function",
]


logger = logging.getLogger(__name__)


class Function(metaclass=ABCMeta):
    r"""Base class for functions callable from within expressions."""

    ## Number of arguments expected, or `-1` to accept any number.
    number_of_arguments = -1

    def __init__(self, name=None):
        ## Name used when printing calls of this function.
        self.name = name or type(self).__name__.lower()

    @abstractmethod
    def eval(self, args):
        r"""Compute the function value for a list of argument expressions.

        The arguments are basics.Expression objects, which have not been
        evaluated yet.
        """
        pass

    def is_natural_function(self):
        r"""Return whether the function always returns the same value for the same arguments.

        Calls of natural functions with constant arguments are replaced by
        their value when simplifying expressions.
        """
        return True

    def __repr__(self):
        return "<%s %s/%d>" % (type(self).__name__, self.name,
                               self.number_of_arguments)


class UnaryFunction(Function):
    r"""Function of one argument, returning `nan` for a `nan` argument."""

    number_of_arguments = 1

    def __init__(self, name, fp_func, mp_func):
        r"""Create the function from one callable for each numeric mode.

        Args:
            name:     Name of the function.
            fp_func:  Callable for floats (usually a `numpy` ufunc).
            mp_func:  Callable for `mpmath` numbers.
        """
        super(UnaryFunction, self).__init__(name)
        self._fp_func = fp_func
        self._mp_func = mp_func

    def eval(self, args):
        a = args[0].evaluate()
        if isnan(a):
            return a
        return self.compute(a)

    def compute(self, a):
        r"""Compute the function value for an evaluated argument."""
        return apply_function(self._fp_func, self._mp_func, a)


class BinaryFunction(Function):
    r"""Function of two arguments, returning `nan` if an argument is `nan`.

    The second argument is not evaluated if the first one is `nan`.
    """

    number_of_arguments = 2

    def __init__(self, name, fp_func, mp_func):
        super(BinaryFunction, self).__init__(name)
        self._fp_func = fp_func
        self._mp_func = mp_func

    def eval(self, args):
        a = args[0].evaluate()
        if isnan(a):
            return a
        b = args[1].evaluate()
        if isnan(b):
            return b
        return self.compute(a, b)

    def compute(self, a, b):
        r"""Compute the function value for the evaluated arguments."""
        return apply_function(self._fp_func, self._mp_func, a, b)


class IfFunction(Function):
    r"""`if(condition, a, b)`: evaluates to `a` if the condition is non-zero, else to `b`.

    Only the branch taken is evaluated. A `nan` condition results in `nan`.
    """

    number_of_arguments = 3

    def __init__(self, name="if"):
        super(IfFunction, self).__init__(name)

    def eval(self, args):
        check = args[0].evaluate()
        if isnan(check):
            return check
        if abs(check) > 0:
            return args[1].evaluate()
        return args[2].evaluate()

    def is_natural_function(self):
        return False


class RandomFunction(UnaryFunction):
    r"""`rnd(a)`: random number in the interval `[0, a)`.

    Not a natural function, i.e. calls are never replaced by a value.
    """

    def __init__(self, name="rnd"):
        super(RandomFunction, self).__init__(
            name,
            lambda a: np.random.random() * a,
            lambda a: mp.rand() * a,
        )

    def is_natural_function(self):
        return False


def _round(x):
    if is_mp(x):
        return mp.floor(x + mp.mpf(0.5))
    return np.floor(x + 0.5)


def _builtins():
    unary = [
        ("sin", np.sin, mp.sin),
        ("cos", np.cos, mp.cos),
        ("tan", np.tan, mp.tan),
        ("sinh", np.sinh, mp.sinh),
        ("cosh", np.cosh, mp.cosh),
        ("tanh", np.tanh, mp.tanh),
        ("asin", np.arcsin, mp.asin),
        ("acos", np.arccos, mp.acos),
        ("atan", np.arctan, mp.atan),
        ("deg", np.degrees, mp.degrees),
        ("rad", np.radians, mp.radians),
        ("abs", np.abs, mp.fabs),
        ("round", _round, _round),
        ("ceil", np.ceil, mp.ceil),
        ("floor", np.floor, mp.floor),
        ("exp", np.exp, mp.exp),
        ("ln", np.log, mp.ln),
        ("log", np.log10, mp.log10),
        ("sqrt", np.sqrt, mp.sqrt),
        ("sign", np.sign, mp.sign),
    ]
    binary = [
        ("atan2", np.arctan2, mp.atan2),
        ("pow", np.power, mp.power),
        ("min", np.minimum, min),
        ("max", np.maximum, max),
    ]
    functions = [UnaryFunction(*args) for args in unary]
    functions += [BinaryFunction(*args) for args in binary]
    functions += [RandomFunction(), IfFunction()]
    return {f.name: f for f in functions}


## All built-in functions by name.
BUILTIN_FUNCTIONS = _builtins()


class FunctionRegistry(object):
    r"""Mapping of names to the functions available in expressions.

    Registries may be passed to the parser explicitly. Parsing without an
    explicit registry uses the process wide registry returned by
    default_registry().
    """

    def __init__(self, functions=None, builtins=True):
        r"""Create a registry.

        Args:
            functions: Optional dict of additional functions by name.
            builtins: Whether to start with all built-in functions. Default
                is `True`.
        """
        self._lock = threading.Lock()
        self._functions = dict(BUILTIN_FUNCTIONS) if builtins else dict()
        if functions:
            for name, function in functions.items():
                self.register(name, function)

    @classmethod
    def of(cls, functions):
        r"""Return `functions` as registry, converting dicts if necessary.

        `None` returns the default registry.
        """
        if functions is None:
            return default_registry()
        if isinstance(functions, FunctionRegistry):
            return functions
        return cls(functions)

    def register(self, name, function):
        r"""Make a Function available under the given name.

        Replacing an existing function issues an ExpressionWarning.
        """
        if not isinstance(function, Function):
            raise TypeError("Not a Function: %r" % (function,))
        with self._lock:
            if name in self._functions:
                warnings.warn("Replacing function `%s`." % name,
                              ExpressionWarning)
            self._functions[name] = function
        logger.debug("Registered function %s (arguments: %d).",
                     name, function.number_of_arguments)

    def unregister(self, name):
        r"""Remove a function and return it (or `None` if not registered)."""
        with self._lock:
            return self._functions.pop(name, None)

    def get(self, name):
        r"""Return the function of the given name or `None`."""
        return self._functions.get(name)

    def names(self):
        return sorted(self._functions)

    def __contains__(self, name):
        return name in self._functions

    def __len__(self):
        return len(self._functions)


_default_registry = FunctionRegistry()


def default_registry():
    r"""Return the process wide FunctionRegistry."""
    return _default_registry


def register_function(name, function):
    r"""Register a function in the process wide default registry.

    This must happen before parsing any expression that calls the function.
    """
    _default_registry.register(name, function)
