r"""@package exprparse.numutils

Numerical helpers shared by the expression tree and the built-in functions.

Expressions are evaluated in one of two numeric modes. In *floating point*
mode (the default), values are Python floats and the arithmetic follows IEEE
semantics, i.e. invalid operations produce `nan` or `inf` instead of raising.
This is done by routing the non-trivial operations through `numpy` ufuncs
inside ieee().

In *arbitrary precision* mode, values are `mpmath` numbers and computations
happen in the `mpmath.mp` context at its current precision (`mp.dps`).
Results that would be complex (e.g. `sqrt(-1)`) are mapped to `nan`, which is
the invalid sentinel in both modes.

The mode is never chosen per operation by the caller. It follows from the
values: as soon as one operand is an `mpmath` number, the `mp` context is
used (see is_mp()).

@b Examples

```
    >>> divide(1.0, 0.0)
    inf
    >>> isnan(power(-8.0, 1/3))
    True
```
"""

from contextlib import contextmanager
import math
import warnings

import numpy as np
from mpmath import mp


__all__ = [
    "EPSILON",
    "NAN",
    "ExpressionWarning",
    "is_mp",
    "isnan",
    "isclose",
    "converter",
    "to_number",
    "real_or_nan",
    "ieee",
    "apply_function",
    "divide",
    "modulo",
    "power",
]


## Values closer than this compare equal in the relational operators.
EPSILON = 1e-10

## The invalid sentinel returned for failed evaluations.
NAN = float('nan')


class ExpressionWarning(UserWarning):
    """Warning issued when expressions might not parse or evaluate as expected."""
    pass


def is_mp(*values):
    r"""Return whether any of the given values is an `mpmath` number.

    Lazy `mpmath` constants like `mp.pi` count as well, since they expose the
    same `_mpf_` attribute as `mp.mpf` instances.
    """
    for v in values:
        if hasattr(v, '_mpf_') or hasattr(v, '_mpc_'):
            return True
    return False


def isnan(x):
    r"""Return whether `x` is the invalid sentinel (works for both modes)."""
    if is_mp(x):
        return mp.isnan(x)
    try:
        return math.isnan(x)
    except TypeError:
        return False


def isclose(a, b, rel_tol=None, abs_tol=None, use_mp=False):
    r"""Test if two numbers agree within an absolute/relative tolerance.

    For floating point comparison (i.e. if `use_mp==False`), the default
    relative tolerance is `1e-9` and the absolute one `0.0`.
    """
    if use_mp:
        return mp.almosteq(a, b, rel_eps=rel_tol, abs_eps=abs_tol)
    if rel_tol is None:
        rel_tol = 1e-9
    if abs_tol is None:
        abs_tol = 0.0
    return abs(a-b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)


def converter(use_mp):
    r"""Return the callable turning numerals/values into numbers of a mode."""
    return mp.mpf if use_mp else float


def to_number(text, use_mp=False):
    r"""Convert the content of a number token into a numeric value.

    The text is expected to use `.` as decimal separator and `e` as
    scientific notation separator (the tokenizer's *effective* separators).
    Leading or trailing decimal points (``".2"``, ``"2."``) are accepted.
    """
    if use_mp:
        return mp.mpf(text)
    return float(text)


def real_or_nan(x):
    r"""Map complex results of the `mp` context to the invalid sentinel."""
    if hasattr(x, '_mpc_') or isinstance(x, complex):
        if x.imag == 0:
            return x.real
        return NAN
    return x


@contextmanager
def ieee():
    r"""Context in which `numpy` silently produces `nan` and `inf`.

    Without this, `numpy` would issue `RuntimeWarning`s for e.g. division by
    zero or invalid arguments to `sqrt`.
    """
    with np.errstate(divide='ignore', invalid='ignore', over='ignore',
                     under='ignore'):
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', RuntimeWarning)
            yield


def apply_function(fp_func, mp_func, *args):
    r"""Evaluate a math function in the mode dictated by its arguments.

    @param fp_func
        Callable used in floating point mode. Usually a `numpy` ufunc, so
        that domain errors result in `nan` instead of exceptions.
    @param mp_func
        Callable used in `mpmath` mode. Complex results and arithmetic
        errors are mapped to `nan`.
    @param *args
        Already evaluated arguments.
    """
    if is_mp(*args):
        try:
            return real_or_nan(mp_func(*args))
        except (ArithmeticError, ValueError):
            return NAN
    try:
        args = [np.float64(x) for x in args]
    except (OverflowError, TypeError, ValueError):
        return NAN
    with ieee():
        return float(fp_func(*args))


def divide(a, b):
    r"""Divide `a` by `b`, returning `inf`/`nan` for a zero divisor."""
    if is_mp(a, b):
        if b == 0:
            if a == 0 or isnan(a):
                return NAN
            return mp.inf if a > 0 else -mp.inf
        return mp.mpf(a) / b
    with ieee():
        return float(np.true_divide(np.float64(a), np.float64(b)))


def modulo(a, b):
    r"""Remainder of `a / b` carrying the sign of the dividend `a`.

    This is the C style remainder (`fmod`), not Python's floored `%`.
    """
    if is_mp(a, b):
        if b == 0:
            return NAN
        # Floored and truncated remainder agree for non-negative operands.
        r = mp.fmod(abs(a), abs(b))
        return r if a >= 0 else -r
    with ieee():
        return float(np.fmod(np.float64(a), np.float64(b)))


def power(a, b):
    r"""Raise `a` to the power `b`; non-real results are `nan`."""
    return apply_function(np.power, mp.power, a, b)
