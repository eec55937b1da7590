r"""@package testutils

Common base class and settings for the unit tests of `exprparse`.

All test cases derive from ExprTestCase, which honors the global switches in
TestSettings. These are set by `tests.py` from its command line arguments.

Tests decorated with slowtest are skipped unless `TestSettings.skipslow` is
set to `False` (`tests.py -s`).

Outcome dependent features (the failure hook and timing output) need the
error/failure lists of a `unittest.TestResult`. Other runners (e.g. `pytest`)
may pass result objects without them, in which case these features are
silently disabled.
"""

import sys
import functools
import math
import unittest
import time

from mpmath import mp


__all__ = [
    "ExprTestCase",
    "TestSettings",
    "slowtest",
]


def slowtest(func):
    """Decorator for skipping a test if TestSettings.skipslow is true."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if TestSettings.skipslow:
            raise unittest.SkipTest("skipping slow tests")
        return func(*args, **kwargs)
    return wrapper


class _Outcome(object):
    r"""Counts of a test result taken before a single test runs."""

    def __init__(self, result):
        self._result = result
        self._counts = self._take()

    def _take(self):
        try:
            return tuple(len(getattr(self._result, name))
                         for name in ('errors', 'failures', 'skipped'))
        except (AttributeError, TypeError):
            return None

    @property
    def known(self):
        return self._counts is not None

    def changed(self):
        r"""Return the `(failed, skipped)` state of the test run since creation."""
        now = self._take()
        if now is None or self._counts is None:
            return False, False
        errors, failures, skipped = (n - p for n, p in zip(now, self._counts))
        return errors > 0 or failures > 0, skipped > 0

    def verbose(self):
        r"""Whether the runner prints one line per test."""
        return (getattr(self._result, 'showAll', False)
                and not getattr(self._result, 'dots', True))


class ExprTestCase(unittest.TestCase):
    """Base class for the unit tests.

    Compared to `unittest.TestCase`, this class adds:
        * timing of individual tests (if TestSettings.timing is true and the
          runner uses `verbosity=2`)
        * a hook failureHook() called after a test failed or raised an error,
          e.g. to print the tree of an expression which evaluated to an
          unexpected value
        * the assertions assertIsNaN() and assertListAlmostEqual()
    """

    def run(self, result=None):
        outcome = _Outcome(result)
        start = time.time()
        ret = unittest.TestCase.run(self, result)
        duration = time.time() - start
        failed, skipped = outcome.changed()
        if failed:
            self.failureHook(result)
        elif (TestSettings.timing and outcome.known and not skipped
              and outcome.verbose()):
            print("(%.4f seconds) ... " % duration, file=sys.stderr, end='')
        return ret

    def failureHook(self, result):
        r"""Called just after this test failed or raised an error.

        Does nothing by default.
        """
        pass

    def assertIsNaN(self, value, msg=None):
        r"""Assert that a float or `mpmath` number is `nan`."""
        if hasattr(value, '_mpf_'):
            isnan = mp.isnan(value)
        else:
            isnan = math.isnan(value)
        if not isnan:
            raise self.failureException(msg or "%r is not nan" % (value,))

    def assertListAlmostEqual(self, a, b, places=7, msg=None):
        r"""Assert that two sequences contain almost the same numbers.

        Works for floats and `mpmath` numbers. All differing elements are
        listed in the failure message.
        """
        a, b = list(a), list(b)
        if len(a) != len(b):
            raise self.failureException(
                msg or "Sequences differ in length (%d != %d)" % (len(a), len(b))
            )
        diffs = [(i, x, y) for i, (x, y) in enumerate(zip(a, b))
                 if x != y and abs(x-y) >= 0.5 * 10**-places]
        if diffs:
            lines = ["  [%d] %s != %s" % d for d in diffs]
            raise self.failureException(
                msg or "%d element(s) differ:\n%s" % (len(diffs), "\n".join(lines))
            )


class TestSettings(object):
    """Global settings for tests."""
    ## Stop test run on first fail/error.
    failfast = False
    ## Whether output is buffered.\ Just information, cannot be used to toggle output buffering.
    buffering = False
    ## Whether the timing for each test case should be printed.
    timing = False
    ## Control whether tests marked as slowtest should be skipped.
    skipslow = True
