#!/usr/bin/env python3
r"""Run all unit tests of `exprparse`.

Options:
    -f, --failfast        stop on the first failure or error
    -b, --buffer          buffer stdout/stderr of passing tests
    -t, --timing          print the time each test took
    -s, --run-slow-tests  also run tests decorated with `slowtest`
    -v, --verbose         enable debug logging of the library
"""

import logging
import os.path as op
import unittest
import sys

ROOT_DIR = op.dirname(op.realpath(__file__))
sys.path.insert(0, ROOT_DIR)

from testutils import TestSettings


def _has_flag(*names):
    return any(name in sys.argv for name in names)


def run_tests():
    TestSettings.failfast = _has_flag('-f', '--failfast')
    TestSettings.buffering = _has_flag('-b', '--buffer')
    TestSettings.timing = _has_flag('-t', '--timing')
    TestSettings.skipslow = not _has_flag('-s', '--run-slow-tests')
    if _has_flag('-v', '--verbose'):
        logging.basicConfig(level=logging.DEBUG)
    suite = unittest.TestLoader().discover(ROOT_DIR, pattern="test_*.py")
    runner = unittest.TextTestRunner(verbosity=2,
                                     failfast=TestSettings.failfast,
                                     buffer=TestSettings.buffering)
    result = runner.run(suite)
    return len(result.failures) + len(result.errors)


if __name__ == '__main__':
    sys.exit(1 if run_tests() else 0)
