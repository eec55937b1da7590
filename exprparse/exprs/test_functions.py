#!/usr/bin/env python3

import math
import unittest
import sys

from mpmath import mp

from testutils import ExprTestCase
from ..numutils import ExpressionWarning
from .basics import Constant
from .functions import Function, UnaryFunction, FunctionRegistry
from .functions import BUILTIN_FUNCTIONS, default_registry


class _Counting(Constant):
    r"""Constant counting its evaluations."""
    def __init__(self, value):
        super(_Counting, self).__init__(value)
        self.count = 0
    def evaluate(self):
        self.count += 1
        return super(_Counting, self).evaluate()


class _Average(Function):
    number_of_arguments = -1
    def eval(self, args):
        values = [a.evaluate() for a in args]
        return sum(values) / len(values)


def _call(name, *values):
    return BUILTIN_FUNCTIONS[name].eval([Constant(v) for v in values])


class TestBuiltins(ExprTestCase):
    def test_names(self):
        self.assertEqual(
            sorted(BUILTIN_FUNCTIONS),
            sorted("sin cos tan sinh cosh tanh asin acos atan atan2 deg rad "
                   "abs round ceil floor exp ln log sqrt pow min max rnd "
                   "sign if".split())
        )

    def test_values(self):
        self.assertAlmostEqual(_call("sin", math.pi / 2), 1.0)
        self.assertAlmostEqual(_call("cos", math.pi), -1.0)
        self.assertAlmostEqual(_call("tan", math.pi / 4), 1.0)
        self.assertAlmostEqual(_call("sinh", 1.0), math.sinh(1.0))
        self.assertAlmostEqual(_call("cosh", 1.0), math.cosh(1.0))
        self.assertAlmostEqual(_call("tanh", 1.0), math.tanh(1.0))
        self.assertAlmostEqual(_call("asin", 1.0), math.pi / 2)
        self.assertAlmostEqual(_call("acos", 1.0), 0.0)
        self.assertAlmostEqual(_call("atan", 1.0), math.pi / 4)
        self.assertAlmostEqual(_call("atan2", 1.0, -1.0), 3 * math.pi / 4)
        self.assertAlmostEqual(_call("deg", math.pi), 180.0)
        self.assertAlmostEqual(_call("rad", 180.0), math.pi)
        self.assertEqual(_call("abs", -3.0), 3.0)
        self.assertEqual(_call("round", 2.5), 3.0)
        self.assertEqual(_call("round", -2.5), -2.0)
        self.assertEqual(_call("ceil", 2.1), 3.0)
        self.assertEqual(_call("floor", 2.9), 2.0)
        self.assertAlmostEqual(_call("exp", 1.0), math.e)
        self.assertAlmostEqual(_call("ln", math.e), 1.0)
        self.assertAlmostEqual(_call("log", 1000.0), 3.0)
        self.assertEqual(_call("sqrt", 16.0), 4.0)
        self.assertEqual(_call("pow", 2.0, 10.0), 1024.0)
        self.assertEqual(_call("min", 3.0, 2.0), 2.0)
        self.assertEqual(_call("max", 3.0, 2.0), 3.0)
        self.assertEqual(_call("sign", -0.5), -1.0)
        self.assertEqual(_call("sign", 0.0), 0.0)

    def test_invalid_arguments(self):
        self.assertIsNaN(_call("sqrt", -1.0))
        self.assertIsNaN(_call("asin", 2.0))
        self.assertIsNaN(_call("ln", -1.0))
        self.assertEqual(_call("ln", 0.0), -math.inf)

    def test_mp_values(self):
        with mp.workdps(40):
            value = _call("sqrt", mp.mpf(2))
            self.assertTrue(mp.almosteq(value, mp.sqrt(2), 1e-38))
            self.assertIsNaN(_call("sqrt", mp.mpf(-1)))
            self.assertIsNaN(_call("log", mp.mpf(-1)))
            self.assertEqual(_call("round", mp.mpf(2.5)), 3)
            self.assertEqual(_call("min", mp.mpf(3), mp.mpf(2)), 2)

    def test_nan_short_circuit(self):
        second = _Counting(1.0)
        result = BUILTIN_FUNCTIONS["pow"].eval([Constant.EMPTY, second])
        self.assertIsNaN(result)
        self.assertEqual(second.count, 0)
        self.assertIsNaN(BUILTIN_FUNCTIONS["sin"].eval([Constant.EMPTY]))

    def test_if(self):
        fun = BUILTIN_FUNCTIONS["if"]
        self.assertEqual(fun.number_of_arguments, 3)
        self.assertFalse(fun.is_natural_function())
        yes, no = _Counting(1.0), _Counting(2.0)
        self.assertEqual(fun.eval([Constant(-0.1), yes, no]), 1.0)
        self.assertEqual((yes.count, no.count), (1, 0))
        self.assertEqual(fun.eval([Constant(0.0), yes, no]), 2.0)
        self.assertEqual((yes.count, no.count), (1, 1))
        self.assertIsNaN(fun.eval([Constant.EMPTY, yes, no]))

    def test_rnd(self):
        fun = BUILTIN_FUNCTIONS["rnd"]
        self.assertFalse(fun.is_natural_function())
        for _ in range(20):
            value = fun.eval([Constant(10.0)])
            self.assertTrue(0.0 <= value < 10.0)


class TestRegistry(ExprTestCase):
    def test_register(self):
        registry = FunctionRegistry()
        self.assertIn("sin", registry)
        self.assertIsNone(registry.get("avg"))
        avg = _Average("avg")
        registry.register("avg", avg)
        self.assertIs(registry.get("avg"), avg)
        self.assertNotIn("avg", default_registry())
        self.assertEqual(avg.eval([Constant(v) for v in (3, 2, 1, 7)]), 3.25)

    def test_override_warns(self):
        registry = FunctionRegistry()
        with self.assertWarns(ExpressionWarning):
            registry.register("sin", UnaryFunction("sin", abs, abs))
        self.assertEqual(registry.get("sin").eval([Constant(-2.0)]), 2.0)
        self.assertIsNot(default_registry().get("sin"), registry.get("sin"))

    def test_of(self):
        self.assertIs(FunctionRegistry.of(None), default_registry())
        registry = FunctionRegistry(builtins=False)
        self.assertEqual(len(registry), 0)
        self.assertIs(FunctionRegistry.of(registry), registry)
        converted = FunctionRegistry.of({"avg": _Average()})
        self.assertIn("avg", converted)
        self.assertIn("sin", converted)
        self.assertEqual(converted.get("avg").name, "_average")
        with self.assertRaises(TypeError):
            registry.register("f", lambda x: x)

    def test_unregister(self):
        registry = FunctionRegistry()
        sin = registry.unregister("sin")
        self.assertIs(sin, BUILTIN_FUNCTIONS["sin"])
        self.assertNotIn("sin", registry)
        self.assertIsNone(registry.unregister("sin"))


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
