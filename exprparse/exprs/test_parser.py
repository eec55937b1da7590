#!/usr/bin/env python3

import io
import math
import unittest
import sys

from mpmath import mp

from testutils import ExprTestCase
from ..lexer.problems import ParseException, ParseError
from .basics import Constant, BinaryOperation, Op
from .functions import Function, FunctionRegistry
from .parser import Parser, parse
from .scope import Scope


class _Average(Function):
    number_of_arguments = -1
    def eval(self, args):
        values = [a.evaluate() for a in args]
        return sum(values) / len(values)


def _value(text, scope=None, **kw):
    return parse(text, scope, **kw).evaluate()


class TestParser(ExprTestCase):
    def setUp(self):
        self.last_expr = None

    def failureHook(self, result):
        if self.last_expr is not None:
            print("\nTree of the last parsed expression:")
            self.last_expr.print_tree()

    def assertParsesTo(self, text, expected, places=7):
        self.last_expr = parse(text)
        self.assertAlmostEqual(self.last_expr.evaluate(), expected,
                               places=places, msg="for expression %r" % text)

    def test_simple(self):
        for text, expected in [
                ("1 - (10 - -100)", -109),
                ("1 / 10 * 10 / 100", 0.01),
                ("1 + 10 - 100", -89),
                ("1 - 10 - -100", 91),
                ("1 - 10  + 100", 91),
                ("1 - (10 + 100)", -109),
                ("1 + (10 - 100)", -89),
                ("1 / 1 * 100", 100),
                ("1 / (1 * 100)", 0.01),
                ("1 * 1 / 100", 0.01),
                ("3+ -4", -1),
                ("3+(-4)", -1),
                ("3+-4", -1),
                ("3-4", -1),
                ("10 - 2 - 3", 5),
                ("2 ^ 3 ^ 2", 64),
                ("2 ** 3", 8),
                ("7 % 4", 3),
                ("-7 % 4", -3),
        ]:
            self.assertParsesTo(text, expected)

    def test_number_formats(self):
        self.assertParsesTo("3.333_333+4_000", 4003.333333)
        self.assertParsesTo("3+4*4", 19)
        self.assertParsesTo("3^4/4", 20.25)
        self.assertParsesTo("3 < 4*4", 1)
        self.assertParsesTo("3 > 4*4", 0)
        self.assertParsesTo("(3 + 4) * 4", 28)
        self.assertParsesTo("1e3 + 2.5E-1", 1000.25)

    def test_signed(self):
        for text, expected in [
                ("-2.02", -2.02),
                ("+2.02", 2.02),
                ("+2.02 + -1.01", 1.01),
                ("-2.02 - +2.01", -4.03),
                ("+2.02 + +1.01", 3.03),
                ("1+-2.2", -1.2),
                ("1++2.2", 3.2),
                ("6*-1.1", -6.6),
                ("6*+1.1", 6.6),
                ("-(3 + 4)", -7),
        ]:
            self.assertParsesTo(text, expected)

    def test_decimal_points(self):
        for text, expected in [
                (".2", 0.2),
                ("+.2", 0.2),
                (".2+.2", 0.4),
                (".6+-.2", 0.4),
                ("-(-0.2)", 0.2),
                ("1-(-0.2)", 1.2),
                ("1+(-0.2)", 0.8),
                ("+(2.2)", 2.2),
                ("2.", 2.0),
        ]:
            self.assertParsesTo(text, expected)

    def test_comments(self):
        self.assertParsesTo("27+ /*xxx*/ 2", 29)
        self.assertParsesTo("27+/*xxx*/ 2", 29)
        self.assertParsesTo("27/*xxx*/+2", 29)
        self.assertParsesTo("27 // two\n + 2", 29)

    def test_relational(self):
        self.assertParsesTo("5<=5", 1)
        self.assertParsesTo("5>=5", 1)
        self.assertParsesTo("5<5", 0)
        self.assertParsesTo("5>5", 0)
        self.assertParsesTo("5=5", 1)
        self.assertParsesTo("5!=5", 0)
        self.assertParsesTo("0.1 + 0.2 = 0.3", 1)
        self.assertParsesTo("1 < 2 && 2 < 3", 1)
        self.assertParsesTo("1 > 2 || 2 > 3", 0)

    def test_variables(self):
        scope = Scope()
        expr = parse("3*a + 4 * b", scope)
        a = scope.get_variable("a")
        b = scope.get_variable("b")
        self.assertEqual(expr.evaluate(), 0)
        a.set_value(2)
        self.assertEqual(expr.evaluate(), 6)
        b.set_value(3)
        self.assertEqual(expr.evaluate(), 18)

    def test_rebinding(self):
        scope = Scope()
        a = scope.create("a")
        expr = parse("3*a", scope)
        values = []
        for value in (2, 5, 0.5, -1):
            a.set_value(value)
            values.append(expr.evaluate())
        self.assertListAlmostEqual(values, [6, 15, 1.5, -3])

    def test_functions(self):
        self.assertParsesTo("1 + sin(-pi) + cos(pi)", 0)
        self.assertParsesTo("tan(sqrt(euler ^ (pi * 3)))", 4.72038341576, places=9)
        self.assertParsesTo("| 3 - 6 |", 3)
        self.assertParsesTo("3 * |1 - 5| + 1", 13)
        self.assertParsesTo("if(3 > 2 && 2 < 3, 2+1, 1+1)", 3)
        self.assertParsesTo("if(3 < 2 || 2 > 3, 2+1, 1+1)", 2)
        self.assertParsesTo("min(3,2)", 2)
        self.assertParsesTo("max(3, 2 * 4) - 1", 7)

    def test_variadic_function(self):
        registry = FunctionRegistry({"avg": _Average("avg")})
        self.assertEqual(parse("avg(3,2,1,7)", functions=registry).evaluate(), 3.25)
        self.assertEqual(parse("avg(4)", functions=registry).evaluate(), 4)

    def test_scopes(self):
        root = Scope()
        a = root.get_variable("a").with_value(1)
        sub1 = Scope().with_parent(root)
        b1 = sub1.get_variable("b").with_value(2)
        sub2 = Scope().with_parent(root)
        b2 = sub2.get_variable("b").with_value(3)
        # `c` is defined in root; sub1.get_variable finds it there.
        c = root.get_variable("c").with_value(4)
        c1 = sub1.get_variable("c").with_value(5)
        self.assertIs(c, c1)
        # `d` is shadowed by sub1 but not by sub2.
        d = root.get_variable("d").with_value(9)
        d1 = sub1.create("d").with_value(7)
        self.assertIsNot(d, d1)

        expr1 = parse("a + b + c + d", sub1)
        expr2 = parse("a + b + c + d", sub2)
        self.assertEqual(expr1.evaluate(), 15)
        self.assertEqual(expr2.evaluate(), 18)
        a.set_value(10)
        b1.set_value(20)
        b2.set_value(30)
        c.set_value(40)
        self.assertEqual(expr1.evaluate(), 77)
        self.assertEqual(expr2.evaluate(), 89)
        c1.set_value(50)
        self.assertEqual(expr1.evaluate(), 87)
        self.assertEqual(expr2.evaluate(), 99)

    def test_variable_names(self):
        scope = Scope()
        parse("a*b+c", scope)
        self.assertEqual(scope.get_local_names(), {"a", "b", "c"})
        self.assertNotIn("x", scope.get_names())
        self.assertEqual(len(scope.get_variables()), 5)

    def test_quantifiers(self):
        self.assertParsesTo("1K", 1000)
        self.assertParsesTo("1M * 1m", 1000)
        self.assertParsesTo("1n * 1G", 1)
        self.assertParsesTo("(1M / 1k) * 1m", 1)
        self.assertParsesTo("1u * 10 k * 1000  m * 0.1 k", 1)

    def test_invalid_quantifier(self):
        with self.assertRaises(ParseException) as cm:
            parse("1x")
        self.assertEqual(len(cm.exception.errors), 1)
        self.assertIn("Expected a valid quantifier", cm.exception.message)

    def test_exponent_without_digits(self):
        for text in ["1e-", "2e+ 1", "1e-x", "3 * 1E+ 2", "1e"]:
            with self.assertRaises(ParseException, msg=text):
                parse(text)
            with self.assertRaises(ParseException, msg=text):
                parse(text, Scope(use_mp=True))
        self.assertParsesTo("1e+2 + 1E-1", 100.1)

    def test_invalid_number(self):
        # Separator settings producing content no number conversion accepts.
        settings = dict(effective_decimal_separator=',')
        with self.assertRaises(ParseException) as cm:
            parse("1.5 + 2", tokenizer_settings=settings)
        self.assertEqual(len(cm.exception.errors), 1)
        self.assertIn("Invalid number: '1.5'", cm.exception.message)

    def test_deep_nesting(self):
        with self.assertRaises(ParseException) as cm:
            parse("+".join(["1"] * 5000))
        self.assertIn("nested too deeply", cm.exception.message)
        with self.assertRaises(ParseException):
            parse("(" * 5000 + "1" + ")" * 5000)
        self.assertParsesTo("+".join(["1"] * 100), 100)

    def test_errors(self):
        with self.assertRaises(ParseException) as cm:
            parse("test(1 2)+sin(1,2)*34-34.45.45+")
        errors = cm.exception.errors
        self.assertEqual(len(errors), 5)
        self.assertTrue(all(isinstance(e, ParseError) and e.is_error()
                            for e in errors))
        self.assertIn("Unknown function: 'test'", errors[0].message)
        self.assertTrue(cm.exception.message.startswith("5 errors occurred."))
        with self.assertRaises(ParseException) as cm:
            parse("1(")
        self.assertEqual(len(cm.exception.errors), 1)

    def test_error_messages(self):
        cases = [
            ("sin(1, 2)", "Number of arguments for function 'sin' do not match. "
                          "Expected: 1, Found: 2"),
            ("(1 + 2", "Unexpected token '<End Of Input>'. Expected: ')'"),
            ("1 +", "Unexpected token: '<End Of Input>'. Expected an expression."),
            ("1 2", "Unexpected token: '2'. Expected an expression."),
            ("foo(1)", "Unknown function: 'foo'"),
            ("3 # 4", "Unexpected token: '#'. Expected an expression."),
        ]
        for text, message in cases:
            with self.assertRaises(ParseException, msg=text) as cm:
                parse(text)
            self.assertTrue(cm.exception.errors[0].message.endswith(message),
                            "%r: %r" % (text, cm.exception.errors[0].message))

    def test_strict_scope(self):
        scope = Scope().with_strict_lookup()
        scope.create("a").set_value(2)
        self.assertEqual(parse("a * 3", scope).evaluate(), 6)
        with self.assertRaises(ParseException) as cm:
            parse("a * b", scope)
        self.assertEqual(len(cm.exception.errors), 1)
        self.assertIn("Unknown variable: 'b'", cm.exception.message)
        self.assertIsNone(scope.find("b"))

    def test_reorder_left_to_right(self):
        expr = parse("a - b - c")
        self.assertIsInstance(expr, BinaryOperation)
        self.assertEqual(str(expr), "((a SUBTRACT b) SUBTRACT c)")
        expr = parse("a - (b - c)")
        self.assertEqual(str(expr), "(a SUBTRACT (b SUBTRACT c))")
        self.assertTrue(expr.right.sealed)
        expr = parse("a / b * c")
        self.assertEqual(str(expr), "((a DIVIDE b) MULTIPLY c)")

    def test_simplification(self):
        expr = parse("2 * 3 + sqrt(16)")
        self.assertIsInstance(expr, Constant)
        self.assertEqual(expr.evaluate(), 10)
        expr = parse("x + 1 + 2")
        self.assertEqual(str(expr), "(3.0 ADD x)")
        expr = parse("1 + 2 + x")
        self.assertEqual(str(expr), "(3.0 ADD x)")
        self.assertEqual(expr.op, Op.ADD)

    def test_nan_results(self):
        self.assertIsNaN(_value("sqrt(-1)"))
        self.assertIsNaN(_value("0 / 0"))
        self.assertEqual(_value("1 / 0"), math.inf)
        self.assertIsNaN(_value("sin(0/0)"))

    def test_stream_input(self):
        self.assertEqual(parse(io.StringIO("1 +\n 2")).evaluate(), 3)

    def test_tokenizer_settings(self):
        settings = dict(decimal_separator=',', grouping_separator="'")
        self.assertAlmostEqual(
            parse("1'000,5 * 2", tokenizer_settings=settings).evaluate(), 2001)

    def test_warnings(self):
        parser = Parser("1 + 2", fail_on_warnings=False)
        parser.tokenizer.add_warning(parser.tokenizer.current(), "Be careful")
        self.assertEqual(parser.parse().evaluate(), 3)
        self.assertEqual(len(parser.problems), 1)
        self.assertTrue(parser.problems[0].is_warning())
        parser = Parser("1 + 2")
        parser.tokenizer.add_warning(parser.tokenizer.current(), "Be careful")
        with self.assertRaises(ParseException):
            parser.parse()

    def test_mp_mode(self):
        with mp.workdps(50):
            scope = Scope(use_mp=True)
            expr = parse("1 / 3 + x", scope)
            scope.get_variable("x").set_value(mp.mpf(1))
            value = expr.evaluate()
            self.assertIsInstance(value, mp.mpf)
            self.assertTrue(mp.almosteq(value, mp.mpf(4) / 3, 1e-48))
            value = parse("sqrt(2) * 1k", scope).evaluate()
            self.assertTrue(mp.almosteq(value, 1000 * mp.sqrt(2), 1e-45))
            self.assertTrue(mp.almosteq(parse("pi", scope).evaluate(), mp.pi, 1e-48))
            self.assertIsNaN(parse("sqrt(-1)", scope).evaluate())
            self.assertEqual(parse("5 <= 5", scope).evaluate(), 1)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
