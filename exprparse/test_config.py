#!/usr/bin/env python3

import os.path as op
import tempfile
import textwrap
import unittest
import sys

from mpmath import mp

from testutils import ExprTestCase
from .config import ExprConfig, load_config, override_filename
from .lexer.problems import ParseException


def _write(path, content):
    with open(path, "w") as f:
        f.write(textwrap.dedent(content))


class TestConfig(ExprTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.fname = op.join(self._tmp.name, "exprparse.cfg")

    def tearDown(self):
        self._tmp.cleanup()

    def test_override_filename(self):
        self.assertEqual(override_filename("a/b.cfg"), "a/b.mine.cfg")
        self.assertEqual(override_filename("settings"), "settings.mine")

    def test_defaults(self):
        _write(self.fname, "")
        config = load_config(self.fname)
        self.assertFalse(config.use_mp)
        self.assertIsNone(config.dps)
        self.assertFalse(config.strict)
        self.assertTrue(config.fail_on_warnings)
        self.assertEqual(config.tokenizer_settings, {})

    def test_missing_file(self):
        with self.assertRaises(OSError):
            load_config(self.fname)

    def test_parser_section(self):
        _write(self.fname, """
            [parser]
            use_mp = yes
            dps = 20
            strict = on
            fail_on_warnings = no
        """)
        config = load_config(self.fname)
        self.assertTrue(config.use_mp)
        self.assertEqual(config.dps, 20)
        self.assertTrue(config.strict)
        self.assertFalse(config.fail_on_warnings)

    def test_local_override(self):
        _write(self.fname, """
            [parser]
            use_mp = yes
            dps = 20
        """)
        _write(override_filename(self.fname), """
            [parser]
            dps = 40
        """)
        config = load_config(self.fname)
        self.assertTrue(config.use_mp)
        self.assertEqual(config.dps, 40)

    def test_tokenizer_section(self):
        _write(self.fname, r"""
            [tokenizer]
            decimal_separator = ,
            grouping_separator = .
            treat_single_pipe_as_bracket = no
            special_id_starters = $ :
            keywords = if, then,else
            string_delimiters = "\ '
            line_comment =
        """)
        settings = load_config(self.fname).tokenizer_settings
        self.assertEqual(settings["decimal_separator"], ",")
        self.assertEqual(settings["grouping_separator"], ".")
        self.assertIs(settings["treat_single_pipe_as_bracket"], False)
        self.assertEqual(settings["special_id_starters"], {"$", ":"})
        self.assertEqual(settings["keywords"], ["if", "then", "else"])
        self.assertEqual(settings["string_delimiters"],
                         {'"': '\\', "'": '\0'})
        self.assertIsNone(settings["line_comment"])

    def test_unknown_settings(self):
        _write(self.fname, """
            [tokenizer]
            no_such_setting = 1
        """)
        with self.assertRaises(ValueError):
            load_config(self.fname)
        _write(self.fname, """
            [parser]
            precision = 1
        """)
        with self.assertRaises(ValueError):
            load_config(self.fname)

    def test_localized_parsing(self):
        _write(self.fname, """
            [tokenizer]
            decimal_separator = ,
            grouping_separator = .
        """)
        config = load_config(self.fname)
        self.assertEqual(config.parse("1.000,5 * 2").evaluate(), 2001.0)


class TestExprConfig(ExprTestCase):
    def test_mp_context(self):
        config = ExprConfig(use_mp=True, dps=30)
        dps = mp.dps
        with config.context():
            self.assertEqual(mp.dps, 30)
            value = config.parse("1 / 3").evaluate()
            self.assertIsInstance(value, mp.mpf)
            self.assertTrue(mp.almosteq(value, mp.mpf(1)/3, 1e-28))
        self.assertEqual(mp.dps, dps)

    def test_float_context(self):
        config = ExprConfig(dps=30)
        dps = mp.dps
        with config.context():
            self.assertEqual(mp.dps, dps)
            self.assertIsInstance(config.parse("1 / 3").evaluate(), float)

    def test_strict(self):
        config = ExprConfig(strict=True)
        self.assertTrue(config.create_scope().strict)
        with self.assertRaises(ParseException):
            config.parse("a + 1")
        scope = config.create_scope()
        scope.create("a").set_value(2.0)
        self.assertEqual(config.parse("a + 1", scope=scope).evaluate(), 3.0)

    def test_tokenizer_settings(self):
        config = ExprConfig(tokenizer_settings=dict(decimal_separator=','))
        self.assertEqual(config.parse("1,5 + 1").evaluate(), 2.5)
        config = ExprConfig(tokenizer_settings=dict(no_such_setting=1))
        with self.assertRaises(ValueError):
            config.parse("1")


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
