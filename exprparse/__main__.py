r"""@package exprparse.__main__

Command line interface for evaluating one expression.

Usage:

```
    python -m exprparse EXPR [-D name=value ...] [--mp] [--dps N] [--strict]
                             [--config FILE] [-v]
```

The value of the expression is printed to stdout. If the expression cannot
be parsed, all problems are printed to stderr and the exit code is 1.
"""

import logging
import sys

from .config import ExprConfig, load_config
from .lexer.problems import ParseException
from .numutils import to_number


__all__ = []


USAGE = """\
Usage: python -m exprparse EXPR [options]

Options:
  -D name=value   Define a variable (may be repeated).
  --mp            Evaluate using mpmath arbitrary precision numbers.
  --dps N         Decimal places for mpmath (implies --mp).
  --strict        Treat undefined variables as errors.
  --config FILE   Read settings from FILE (and FILE's .mine override).
  -v, --verbose   Print informational messages.
"""


class Main(object):
    def __init__(self, *args):
        self.args = list(args)

    def pop_flag(self, flag):
        try:
            self.args.remove(flag)
            return True
        except ValueError:
            pass
        return False

    def pop_option(self, option):
        r"""Remove `option` and its value from the arguments and return the value."""
        if option not in self.args:
            return None
        idx = self.args.index(option)
        if idx + 1 >= len(self.args):
            self.usage("Missing value for %s" % option)
        value = self.args[idx + 1]
        del self.args[idx:idx+2]
        return value

    def pop_definitions(self):
        definitions = []
        while True:
            value = self.pop_option('-D')
            if value is None:
                return definitions
            name, sep, number = value.partition("=")
            if not sep or not name:
                self.usage("Invalid definition: %s" % value)
            definitions.append((name.strip(), number.strip()))

    def usage(self, message=None):
        if message:
            print(message, file=sys.stderr)
        print(USAGE, file=sys.stderr, end='')
        sys.exit(2)

    def main(self):
        if self.pop_flag('-h') or self.pop_flag('--help'):
            print(USAGE, end='')
            return 0
        if self.pop_flag('-v') or self.pop_flag('--verbose'):
            logging.getLogger().setLevel(logging.INFO)
        cfg_file = self.pop_option('--config')
        config = load_config(cfg_file) if cfg_file else ExprConfig()
        if cfg_file:
            logging.info("Configuration: %r", config)
        if self.pop_flag('--mp'):
            config.use_mp = True
        dps = self.pop_option('--dps')
        if dps is not None:
            try:
                config.dps = int(dps)
            except ValueError:
                self.usage("Invalid number of decimal places: %s" % dps)
            config.use_mp = True
        if self.pop_flag('--strict'):
            config.strict = True
        definitions = self.pop_definitions()
        if len(self.args) != 1:
            self.usage()
        text = self.args[0]
        with config.context():
            scope = config.create_scope()
            for name, value in definitions:
                try:
                    scope.create(name).set_value(to_number(value, config.use_mp))
                except ValueError:
                    self.usage("Invalid value for %s: %s" % (name, value))
                logging.info("Variable %s = %s", name, value)
            logging.info("Numeric mode: %s", "mpmath" if config.use_mp else "float")
            try:
                expr = config.parse(text, scope=scope)
            except ParseException as e:
                print(e.details(), file=sys.stderr)
                return 1
            logging.info("Expression: %s", expr)
            print(expr.evaluate())
        return 0


def run():
    logging.basicConfig(format="%(levelname)s: %(message)s")
    sys.exit(Main(*sys.argv[1:]).main())


if __name__ == "__main__":
    run()
