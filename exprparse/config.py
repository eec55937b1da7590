r"""@package exprparse.config

Reading parser and tokenizer settings from INI style configuration files.

A configuration file may contain a `[tokenizer]` section with settings
accepted by lexer.tokenizer.Tokenizer.configure() and a `[parser]` section
with the following options:

* `use_mp`: whether to evaluate using `mpmath` (default `no`)
* `dps`: decimal places used by `mpmath` (default: current `mp.dps`)
* `strict`: whether unknown variables are an error (default `no`)
* `fail_on_warnings`: whether warnings fail the parse (default `yes`)

Next to a file `exprparse.cfg`, an optional file `exprparse.mine.cfg` is read
as well. Its values override the ones of the main file, which allows keeping
local settings out of version control.

@b Examples

```
    [tokenizer]
    decimal_separator = ,
    grouping_separator = .
    special_id_starters = $#

    [parser]
    use_mp = yes
    dps = 30
```
"""

from configparser import ConfigParser
from contextlib import contextmanager
import logging
import os.path as op

from mpmath import mp

from .exprs.parser import parse
from .exprs.scope import Scope
from .lexer.tokenizer import Tokenizer


__all__ = [
    "ExprConfig",
    "load_config",
    "override_filename",
]


logger = logging.getLogger(__name__)


_BOOLEAN_SETTINGS = ("treat_single_pipe_as_bracket", "keywords_case_sensitive")
_CHARSET_SETTINGS = ("brackets", "special_id_starters", "special_id_terminators")
_OPTIONAL_SETTINGS = ("line_comment", "block_comment_start", "block_comment_end")


def _tokenizer_settings(section):
    r"""Convert the options of a `[tokenizer]` section to proper types."""
    settings = dict()
    for name in section:
        if name not in Tokenizer.SETTINGS:
            raise ValueError("Unknown tokenizer setting: %s" % name)
        value = section[name]
        if name in _BOOLEAN_SETTINGS:
            value = section.getboolean(name)
        elif name in _CHARSET_SETTINGS:
            value = set(value.replace(" ", ""))
        elif name == "keywords":
            value = [k.strip() for k in value.split(",") if k.strip()]
        elif name == "string_delimiters":
            # Whitespace separated items of a delimiter and its optional
            # escape character, e.g. `"\ '`.
            value = {item[0]: item[1] if len(item) > 1 else '\0'
                     for item in value.split()}
        elif name in _OPTIONAL_SETTINGS and not value:
            value = None
        settings[name] = value
    return settings


class ExprConfig(object):
    r"""Settings for parsing and evaluating expressions."""

    def __init__(self, tokenizer_settings=None, use_mp=False, dps=None,
                 strict=False, fail_on_warnings=True):
        ## Dict of settings passed to lexer.tokenizer.Tokenizer.configure().
        self.tokenizer_settings = dict(tokenizer_settings or {})
        ## Whether to evaluate using `mpmath`.
        self.use_mp = use_mp
        ## Decimal places for `mpmath` or `None` to keep the current ones.
        self.dps = dps
        ## Whether unknown variables are reported as errors.
        self.strict = strict
        self.fail_on_warnings = fail_on_warnings

    @classmethod
    def from_parser(cls, config):
        r"""Create the settings from a `configparser.ConfigParser`."""
        tokenizer_settings = dict()
        if config.has_section("tokenizer"):
            tokenizer_settings = _tokenizer_settings(config["tokenizer"])
        kw = dict()
        if config.has_section("parser"):
            section = config["parser"]
            unknown = set(section) - {"use_mp", "dps", "strict",
                                      "fail_on_warnings"}
            if unknown:
                raise ValueError("Unknown parser setting(s): %s"
                                 % ", ".join(sorted(unknown)))
            kw = dict(
                use_mp=section.getboolean("use_mp", False),
                dps=section.getint("dps", None),
                strict=section.getboolean("strict", False),
                fail_on_warnings=section.getboolean("fail_on_warnings", True),
            )
        return cls(tokenizer_settings=tokenizer_settings, **kw)

    @contextmanager
    def context(self):
        r"""Context in which `mpmath` uses the configured precision."""
        if self.use_mp and self.dps:
            with mp.workdps(self.dps):
                yield
        else:
            yield

    def create_scope(self, parent=None):
        r"""Create a new scope with the configured numeric mode and lookup."""
        scope = Scope(parent=parent, use_mp=self.use_mp)
        return scope.with_strict_lookup(self.strict)

    def parse(self, source, scope=None, functions=None):
        r"""Parse an expression using these settings.

        If no `scope` is given, a new one is created using create_scope().
        """
        if scope is None:
            scope = self.create_scope()
        return parse(source, scope=scope, functions=functions,
                     fail_on_warnings=self.fail_on_warnings,
                     tokenizer_settings=self.tokenizer_settings)

    def __repr__(self):
        return ("<ExprConfig use_mp=%r, dps=%r, strict=%r, "
                "fail_on_warnings=%r, tokenizer=%r>"
                % (self.use_mp, self.dps, self.strict, self.fail_on_warnings,
                   self.tokenizer_settings))


def override_filename(filename):
    r"""Return the name of the local override file, e.g. `a.mine.cfg` for `a.cfg`."""
    root, ext = op.splitext(filename)
    return "%s.mine%s" % (root, ext)


def load_config(filename):
    r"""Read settings from a file and its optional local override file.

    @raise OSError if the main file cannot be read.
    @raise ValueError for unknown or malformed settings.
    """
    config = ConfigParser()
    with open(filename) as cfg_file:
        config.read_file(cfg_file)
    read = config.read(override_filename(filename))
    logger.debug("Read configuration from %s%s.", filename,
                 " (with %s)" % read[0] if read else "")
    return ExprConfig.from_parser(config)
