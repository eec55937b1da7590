r"""@package exprparse.exprs.scope

Variables and the scopes they live in.

A Scope maps names to Variable objects. Expressions hold references to the
Variable objects themselves (not their values), so that changing a variable
after parsing changes the result of the next evaluation without re-parsing.

Scopes form a chain: names not found locally are looked up in the parent.
Every scope created without an explicit parent chains to the *root scope* of
its numeric mode, which holds the constants `pi` and `euler`. There is one
root scope for floating point values and one for `mpmath` values. Both are
created lazily on first use.

@b Examples

```
    scope = Scope()
    a = scope.create("a")
    expr = parse("3 * a", scope)
    a.set_value(2)
    expr.evaluate()     # 6.0
    a.set_value(5)
    expr.evaluate()     # 15.0
```
"""

import logging
import threading

from mpmath import mp

from ..numutils import converter


__all__ = [
    "Variable",
    "Scope",
    "UnknownVariableError",
    "ConstantVariableError",
]


logger = logging.getLogger(__name__)


class UnknownVariableError(LookupError):
    r"""Raised by strict scopes when looking up an undefined variable."""
    pass


class ConstantVariableError(ValueError):
    r"""Raised when trying to change the value of a constant variable."""
    pass


class Variable(object):
    r"""A named value which may be changed between evaluations.

    Variables are created by and owned by a Scope. Once made constant (see
    make_constant()), the value can no longer be changed.
    """

    def __init__(self, name, value=0.0):
        self._name = name
        self._value = value
        self._constant = False

    @property
    def name(self):
        return self._name

    @property
    def value(self):
        r"""Current value of the variable."""
        return self._value
    @value.setter
    def value(self, value):
        self.set_value(value)

    def get_value(self):
        return self._value

    def set_value(self, value):
        r"""Change the value.

        @raise ConstantVariableError if the variable is constant.
        """
        if self._constant:
            raise ConstantVariableError("%s is constant!" % self._name)
        self._value = value

    def make_constant(self, value):
        r"""Set the value and permanently prevent further changes."""
        self.set_value(value)
        self._constant = True

    def is_constant(self):
        return self._constant

    def with_value(self, value):
        r"""Set the value and return this variable (for chained calls)."""
        self.set_value(value)
        return self

    def __str__(self):
        return "%s: %s" % (self._name, self._value)

    def __repr__(self):
        return "<Variable %s>" % self


def _mode_name(use_mp):
    return "mpmath" if use_mp else "float"


class Scope(object):
    r"""Container of named variables with an optional parent scope.

    Lookups (find(), get_variable()) consult the parent chain, while
    create() and remove() only ever act on this scope. A variable created in
    a child scope therefore shadows a variable of the same name in a parent.

    The scope may be shared between threads: creation of variables is guarded
    by a lock so that concurrent lookups of an unknown name result in one
    single Variable object.
    """

    ## Root scopes indexed by their numeric mode.
    _roots = dict()
    _roots_lock = threading.Lock()

    def __init__(self, parent=None, use_mp=False, _root=False):
        r"""Create a new scope.

        @param parent
            Scope to consult for names not defined in this scope. If `None`
            (default), the root scope of the numeric mode is used.
        @param use_mp
            Whether variables hold `mpmath` numbers (arbitrary precision)
            instead of floats. Expressions parsed against this scope are
            evaluated in the respective mode. Ignored if a `parent` is given,
            in which case the mode of the parent is used.
        """
        self._use_mp = parent.use_mp if parent is not None else bool(use_mp)
        self._context = dict()
        self._lock = threading.Lock()
        self._strict = False
        if _root:
            self._parent = None
        elif parent is None:
            self._parent = Scope.root(self._use_mp)
        else:
            self._parent = parent

    @classmethod
    def root(cls, use_mp=False):
        r"""Return the root scope of the given numeric mode.

        The root scope is created on first access and holds the constants
        `pi` and `euler`.
        """
        use_mp = bool(use_mp)
        root = cls._roots.get(use_mp)
        if root is None:
            with cls._roots_lock:
                root = cls._roots.get(use_mp)
                if root is None:
                    root = cls._create_root(use_mp)
                    cls._roots[use_mp] = root
        return root

    @classmethod
    def _create_root(cls, use_mp):
        logger.debug("Creating %s root scope.", _mode_name(use_mp))
        root = cls(use_mp=use_mp, _root=True)
        if use_mp:
            # Lazy mpmath constants follow later changes of `mp.dps`.
            root.create("pi").make_constant(mp.pi)
            root.create("euler").make_constant(mp.e)
        else:
            root.create("pi").make_constant(float(mp.pi))
            root.create("euler").make_constant(float(mp.e))
        return root

    @property
    def use_mp(self):
        r"""Whether this scope uses `mpmath` numbers."""
        return self._use_mp

    @property
    def parent(self):
        return self._parent

    @property
    def strict(self):
        r"""Whether get_variable() fails for unknown names."""
        return self._strict

    def with_parent(self, parent):
        r"""Set the parent scope and return this scope.

        Passing `None` sets the root scope of this scope's numeric mode.

        @raise ValueError if `parent` is this scope or uses the other numeric
            mode.
        """
        if parent is None:
            parent = Scope.root(self._use_mp)
        if parent is self:
            raise ValueError("A scope cannot be its own parent.")
        if parent.use_mp != self._use_mp:
            raise ValueError("Cannot use a %s scope as parent of a %s scope."
                             % (_mode_name(parent.use_mp),
                                _mode_name(self._use_mp)))
        self._parent = parent
        return self

    def with_strict_lookup(self, strict=True):
        r"""Configure whether unknown variables are an error and return this scope.

        By default, get_variable() creates unknown variables in this scope.
        In strict mode it raises UnknownVariableError instead.
        """
        self._strict = bool(strict)
        return self

    def find(self, name):
        r"""Return the variable with the given name or `None`.

        The parent chain is searched if the name is not defined locally.
        """
        scope = self
        while scope is not None:
            result = scope._context.get(name)
            if result is not None:
                return result
            scope = scope._parent
        return None

    def get_variable(self, name):
        r"""Return the variable with the given name, creating it if necessary.

        Unknown names are created in this (not the parent) scope with a value
        of zero, unless this scope uses strict lookup.

        @raise UnknownVariableError if the name is unknown and this scope is
            strict.
        """
        result = self.find(name)
        if result is not None:
            return result
        if self._strict:
            raise UnknownVariableError("Unknown variable: '%s'" % name)
        return self.create(name)

    def create(self, name):
        r"""Return the variable with the given name defined in *this* scope.

        The variable is created (with value zero) if it does not yet exist
        locally. Parent scopes are not consulted, so this may be used to
        shadow a variable of a parent scope.
        """
        result = self._context.get(name)
        if result is not None:
            return result
        with self._lock:
            result = self._context.get(name)
            if result is None:
                result = Variable(name, converter(self._use_mp)(0))
                self._context[name] = result
        return result

    def remove(self, name):
        r"""Remove a variable from this scope and return it (or `None`)."""
        with self._lock:
            return self._context.pop(name, None)

    def get_local_names(self):
        r"""Set of names of the variables defined in this scope."""
        return set(self._context)

    def get_names(self):
        r"""Set of names of all variables visible in this scope."""
        if self._parent is None:
            return self.get_local_names()
        return self._parent.get_names() | self.get_local_names()

    def get_local_variables(self):
        r"""List of variables defined in this scope."""
        return list(self._context.values())

    def get_variables(self):
        r"""List of all variables visible in this scope.

        Variables shadowed by a variable of the same name in a child scope
        are not included.
        """
        return list(self._visible_variables().values())

    def _visible_variables(self):
        if self._parent is None:
            return dict(self._context)
        result = self._parent._visible_variables()
        result.update(self._context)
        return result

    def __contains__(self, name):
        return self.find(name) is not None

    def __repr__(self):
        return "<Scope %s%s>" % (sorted(self.get_local_names()),
                                 " (mp)" if self._use_mp else "")
