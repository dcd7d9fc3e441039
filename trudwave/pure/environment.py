"""Two-tier variable store: one global scope shared by the whole program run, plus at most one flat local scope per
function call. Locals are never nested and never outlive their call, which is what rules out closures.
"""

from trudwave.lang.error import ErrorKind, EvalError


class Environment:
    """Scope chain of depth at most two. Environments created by extend share the global dict by reference."""

    def __init__(self, globals_=None, locals_=None):
        self.globals = globals_ if globals_ is not None else {}
        self.locals = locals_

    def extend(self, locals_):
        """Returns the environment of a call: the same globals, and locals_ as the only local scope. Any local scope
        of self is not carried over.
        """
        return Environment(self.globals, dict(locals_))

    def define(self, name, value):
        """Binds name in global scope. Redefinition silently overwrites."""
        self.globals[name] = value

    def lookup(self, name):
        if self.locals is not None and name in self.locals:
            return self.locals[name]
        if name in self.globals:
            return self.globals[name]
        raise EvalError(ErrorKind.UNRESOLVED_NAME, 'Variable or function "{}" not found.', name)

    def __contains__(self, name):
        return (self.locals is not None and name in self.locals) or name in self.globals
