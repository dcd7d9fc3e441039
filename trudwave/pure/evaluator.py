"""Tree-walking evaluator for TrudWave. Walks the AST on the host call stack: each TrudWave call is a handful of nested
Python calls, so deep recursion ends in Python's RecursionError, which is left to propagate (it is fatal to the run, not
an EvalError).

Operators dispatch on the pair of operand kinds:

```
number, number  ->  + - * /  < > <= >= ==
bool,   bool    ->  && || ==
string, string  ->  + ==
```

Both operands are always evaluated, left first: `&&` and `||` do not short-circuit. Any other combination is an
EvalError.
"""

import math
import operator

from trudwave.lang.error import ErrorKind, EvalError
from trudwave.pure.environment import Environment
from trudwave.pure.nodes import (BinaryExpression, BooleanLiteral, Comment, ExpressionStatement, FunctionCall,
                                 FunctionDeclaration, Identifier, MatchExpression, NumericLiteral, StringLiteral,
                                 TupleLiteral, UnaryExpression, VariableDeclaration)
from trudwave.pure.values import NULL, Bool, Function, Number, String, Tuple, boolean


def divide(left, right):
    """IEEE-754 division: x / 0 is a signed infinity and 0 / 0 is NaN."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1, right)
    return left / right


NUMBER_OPS = {
    "+": (Number, operator.add),
    "-": (Number, operator.sub),
    "*": (Number, operator.mul),
    "/": (Number, divide),
    "<": (boolean, operator.lt),
    ">": (boolean, operator.gt),
    "<=": (boolean, operator.le),
    ">=": (boolean, operator.ge),
    "==": (boolean, operator.eq),
}

BOOL_OPS = {
    "&&": (boolean, lambda left, right: left and right),
    "||": (boolean, lambda left, right: left or right),
    "==": (boolean, operator.eq),
}

STRING_OPS = {
    "+": (String, operator.add),
    "==": (boolean, operator.eq),
}

BINARY_OPS = {
    (Number, Number): NUMBER_OPS,
    (Bool, Bool): BOOL_OPS,
    (String, String): STRING_OPS,
}


class Evaluator:
    """Evaluates statements and expressions against one global Environment. tracer, if given, is called with
    (function, args, depth) on every function call.
    """

    def __init__(self, environment=None, tracer=None):
        self.environment = environment if environment is not None else Environment()
        self.tracer = tracer
        self.depth = 0

    def run(self, program):
        """Executes every statement in order. Returns the value of the last one, or Null for an empty program."""
        result = NULL
        for statement in program.body:
            result = self.execute(statement)
        return result

    def execute(self, statement):
        """Executes one top-level statement. A declaration only binds its name once its value has been computed."""
        if isinstance(statement, VariableDeclaration):
            value = self.evaluate(statement.initializer, self.environment)
            self.environment.define(statement.name, value)
            return value

        elif isinstance(statement, FunctionDeclaration):
            function = Function(statement.name, tuple(statement.params), statement.body)
            self.environment.define(statement.name, function)
            return function

        elif isinstance(statement, ExpressionStatement):
            return self.evaluate(statement.expression, self.environment)

        elif isinstance(statement, Comment):
            return NULL

        raise TypeError(f"unknown statement type: {type(statement).__name__}")

    def evaluate(self, expr, env):
        if isinstance(expr, NumericLiteral):
            return Number(expr.value)

        elif isinstance(expr, StringLiteral):
            return String(expr.value)

        elif isinstance(expr, BooleanLiteral):
            return boolean(expr.value)

        elif isinstance(expr, TupleLiteral):
            return Tuple(tuple(self.evaluate(element, env) for element in expr.elements))

        elif isinstance(expr, Identifier):
            return env.lookup(expr.name)

        elif isinstance(expr, BinaryExpression):
            return self.evaluate_binary(expr, env)

        elif isinstance(expr, UnaryExpression):
            return self.evaluate_unary(expr, env)

        elif isinstance(expr, FunctionCall):
            return self.evaluate_call(expr, env)

        elif isinstance(expr, MatchExpression):
            # a match used as a value is an anonymous function; none of its clauses run here
            return Function("<anonymous>", tuple(param.name for param in expr.params), expr)

        raise TypeError(f"unknown expression type: {type(expr).__name__}")

    def evaluate_binary(self, expr, env):
        left = self.evaluate(expr.left, env)
        right = self.evaluate(expr.right, env)

        constructor, op = BINARY_OPS.get((type(left), type(right)), {}).get(expr.operator, (None, None))
        if op is None:
            msg = 'Binary operator "{}" not defined for types {} and {}'
            raise EvalError(ErrorKind.UNDEFINED_OPERATOR, msg, (expr.operator, left.kind, right.kind))

        return constructor(op(left.value, right.value))

    def evaluate_unary(self, expr, env):
        operand = self.evaluate(expr.right, env)

        if expr.operator == "!" and isinstance(operand, Bool):
            return boolean(not operand.value)
        if expr.operator == "-" and isinstance(operand, Number):
            return Number(-operand.value)

        msg = 'Unary operator "{}" not defined for type {}'
        raise EvalError(ErrorKind.UNDEFINED_OPERATOR, msg, (expr.operator, operand.kind))

    def evaluate_call(self, expr, env):
        function = self.evaluate(expr.callee, env)
        if not isinstance(function, Function):
            raise EvalError(ErrorKind.NOT_CALLABLE, "Cannot call non-function type {}", function.kind)

        args = [self.evaluate(arg, env) for arg in expr.args]
        if len(args) != len(function.params):
            msg = 'Function "{}" expects {} arguments, got {}'
            raise EvalError(ErrorKind.ARITY_MISMATCH, msg, (function.name, len(function.params), len(args)))

        if self.tracer is not None:
            self.tracer(function, args, self.depth)

        # fresh flat scope on top of the globals only: the caller's locals are not visible
        call_env = env.extend(zip(function.params, args))

        self.depth += 1
        try:
            return self.select(function.body, call_env)
        finally:
            self.depth -= 1

    def select(self, match, env):
        """Evaluates the body of the first clause of match whose condition holds, trying clauses in order."""
        for case in match.cases:
            if case.is_fallback:
                return self.evaluate(case.body, env)

            condition = self.evaluate(case.condition, env)
            if not isinstance(condition, Bool):
                raise EvalError(ErrorKind.NON_BOOLEAN_CONDITION, "Match condition must evaluate to bool, got {}",
                                condition.kind)

            if condition.value:
                return self.evaluate(case.body, env)

        raise EvalError(ErrorKind.NO_MATCH, "No match case matched.")


def evaluate(program, tracer=None):
    """Evaluates program against a fresh global Environment and returns the value of its last statement."""
    return Evaluator(Environment(), tracer).run(program)
