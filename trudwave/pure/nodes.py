"""TrudWave abstract syntax tree. Nodes are plain data: the parser is their only producer and the evaluator their only
consumer.

```
<program>     ::= <statement>*
<statement>   ::= <comment>
                | "<" <type> ("," <type>)* ">" <name> ("(" <params> ")")? "=" <expr> ";"   ; FunctionDeclaration
                | <type> <name> "=" <expr> ";"                                             ; VariableDeclaration
                | <expr> ";"                                                               ; ExpressionStatement
<expr>        ::= literal | tuple | identifier | unary | binary | call | <match>
<match>       ::= "match" ("(" <params> ")" | <name>) "{" <clause>* "}"
<clause>      ::= ("when" <expr> | "when" "_" | "otherwise") "->" <expr> ";"
```
"""

from dataclasses import dataclass, field, fields


class Node:
    """Superclass of every AST node."""

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Node>(
            <field>=<Node>(...),
            <field>=[
                <Node>(...),
            ],
            <field>='<leaf>',
        )
        """
        pad = "    " * indents
        result = f"{type(self).__name__}("
        entries = [(f.name, getattr(self, f.name)) for f in fields(self)]

        if all(not isinstance(value, (Node, list)) for __, value in entries):
            return result + ", ".join(f"{name}={value!r}" for name, value in entries) + ")"

        for name, value in entries:
            result += f"\n{pad}    {name}={Node._display_value(value, indents + 1)},"
        return result + f"\n{pad})"

    @staticmethod
    def _display_value(value, indents):
        if isinstance(value, Node):
            return value.display(indents)
        if isinstance(value, list):
            if not value:
                return "[]"
            pad = "    " * indents
            items = "".join(f"\n{pad}    {Node._display_value(item, indents + 1)}," for item in value)
            return f"[{items}\n{pad}]"
        return repr(value)

    def __str__(self):
        return self.display()


# ======================================================================================================================
# Expressions
# ======================================================================================================================


class Expr(Node):
    """Superclass of every expression node."""


@dataclass
class NumericLiteral(Expr):
    value: float
    raw: str


@dataclass
class StringLiteral(Expr):
    value: str
    raw: str


@dataclass
class BooleanLiteral(Expr):
    value: bool
    raw: str


@dataclass
class TupleLiteral(Expr):
    elements: list


@dataclass
class Identifier(Expr):
    name: str


@dataclass
class BinaryExpression(Expr):
    left: Expr
    operator: str
    right: Expr


@dataclass
class UnaryExpression(Expr):
    operator: str
    right: Expr


@dataclass
class FunctionCall(Expr):
    callee: Expr
    args: list


@dataclass
class MatchCase(Node):
    """One clause of a match. condition is None for the catch-all ('otherwise' or 'when _')."""
    condition: Expr
    body: Expr

    @property
    def is_fallback(self):
        return self.condition is None


@dataclass
class MatchExpression(Expr):
    """Ordered guarded clauses over the Identifiers in params. Clause order is significant: the first clause whose
    condition holds wins.
    """
    params: list
    cases: list = field(default_factory=list)

    @classmethod
    def wrap(cls, params, body):
        """Single catch-all clause around body. Used to desugar 'f(a, b) = expr;' declarations."""
        return cls([Identifier(param) for param in params], [MatchCase(None, body)])


# ======================================================================================================================
# Statements
# ======================================================================================================================


class Statement(Node):
    """Superclass of every statement node."""


@dataclass
class Comment(Statement):
    value: str


@dataclass
class VariableDeclaration(Statement):
    varType: str
    name: str
    initializer: Expr


@dataclass
class FunctionDeclaration(Statement):
    """body is always a MatchExpression once parsed."""
    name: str
    paramTypes: list
    returnType: str
    params: list
    body: MatchExpression

    @property
    def arity_mismatch(self):
        """Whether the declared parameter types disagree in number with the parameter names. Never checked by the
        parser: such declarations are accepted as-is.
        """
        return len(self.paramTypes) != len(self.params)


@dataclass
class ExpressionStatement(Statement):
    expression: Expr


@dataclass
class Program(Node):
    body: list = field(default_factory=list)
