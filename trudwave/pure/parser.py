"""Recursive-descent parser for TrudWave: a statement grammar on top of a precedence-climbing expression grammar.

Expression precedence, from loosest to tightest binding:

```
<or>         ::= <and> ("||" <and>)*
<and>        ::= <equality> ("&&" <equality>)*
<equality>   ::= <comparison> ("==" <comparison>)*
<comparison> ::= <term> (("<" | ">" | "<=" | ">=") <term>)*
<term>       ::= <factor> (("+" | "-") <factor>)*
<factor>     ::= <unary> (("*" | "/") <unary>)*
<unary>      ::= ("!" | "-") <unary> | <call>          ; right-recursive, so !!x works
<call>       ::= <primary> ("(" <args>? ")")*          ; chainable: f(1)(2)
<primary>    ::= number | string | bool | identifier | "(" <expr> ")" | "(" <expr> ("," <expr>)+ ")" | "()" | <match>
```

All binary levels are left-associative. Parsing stops at the first error: there is no recovery and no partial AST.

String literals are decoded: `\\n \\t \\r \\" \\' \\\\` become the characters they name, so StringLiteral.value (and what
a string displays as) is the decoded text, not the text between the quotes. raw keeps the literal exactly as written.
"""

import re

from trudwave.lang.error import ParseError
from trudwave.pure.lexical import TokenCursor, TokenKind, tokenize
from trudwave.pure.nodes import (BinaryExpression, BooleanLiteral, Comment, ExpressionStatement, FunctionCall,
                                 FunctionDeclaration, Identifier, MatchCase, MatchExpression, NumericLiteral, Program,
                                 StringLiteral, TupleLiteral, UnaryExpression, VariableDeclaration)

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'"}
ESCAPE = re.compile(r"\\(.)")


class Parser:
    """Builds a Program from a token sequence. One method per grammar production."""

    def __init__(self, tokens):
        self.cursor = tokens if isinstance(tokens, TokenCursor) else TokenCursor(tokens)

    def error(self, msg, expected=None):
        """Returns a ParseError located at the current token (or at end of input)."""
        return ParseError(msg, expected=expected, token=self.cursor.peek(), offset=self.cursor.end_offset)

    def _found(self):
        token = self.cursor.peek()
        if token is None:
            return "end of input"
        return f"{token.kind.name} '{token.text}'"

    # ── Top level ────────────────────────────────────────────────────────────────────────────────────────────────────

    def parse_program(self):
        body = []
        while not self.cursor.at_end():
            body.append(self.parse_statement())
        return Program(body)

    def parse_statement(self):
        cursor = self.cursor
        if cursor.match(TokenKind.COMMENT):
            return Comment(cursor.consume().text)
        if cursor.match(TokenKind.COMPARE_OP, text="<"):
            return self.parse_function_declaration()
        if cursor.match(TokenKind.TYPE_NAME):
            return self.parse_variable_declaration()
        return self.parse_expression_statement()

    def parse_function_declaration(self):
        """'<' types '>' name ('(' params ')')? '=' expr ';'. The last type is the return type."""
        cursor = self.cursor
        cursor.consume()  # <

        types = []
        if not cursor.match(TokenKind.COMPARE_OP, text=">"):
            while True:
                if not cursor.match(TokenKind.TYPE_NAME, TokenKind.IDENTIFIER):
                    raise self.error(f"Expected type name, got {self._found()}", "TYPE_NAME")
                types.append(cursor.consume().text)
                if not cursor.match(TokenKind.COMMA):
                    break
                cursor.consume()

        cursor.expect(TokenKind.COMPARE_OP, f"Expected '>' after type list, got {self._found()}", text=">")
        if not types:
            raise self.error("Function definition must specify return type", "TYPE_NAME")
        *param_types, return_type = types

        name = cursor.expect(TokenKind.IDENTIFIER, f"Expected function name, got {self._found()}").text

        if cursor.match(TokenKind.LPAREN):
            # sugar: f(a, b) = expr;
            cursor.consume()
            params = self.parse_names()
            cursor.expect(TokenKind.RPAREN, f"Expected ')' after parameters, got {self._found()}")
            cursor.expect(TokenKind.ASSIGN, f"Expected '=' after parameters, got {self._found()}")
            body = MatchExpression.wrap(params, self.parse_expression())
        else:
            cursor.expect(TokenKind.ASSIGN, f"Expected '=' after function name, got {self._found()}")
            body = self.parse_expression()
            if not isinstance(body, MatchExpression):
                body = MatchExpression.wrap([], body)
            params = [param.name for param in body.params]

        cursor.expect(TokenKind.SEMICOLON, f"Expected ';' after function declaration, got {self._found()}")
        return FunctionDeclaration(name, param_types, return_type, params, body)

    def parse_variable_declaration(self):
        cursor = self.cursor
        var_type = cursor.consume().text
        name = cursor.expect(TokenKind.IDENTIFIER, f"Expected variable name, got {self._found()}").text
        cursor.expect(TokenKind.ASSIGN, f"Expected '=' after variable name, got {self._found()}")
        initializer = self.parse_expression()
        cursor.expect(TokenKind.SEMICOLON, f"Expected ';' after variable declaration, got {self._found()}")
        return VariableDeclaration(var_type, name, initializer)

    def parse_expression_statement(self):
        expression = self.parse_expression()
        self.cursor.expect(TokenKind.SEMICOLON, f"Expected ';' after expression, got {self._found()}")
        return ExpressionStatement(expression)

    def parse_names(self):
        """Comma-separated identifiers, possibly none, up to (not including) ')'."""
        names = []
        if self.cursor.match(TokenKind.RPAREN):
            return names
        while True:
            names.append(self.cursor.expect(TokenKind.IDENTIFIER, f"Expected param name, got {self._found()}").text)
            if not self.cursor.match(TokenKind.COMMA):
                return names
            self.cursor.consume()

    # ── Expressions ──────────────────────────────────────────────────────────────────────────────────────────────────

    def parse_expression(self):
        return self.parse_logical_or()

    def _parse_binary(self, operand, kind, operators):
        """Left-associative loop shared by every binary precedence level."""
        expr = operand()
        while self.cursor.match(kind) and self.cursor.peek().text in operators:
            operator = self.cursor.consume().text
            expr = BinaryExpression(expr, operator, operand())
        return expr

    def parse_logical_or(self):
        return self._parse_binary(self.parse_logical_and, TokenKind.LOGIC_OP, ("||",))

    def parse_logical_and(self):
        return self._parse_binary(self.parse_equality, TokenKind.LOGIC_OP, ("&&",))

    def parse_equality(self):
        return self._parse_binary(self.parse_comparison, TokenKind.COMPARE_OP, ("==",))

    def parse_comparison(self):
        return self._parse_binary(self.parse_term, TokenKind.COMPARE_OP, ("<", ">", "<=", ">="))

    def parse_term(self):
        return self._parse_binary(self.parse_factor, TokenKind.ARITH_OP, ("+", "-"))

    def parse_factor(self):
        return self._parse_binary(self.parse_unary, TokenKind.ARITH_OP, ("*", "/"))

    def parse_unary(self):
        cursor = self.cursor
        if cursor.match(TokenKind.LOGIC_OP, text="!") or cursor.match(TokenKind.ARITH_OP, text="-"):
            operator = cursor.consume().text
            return UnaryExpression(operator, self.parse_unary())
        return self.parse_call()

    def parse_call(self):
        expr = self.parse_primary()
        while self.cursor.match(TokenKind.LPAREN):
            self.cursor.consume()
            args = self.parse_arguments()
            self.cursor.expect(TokenKind.RPAREN, f"Expected ')' after arguments, got {self._found()}")
            expr = FunctionCall(expr, args)
        return expr

    def parse_arguments(self):
        """Comma-separated expressions, possibly none, up to (not including) ')'."""
        args = []
        if self.cursor.match(TokenKind.RPAREN):
            return args
        while True:
            args.append(self.parse_expression())
            if not self.cursor.match(TokenKind.COMMA):
                return args
            self.cursor.consume()

    def parse_primary(self):
        cursor = self.cursor
        if cursor.match(TokenKind.KEYWORD, text="match"):
            return self.parse_match()

        if cursor.match(TokenKind.NUMBER_LITERAL):
            raw = cursor.consume().text
            return NumericLiteral(float(raw), raw)

        if cursor.match(TokenKind.STRING_LITERAL):
            raw = cursor.consume().text
            return StringLiteral(unescape(raw[1:-1]), raw)

        if cursor.match(TokenKind.BOOLEAN_LITERAL):
            raw = cursor.consume().text
            return BooleanLiteral(raw == "true", raw)

        if cursor.match(TokenKind.LPAREN):
            return self.parse_parenthesized()

        if cursor.match(TokenKind.IDENTIFIER):
            return Identifier(cursor.consume().text)

        raise self.error(f"Unexpected token: {self._found()}", "expression")

    def parse_parenthesized(self):
        """'(' expr ')' is grouping; '()' and '(' expr (',' expr)+ ')' are tuples."""
        cursor = self.cursor
        cursor.consume()  # (
        if cursor.match(TokenKind.RPAREN):
            cursor.consume()
            return TupleLiteral([])

        expr = self.parse_expression()
        if cursor.match(TokenKind.COMMA):
            elements = [expr]
            while cursor.match(TokenKind.COMMA):
                cursor.consume()
                elements.append(self.parse_expression())
            expr = TupleLiteral(elements)

        cursor.expect(TokenKind.RPAREN, f"Expected ')', got {self._found()}")
        return expr

    def parse_match(self):
        """'match' ('(' names ')' | name) '{' clause* '}'. Comments between clauses are skipped."""
        cursor = self.cursor
        cursor.consume()  # match

        if cursor.match(TokenKind.LPAREN):
            cursor.consume()
            names = self.parse_names()
            cursor.expect(TokenKind.RPAREN, f"Expected ')' after match parameters, got {self._found()}")
        else:
            names = [cursor.expect(TokenKind.IDENTIFIER, f"Expected param name, got {self._found()}").text]

        cursor.expect(TokenKind.LBRACE, f"Expected '{{' to open match body, got {self._found()}")

        cases = []
        while not cursor.match(TokenKind.RBRACE):
            if cursor.match(TokenKind.COMMENT):
                cursor.consume()
                continue
            cases.append(self.parse_match_case())

        cursor.consume()  # }
        return MatchExpression([Identifier(name) for name in names], cases)

    def parse_match_case(self):
        """'when' expr '->' expr ';' | 'when' '_' '->' expr ';' | 'otherwise' '->' expr ';'."""
        cursor = self.cursor
        if cursor.match(TokenKind.KEYWORD, text="when"):
            cursor.consume()
            if cursor.match(TokenKind.IDENTIFIER, text="_"):
                cursor.consume()
                condition = None
            else:
                condition = self.parse_expression()
        elif cursor.match(TokenKind.KEYWORD, text="otherwise"):
            cursor.consume()
            condition = None
        else:
            raise self.error(f"Expected 'when' or 'otherwise', got {self._found()}", "KEYWORD")

        cursor.expect(TokenKind.ARROW, f"Expected '->' in match clause, got {self._found()}")
        body = self.parse_expression()
        cursor.expect(TokenKind.SEMICOLON, f"Expected ';' after match clause, got {self._found()}")
        return MatchCase(condition, body)


def unescape(text):
    """Resolves backslash escapes in the body of a string literal. Unknown escapes are kept verbatim."""
    return ESCAPE.sub(lambda match: ESCAPES.get(match.group(1), match.group(0)), text)


def parse(tokens):
    """Parses a token sequence (or source text) into a Program. Raises ParseError, or LexError from a lazy lexer."""
    if isinstance(tokens, str):
        tokens = tokenize(tokens)
    return Parser(tokens).parse_program()
