"""Lexical analysis for TrudWave: turns source text into a lazy sequence of classified tokens, plus the one-token
lookahead cursor the parser reads them through.

Token rules are tried at each position in a fixed priority order:

```
COMMENT          ::= "//" <char>*                 ; up to end of line, kept in the stream
STRING_LITERAL   ::= '"' (<char> | "\" <char>)* '"' ; may not span lines
KEYWORD          ::= "match" | "when" | "otherwise"
TYPE_NAME        ::= "number" | "string" | "bool"
BOOLEAN_LITERAL  ::= "true" | "false"
NUMBER_LITERAL   ::= <digit>+ ("." <digit>+)?
IDENTIFIER       ::= (<alpha> | "_") (<alnum> | "_")*
ARROW            ::= "->"
COMPARE_OP       ::= "<=" | ">=" | "==" | "<" | ">"
LOGIC_OP         ::= "&&" | "||" | "!"
ARITH_OP         ::= "+" | "-" | "*" | "/"
ASSIGN           ::= "="
... brackets, ",", ";"
WHITESPACE       ::= <space>+                     ; matched, then dropped
```

Keywords, type names and boolean literals come before IDENTIFIER (which would otherwise swallow them) and are word
bounded, so `matcha` and `number1` are identifiers. Inside a category the longer operator is tried first, so `<=` is
never split into `<` and `=`.
"""

import re
from dataclasses import dataclass
from enum import Enum

from trudwave.lang.error import LexError, ParseError


class TokenKind(Enum):
    """Every token class the lexer can produce, in matching priority order."""
    COMMENT = r"//[^\n]*"
    STRING_LITERAL = r'"(?:[^"\\\n]|\\.)*"'
    KEYWORD = r"\b(?:match|when|otherwise)\b"
    TYPE_NAME = r"\b(?:number|string|bool)\b"
    BOOLEAN_LITERAL = r"\b(?:true|false)\b"
    NUMBER_LITERAL = r"\b\d+(?:\.\d+)?\b"
    IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
    ARROW = r"->"
    COMPARE_OP = r"(?:<=|>=|==|<|>)"
    LOGIC_OP = r"(?:&&|\|\||!)"
    ARITH_OP = r"[+\-*/]"
    ASSIGN = r"="
    LPAREN = r"\("
    RPAREN = r"\)"
    LBRACKET = r"\["
    RBRACKET = r"\]"
    LBRACE = r"\{"
    RBRACE = r"\}"
    COMMA = r","
    SEMICOLON = r";"
    WHITESPACE = r"\s+"

    def __repr__(self):
        return self.name


IGNORED = {TokenKind.WHITESPACE}

RULES = re.compile("|".join(f"(?P<{kind.name}>{kind.value})" for kind in TokenKind))


@dataclass(frozen=True)
class Token:
    """A classified slice of source text. offset is the index of its first character."""
    kind: TokenKind
    text: str
    offset: int

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r}, {self.offset})"


class Lexer:
    """Restartable token sequence over source: every iteration re-lexes from the start, lazily, one token at a time.
    Whitespace is dropped, comments are kept.
    """

    def __init__(self, source):
        self.source = source

    def __iter__(self):
        pos = 0
        while pos < len(self.source):
            match = RULES.match(self.source, pos)
            if match is None:
                raise LexError(self.source[pos], pos)

            kind = TokenKind[match.lastgroup]
            pos = match.end()

            if kind not in IGNORED:
                yield Token(kind, match.group(), match.start())


def tokenize(source):
    """Returns an iterator over the non-whitespace tokens of source. Raises LexError on the first unmatched
    character, only once the token stream reaches it.
    """
    return iter(Lexer(source))


class TokenCursor:
    """One-token lookahead over a token iterator. This is the only place the parser observes lexical structure."""

    def __init__(self, tokens):
        self._tokens = iter(tokens)
        self._current = None
        self.end_offset = 0  # offset just past the last consumed token, used for end-of-input errors

        self._advance()

    def _advance(self):
        self._current = next(self._tokens, None)

    def peek(self):
        """Returns the next unconsumed token, or None at end of input."""
        return self._current

    def at_end(self):
        return self._current is None

    def consume(self):
        """Returns the current token and moves past it."""
        token = self._current
        if token is None:
            raise ParseError("Unexpected end of input", offset=self.end_offset)

        self.end_offset = token.offset + len(token.text)
        self._advance()
        return token

    def match(self, *kinds, text=None):
        """Whether the next token is one of kinds (and, if given, spelled text). Does not consume."""
        token = self._current
        if token is None or token.kind not in kinds:
            return False
        return text is None or token.text == text

    def expect(self, kind, message=None, text=None):
        """Consumes and returns the next token, which must be of kind (and spelled text, if given)."""
        if not self.match(kind, text=text):
            token = self._current
            actual = token.kind.name if token is not None else "end of input"
            if message is None:
                message = f"Expected token type {kind.name}, got {actual}"
            raise ParseError(message, expected=kind.name, token=token, offset=self.end_offset)
        return self.consume()
