import unittest

from trudwave.lang.error import LexError, ParseError
from trudwave.pure.lexical import Lexer, Token, TokenCursor, TokenKind, tokenize


def pairs(source):
    return [(token.kind.name, token.text) for token in tokenize(source)]


class TokenizeTestCase(unittest.TestCase):

    def test_categories(self):
        cases = {
            "123 45.67": [("NUMBER_LITERAL", "123"), ("NUMBER_LITERAL", "45.67")],
            '"hello" "world"': [("STRING_LITERAL", '"hello"'), ("STRING_LITERAL", '"world"')],
            '"say \\"hi\\""': [("STRING_LITERAL", '"say \\"hi\\""')],
            "true false": [("BOOLEAN_LITERAL", "true"), ("BOOLEAN_LITERAL", "false")],
            "number string bool": [("TYPE_NAME", "number"), ("TYPE_NAME", "string"), ("TYPE_NAME", "bool")],
            "match when otherwise": [("KEYWORD", "match"), ("KEYWORD", "when"), ("KEYWORD", "otherwise")],
            "abc _name var123": [("IDENTIFIER", "abc"), ("IDENTIFIER", "_name"), ("IDENTIFIER", "var123")],
            "matcha number1 trueish": [("IDENTIFIER", "matcha"), ("IDENTIFIER", "number1"), ("IDENTIFIER", "trueish")],
            "+ - * /": [("ARITH_OP", "+"), ("ARITH_OP", "-"), ("ARITH_OP", "*"), ("ARITH_OP", "/")],
            "< > <= >= ==": [("COMPARE_OP", "<"), ("COMPARE_OP", ">"), ("COMPARE_OP", "<="), ("COMPARE_OP", ">="),
                             ("COMPARE_OP", "==")],
            "&& || !": [("LOGIC_OP", "&&"), ("LOGIC_OP", "||"), ("LOGIC_OP", "!")],
            "= ->": [("ASSIGN", "="), ("ARROW", "->")],
            "( ) [ ] { } , ;": [("LPAREN", "("), ("RPAREN", ")"), ("LBRACKET", "["), ("RBRACKET", "]"),
                                ("LBRACE", "{"), ("RBRACE", "}"), ("COMMA", ","), ("SEMICOLON", ";")],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, pairs(case), case)

    def test_no_split_operators(self):
        self.assertEqual([("IDENTIFIER", "a"), ("COMPARE_OP", "<="), ("IDENTIFIER", "b")], pairs("a<=b"))
        self.assertEqual([("IDENTIFIER", "a"), ("COMPARE_OP", "=="), ("IDENTIFIER", "b")], pairs("a==b"))
        self.assertEqual([("IDENTIFIER", "n"), ("ARROW", "->"), ("NUMBER_LITERAL", "1")], pairs("n->1"))

    def test_whitespace_and_comments(self):
        self.assertEqual([], pairs("    \n  \t  "))
        self.assertEqual([("COMMENT", "// this is a comment")], pairs("// this is a comment"))
        self.assertEqual([("NUMBER_LITERAL", "1"), ("COMMENT", "// comment "), ("NUMBER_LITERAL", "2")],
                         pairs("1 // comment \n 2"))

    def test_statements(self):
        self.assertEqual([("TYPE_NAME", "number"), ("IDENTIFIER", "a"), ("ASSIGN", "="), ("NUMBER_LITERAL", "1.5"),
                          ("SEMICOLON", ";")], pairs("number a = 1.5;"))
        self.assertEqual([("KEYWORD", "match"), ("IDENTIFIER", "x"), ("LBRACE", "{"), ("KEYWORD", "when"),
                          ("NUMBER_LITERAL", "1"), ("ARROW", "->"), ("BOOLEAN_LITERAL", "true"), ("RBRACE", "}")],
                         pairs("match x { \nwhen 1 -> true \n}"))

    def test_offsets(self):
        tokens = list(tokenize("number  x = 1;"))
        self.assertEqual(Token(TokenKind.TYPE_NAME, "number", 0), tokens[0])
        self.assertEqual([0, 8, 10, 12, 13], [token.offset for token in tokens])

    def test_unexpected_character(self):
        should_raise = {"@": 0, "x = 1 # 2": 6, '"unterminated': 0, "1.": 1}
        for case, offset in should_raise.items():
            with self.assertRaises(LexError, msg=case) as context:
                list(tokenize(case))
            self.assertEqual(offset, context.exception.offset, case)

    def test_lazy(self):
        tokens = tokenize("a b @")
        self.assertEqual("a", next(tokens).text)
        self.assertEqual("b", next(tokens).text)
        self.assertRaises(LexError, next, tokens)

    def test_determinism(self):
        source = '<number, number> f(a) = a + 1; // done\nstring s = "x";'
        lexer = Lexer(source)
        self.assertEqual(list(lexer), list(lexer))
        self.assertEqual(list(tokenize(source)), list(tokenize(source)))

    def test_whitespace_transparency(self):
        compact = "<number,number>f=match n{when n<1->0;otherwise->f(n-1);};"
        spaced = "< number ,\tnumber >\n f  =  match n {\n  when n < 1 -> 0 ;\n\n  otherwise -> f ( n - 1 ) ;\n} ;"
        self.assertEqual(pairs(compact), pairs(spaced))


class TokenCursorTestCase(unittest.TestCase):

    def test_peek_consume(self):
        cursor = TokenCursor(tokenize("a 1"))
        self.assertEqual("a", cursor.peek().text)
        self.assertEqual("a", cursor.peek().text)
        self.assertEqual("a", cursor.consume().text)
        self.assertEqual("1", cursor.consume().text)
        self.assertIsNone(cursor.peek())
        self.assertTrue(cursor.at_end())
        self.assertRaises(ParseError, cursor.consume)

    def test_match(self):
        cursor = TokenCursor(tokenize("< x"))
        self.assertTrue(cursor.match(TokenKind.COMPARE_OP))
        self.assertTrue(cursor.match(TokenKind.IDENTIFIER, TokenKind.COMPARE_OP))
        self.assertTrue(cursor.match(TokenKind.COMPARE_OP, text="<"))
        self.assertFalse(cursor.match(TokenKind.COMPARE_OP, text=">"))
        self.assertFalse(cursor.match(TokenKind.IDENTIFIER))
        self.assertEqual("<", cursor.peek().text)  # match never consumes

    def test_expect(self):
        cursor = TokenCursor(tokenize("x ;"))
        self.assertEqual("x", cursor.expect(TokenKind.IDENTIFIER).text)

        with self.assertRaises(ParseError) as context:
            cursor.expect(TokenKind.ASSIGN)
        self.assertEqual("Expected token type ASSIGN, got SEMICOLON", str(context.exception))
        self.assertEqual("ASSIGN", context.exception.expected)
        self.assertEqual("SEMICOLON", context.exception.actual)
        self.assertEqual(2, context.exception.offset)

        cursor.consume()
        with self.assertRaises(ParseError) as context:
            cursor.expect(TokenKind.SEMICOLON)
        self.assertEqual("Expected token type SEMICOLON, got end of input", str(context.exception))
        self.assertEqual(3, context.exception.offset)


if __name__ == '__main__':
    unittest.main()
