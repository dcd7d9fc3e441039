import contextlib
import io
import re
import unittest

from trudwave.lang.error import ErrorHandler, ErrorKind, EvalError, LexError, ParseError, TrudWaveError
from trudwave.pure.lexical import Token, TokenKind

SOURCE = "number x = 1;\nnumber y = ;"


def plain(text):
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def capture(func, *args, **kwargs):
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        func(*args, **kwargs)
    return plain(out.getvalue())


class TrudWaveErrorTestCase(unittest.TestCase):

    def test_message(self):
        error = TrudWaveError("'{}' could not be opened", "a.tw")
        self.assertEqual("'a.tw' could not be opened", str(error))
        self.assertEqual(["a.tw"], error.exprs)
        self.assertEqual("'a.tw' could not be opened", plain(error.colored_msg()))

        error = TrudWaveError('Function "{}" expects {} arguments, got {}', ("add", 2, 1), length=0)
        self.assertEqual('Function "add" expects 2 arguments, got 1', error.msg)
        self.assertEqual(1, error.length)

    def test_subclasses(self):
        error = LexError("@", 4)
        self.assertEqual("unexpected character '@'", str(error))
        self.assertEqual(("@", 4), (error.char, error.offset))

        error = ParseError("Expected token type ASSIGN, got SEMICOLON", "ASSIGN", Token(TokenKind.SEMICOLON, ";", 7))
        self.assertEqual((7, 1), (error.offset, error.length))
        self.assertEqual("SEMICOLON", error.actual)

        error = ParseError("Unexpected end of input", offset=12)
        self.assertEqual(12, error.offset)
        self.assertEqual("end of input", error.actual)

        error = EvalError(ErrorKind.NO_MATCH, "No match case matched.")
        self.assertEqual(ErrorKind.NO_MATCH, error.kind)
        self.assertFalse(error.diagnosis)
        self.assertIsNone(error.offset)


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.handler = ErrorHandler(fatal=False)
        self.handler.register_file("prog.tw")
        self.handler.register_source(SOURCE)

    def test_locate(self):
        cases = {0: ("number x = 1;", 1, 1), 7: ("number x = 1;", 1, 8), 25: ("number y = ;", 2, 12),
                 26: ("number y = ;", 2, 13), 99: ("number y = ;", 2, 13)}
        for offset, expected in cases.items():
            self.assertEqual(expected, self.handler.locate(offset), offset)

    def test_diagnose(self):
        self.assertEqual("  number y = ;\n" + " " * 13 + "^", plain(ErrorHandler.diagnose("number y = ;", 12, 1)))
        self.assertEqual("  abc def\n" + " " * 6 + "^~~", plain(ErrorHandler.diagnose("abc def", 5, 3)))
        self.assertEqual("  abc\n" + " " * 5 + "^", plain(ErrorHandler.diagnose("abc", 4, 1)))

    def test_throw(self):
        out = capture(self.handler.throw, ParseError("Unexpected token: SEMICOLON ';'", offset=25))
        lines = out.splitlines()
        self.assertEqual("prog.tw:2:12: error: Unexpected token: SEMICOLON ';'", lines[0])
        self.assertEqual("  number y = ;", lines[1])
        self.assertEqual("", self.handler.source)

    def test_throw_without_diagnosis(self):
        out = capture(self.handler.throw, EvalError(ErrorKind.UNRESOLVED_NAME, 'Variable or function "{}" not found.',
                                                    "x"))
        self.assertEqual('prog.tw: error: Variable or function "x" not found.\n', out)

    def test_fatal(self):
        with self.assertRaises(SystemExit) as context:
            capture(self.handler.throw, TrudWaveError("boom"), fatal=True)
        self.assertEqual(1, context.exception.code)

        handler = ErrorHandler()
        self.assertRaises(SystemExit, capture, handler.throw, TrudWaveError("boom"))

    def test_warn(self):
        out = capture(self.handler.warn, "'{}' does not have a {} extension", ("prog.txt", ".tw"))
        self.assertEqual("prog.tw: warning: 'prog.txt' does not have a .tw extension\n", out)
        self.assertEqual(SOURCE, self.handler.source)

    def test_step(self):
        self.assertEqual("    call f(1)\n", capture(self.handler.register_step, "call", "f(1)", 2))

    def test_context_manager(self):
        def raise_in_handler(error):
            with self.handler:
                raise error

        out = capture(raise_in_handler, EvalError(ErrorKind.NO_MATCH, "No match case matched."))
        self.assertIn("error: No match case matched.", out)

        out = capture(raise_in_handler, KeyboardInterrupt())
        self.assertIn("keyboard interrupt", out)

        self.assertRaises(SystemExit, capture, raise_in_handler, SystemExit(0))

        with self.assertRaises(SystemExit):
            capture(raise_in_handler, RecursionError())

        with self.assertRaises(ValueError):
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                raise_in_handler(ValueError("boom"))
        self.assertIn("[internal]", plain(out.getvalue()))
        self.assertIn("unknown error", plain(out.getvalue()))


if __name__ == '__main__':
    unittest.main()
