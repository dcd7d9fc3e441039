"""Error handling for the TrudWave language. Only TrudWaveErrors should be encountered during a run: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Three kinds of error halt the stage that raised them:
    - LexError: no token rule matches at some position of the source
    - ParseError: an expected token/construct was not found
    - EvalError: evaluation failed (unknown name, bad call, bad operands, exhausted match)

None of them is recovered from internally. Surfacing is the job of ErrorHandler, which prints a colored message and,
when the offending source offset is known, the offending line with a caret underneath it.
"""

import sys
from enum import Enum

from termcolor import colored


class TrudWaveError(Exception):
    """Templates an error/warning message so that it can be used to throw a TrudWave error/warning. Each '{}' in msg is
    filled with the corresponding entry of exprs (bolded when displayed).
    """

    def __init__(self, msg, exprs=None, offset=None, length=1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = list(exprs)
        self.msg = msg.format(*self.exprs)

        self.offset = offset  # position in source of the offending text, if known
        self.length = max(length, 1)
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    def colored_msg(self):
        """Same as self.msg but with expr snippets bolded."""
        return self.template.format(*(colored(str(expr), attrs=["bold"]) for expr in self.exprs))


class LexError(TrudWaveError):
    """An input position matches no token rule."""

    def __init__(self, char, offset):
        super().__init__("unexpected character '{}'", char, offset=offset)
        self.char = char


class ParseError(TrudWaveError):
    """An expected token or construct was not found. token is None if the end of input was reached."""

    def __init__(self, msg, expected=None, token=None, offset=None):
        if token is not None:
            offset = token.offset
        super().__init__(msg, offset=offset, length=len(token.text) if token is not None else 1)

        self.expected = expected
        self.token = token

    @property
    def actual(self):
        """Kind name of the token found instead of the expected one."""
        return self.token.kind.name if self.token is not None else "end of input"


class ErrorKind(Enum):
    """Machine-distinguishable reason for an EvalError. Does not affect the message."""
    UNRESOLVED_NAME = "unresolved name"
    NOT_CALLABLE = "not callable"
    ARITY_MISMATCH = "arity mismatch"
    UNDEFINED_OPERATOR = "undefined operator"
    NON_BOOLEAN_CONDITION = "non-boolean condition"
    NO_MATCH = "no match"


class EvalError(TrudWaveError):
    """Raised while evaluating an AST. AST nodes carry no source positions, so there is never a caret diagnosis."""

    def __init__(self, kind, msg, exprs=None):
        super().__init__(msg, exprs, diagnosis=False)
        self.kind = kind


class ErrorHandler:
    """Context manager that will report TrudWave errors/warnings and decide whether they are fatal."""
    ERROR = "red"
    WARNING = "magenta"
    STEP = "cyan"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.path = None
        self.source = ""

    def register_file(self, path):
        """Registers path as the origin of subsequent errors."""
        self.path = path

    def register_source(self, source):
        """Registers the source text errors will be located in. Should be called prior to Session add."""
        self.source = source

    def remove_source(self):
        """Forgets the registered source. Should be called after a successful Session add."""
        self.source = ""

    def locate(self, offset):
        """Returns (line, line_num, col) of offset in the registered source. line_num and col are 1-indexed."""
        offset = min(offset, len(self.source))
        start = self.source.rfind("\n", 0, offset) + 1
        end = self.source.find("\n", offset)
        if end == -1:
            end = len(self.source)

        line_num = self.source.count("\n", 0, offset) + 1
        return self.source[start:end], line_num, offset - start + 1

    @staticmethod
    def diagnose(line, col, length, warning=False):
        """Returns line with the offending part highlighted and a caret underneath it."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start = col - 1
        end = max(min(start + length, len(line)), start + 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _header(self, error):
        """Returns 'path:line:col: ' (or the available part of it) for error, plus the located line if any."""
        location = self.path or ""
        line = None
        if error.offset is not None and self.source:
            line, line_num, col = self.locate(error.offset)
            location += f":{line_num}:{col}"
            line = (line, col)
        return (colored(location + ": ", attrs=["bold"]) if location else ""), line

    def warn(self, *args, **kwargs):
        """Generates and prints a warning message based on args."""
        error = TrudWaveError(*args, **kwargs)
        header, line = self._header(error)

        print(header + colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.colored_msg())

        if not error.internal and line and error.diagnosis:
            print(ErrorHandler.diagnose(*line, error.length, warning=True))

    def register_step(self, symbol, text, depth=0):
        """Prints one evaluation step. Used for call tracing."""
        print("  " * depth + colored(f"{symbol} ", ErrorHandler.STEP, attrs=["bold"]) + text)

    def throw(self, error, fatal=None):
        """Prints error, which must be a TrudWaveError, then exits if fatal (defaults to self.fatal)."""
        header, line = self._header(error)

        error_msg = header
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.colored_msg()
        print(error_msg)

        if not error.internal and line and error.diagnosis:
            print(ErrorHandler.diagnose(*line, error.length))

        if self.fatal if fatal is None else fatal:
            sys.exit(1)
        self.source = ""  # if error occurred, reset source (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(TrudWaveError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(TrudWaveError("maximum recursion depth exceeded", diagnosis=False), fatal=True)
        elif exc_type is not None and issubclass(exc_type, TrudWaveError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(TrudWaveError("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
