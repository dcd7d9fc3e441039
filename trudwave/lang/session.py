"""Session control for the TrudWave language. Drives the lexer/parser/evaluator pipeline, either over a whole .tw file or
over statements typed one at a time in command-line mode.
"""

import sys

from trudwave.lang.error import LexError, TrudWaveError
from trudwave.pure.environment import Environment
from trudwave.pure.evaluator import Evaluator, evaluate
from trudwave.pure.lexical import TokenKind, tokenize
from trudwave.pure.nodes import FunctionDeclaration
from trudwave.pure.parser import parse
from trudwave.pure.values import NULL


def run(source):
    """Lexes, parses and evaluates source. Returns the value of its last statement."""
    return evaluate(parse(tokenize(source)))


class Session:
    """Governs a TrudWave session. The global environment lives as long as the session, so in command-line mode every
    input sees the declarations of the previous ones.
    """
    SH_FILE = "<in>"  # command-line interpreter filename
    EXTENSION = ".tw"

    def __init__(self, error_handler, path, cmd_line, trace=False, recursion_limit=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        tracer = self._trace if trace else None
        self.evaluator = Evaluator(Environment(), tracer)

        self.to_exec = []  # parsed statements not run yet
        self.results = []  # values of executed statements, most recent last

        if recursion_limit is not None:
            sys.setrecursionlimit(recursion_limit)

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            if not path.endswith(Session.EXTENSION):
                self.error_handler.warn("'{}' does not have a {} extension", (path, Session.EXTENSION))
            self.add(Session.read(path))

        elif not cmd_line:
            raise TrudWaveError("'<in>' is a reserved filename")

    @staticmethod
    def read(path):
        """Returns the UTF-8 contents of path."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                source = file.read()
        except (OSError, UnicodeDecodeError):
            raise TrudWaveError("'{}' could not be opened", path, diagnosis=False)
        return source

    @staticmethod
    def preprocess_line(line, add_to_prev):
        """Preprocesses a line from the command-line, appending it to add_to_prev (the pending, unfinished input, or
        ""). Returns the updated input and whether it is still unfinished, i.e. a continuation line is needed: brackets
        are left open, or the last token other than a comment is not ';'.

        Input that does not lex is never unfinished (string literals cannot span lines), so its error is reported at
        once.
        """
        line = (add_to_prev + "\n" + line) if add_to_prev else line

        depth = 0
        last = None
        try:
            for token in tokenize(line):
                if token.kind is TokenKind.COMMENT:
                    continue
                if token.kind in (TokenKind.LPAREN, TokenKind.LBRACE):
                    depth += 1
                elif token.kind in (TokenKind.RPAREN, TokenKind.RBRACE):
                    depth -= 1
                last = token
        except LexError:
            return line, False

        unfinished = depth > 0 or (last is not None and last.kind is not TokenKind.SEMICOLON)
        return line, unfinished

    def add(self, source):
        """Parses source and queues its statements. Evaluation is delayed until run is called."""
        self.error_handler.register_source(source)  # in case error is raised

        program = parse(tokenize(source))
        for statement in program.body:
            if isinstance(statement, FunctionDeclaration) and statement.arity_mismatch:
                msg = "function '{}' declares {} parameter type(s) but takes {} parameter(s)"
                self.error_handler.warn(msg, (statement.name, len(statement.paramTypes), len(statement.params)))

        self.to_exec.extend(program.body)

        if self.cmd_line:
            self.error_handler.remove_source()  # error was not raised

    def run(self):
        """Executes queued statements in order against the session environment. Raises any error encountered; the
        statements after a failing one are dropped. results only holds the values of this run.
        """
        self.results = []
        try:
            while self.to_exec:
                statement = self.to_exec.pop(0)
                self.results.append(self.evaluator.execute(statement))
        finally:
            self.to_exec = []

    def pop(self):
        """Returns the display of the most recent result and clears results."""
        result = self.results[-1]
        self.results = []
        return result.display()

    @property
    def value(self):
        """Value of the last executed statement, or Null if nothing ran."""
        return self.results[-1] if self.results else NULL

    def _trace(self, function, args, depth):
        rendered = ", ".join(arg.display() for arg in args)
        self.error_handler.register_step("call", f"{function.name}({rendered})", depth)
