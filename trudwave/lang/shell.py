"""Handles interactive/command-line mode for the TrudWave interpreter. Uses cmd as backend."""

import cmd

from trudwave.pure.lexical import tokenize
from trudwave.pure.parser import parse
from trudwave.pure.values import NULL


class Shell(cmd.Cmd):
    """TrudWave interpreter shell."""
    intro = "TrudWave interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary TrudWave input once it forms complete statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.add(line)
            self.sess.run()

            if self.sess.results and self.sess.value != NULL:
                print(self.sess.pop())

    def parseline(self, line):
        """Only treat the first word as a command outside of a continuation, so that input like 'ast' inside a match
        block is not hijacked.
        """
        if self._tmp_line:
            return None, None, line
        return super().parseline(line)

    def do_tokens(self, arg):
        """tokens SOURCE: prints the token stream of SOURCE."""
        with self.sess.error_handler:
            self.sess.error_handler.register_source(arg)
            for token in tokenize(arg):
                print(repr(token))

    def do_ast(self, arg):
        """ast SOURCE: prints the syntax tree of SOURCE without evaluating it."""
        with self.sess.error_handler:
            self.sess.error_handler.register_source(arg)
            print(parse(tokenize(arg)).display())

    def do_help(self, arg):
        """Prints a short introduction to the language instead of command docs."""
        print("Welcome to the TrudWave interpreter!\n\n"
              "TrudWave is a small functional language: typed declarations, numbers, strings, \n"
              "booleans and tuples, and a single branching construct, 'match'.\n\n"
              "Try it out by typing '<number, number> double(x) = x * 2;'. This will bind a \n"
              "function to the name 'double'. Next, try typing 'double(21);', giving 42 as \n"
              "the result. Use 'tokens SOURCE' or 'ast SOURCE' to inspect how SOURCE is read.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
