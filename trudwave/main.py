"""Uses the TrudWave lexer/parser/evaluator to interpret .tw files or run in command-line mode. Also uses the error
handling context manager. Called from the trudwave console script.

Exit status is 0 on success and 1 on any error.
"""

import argparse
import sys

from trudwave.lang.error import ErrorHandler
from trudwave.lang.session import Session
from trudwave.lang.shell import Shell
from trudwave.pure.lexical import tokenize
from trudwave.pure.parser import parse
from trudwave.pure.values import NULL


def build_parser():
    parser = argparse.ArgumentParser(prog="trudwave", description="TrudWave interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")

    dump = parser.add_mutually_exclusive_group()
    dump.add_argument("--tokens", action="store_true", help="print the token stream of FILE instead of running it")
    dump.add_argument("--ast", action="store_true", help="print the syntax tree of FILE instead of running it")

    parser.add_argument("--trace", action="store_true", help="print every function call as it happens")
    parser.add_argument("--recursion-limit", type=int, default=None, metavar="N",
                        help="host recursion limit; bounds how deeply TrudWave functions may recurse")
    return parser


def main(argv=None):
    """Runs the TrudWave interpreter. Called from the trudwave console script."""
    args = build_parser().parse_args(argv)

    with ErrorHandler() as error_handler:
        if args.file is None:
            if args.tokens or args.ast:
                raise SystemExit("trudwave: --tokens and --ast require a FILE")
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, trace=args.trace,
                           recursion_limit=args.recursion_limit)
            Shell(sess).cmdloop()
            return 0

        if args.tokens or args.ast:
            error_handler.register_file(args.file)
            source = Session.read(args.file)
            error_handler.register_source(source)

            if args.tokens:
                for token in tokenize(source):
                    print(repr(token))
            else:
                print(parse(tokenize(source)).display())
            return 0

        sess = Session(error_handler, args.file, cmd_line=False, trace=args.trace,
                       recursion_limit=args.recursion_limit)
        sess.run()

        if sess.value != NULL:
            print(sess.value.display())
        return 0

    return 1  # only reached if a non-fatal error was suppressed


if __name__ == "__main__":
    sys.exit(main())
