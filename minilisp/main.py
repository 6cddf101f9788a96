"""Runs minilisp source files, or starts the interactive shell when no file is given. Also uses error handling context
manager. Called from the minilisp console script.

Basic program flow for every top-level form:
    1. Tokenizer: splits the text into tokens (minilisp/core/tokenizer.py)
    2. Parser: builds a tree of Exprs out of the tokens (minilisp/core/parser.py)
    3. Evaluator: walks the tree against the session's frames (minilisp/core/evaluator.py, environment.py)
"""

import argparse
import sys

from minilisp.core.evaluator import Evaluator
from minilisp.lang.error import ErrorHandler
from minilisp.lang.session import Session
from minilisp.lang.shell import Shell


PYTHON_FRAMES_PER_DEPTH = 4  # python stack frames used by each nested eval_obj call, at most


def positive_int(arg):
    """argparse type for --max-depth."""
    value = int(arg)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got '{arg}'")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="minilisp", description="minilisp interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--max-depth", type=positive_int, default=Evaluator.MAX_DEPTH,
                        help=f"maximum evaluation depth (default: {Evaluator.MAX_DEPTH})")
    parser.add_argument("--dynamic-scope", action="store_true",
                        help="resolve free variables in function bodies in the caller's scope")
    parser.add_argument("--trace", action="store_true", help="print every function call and return")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs minilisp interpreter. Called from minilisp console script."""
    with ErrorHandler() as error_handler:
        args = parse_args(argv)
        error_handler.verbose = args.trace

        # leave room for the evaluation depth asked for
        sys.setrecursionlimit(max(sys.getrecursionlimit(), args.max_depth * PYTHON_FRAMES_PER_DEPTH + 100))

        options = {"max_depth": args.max_depth, "lexical": not args.dynamic_scope}

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, **options)
            try:
                sess.run()
            finally:
                while sess.results:
                    print(sess.pop())

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()


if __name__ == "__main__":
    main()
