"""Uses the expression evaluator/stack machine to interpret files of arithmetic expressions, or run in command-line
mode. Also uses error handling context manager. Called from the acalc console script.
"""

import argparse

from acalc.lang.error import ErrorHandler
from acalc.lang.session import Session
from acalc.lang.shell import Shell


def build_parser():
    """Returns the argparse parser for the acalc command."""
    parser = argparse.ArgumentParser(prog="acalc", description="Arithmetic expression interpreter.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--strategy", choices=Session.STRATEGIES, default="vm",
                        help="walk the tree, run compiled programs on the stack machine (default), or check both")
    parser.add_argument("--stack-size", type=int, default=None, metavar="N",
                        help="run on a fixed stack of capacity N (default: growable)")
    parser.add_argument("--asm", action="store_true", help="treat file as one assembly listing (push N / apply OP)")
    parser.add_argument("--emit", action="store_true", help="print compiled programs instead of results")
    return parser


def main(argv=None):
    """Runs acalc interpreter. Called from acalc console script."""
    with ErrorHandler() as error_handler:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.stack_size is not None and args.stack_size < 0:
            parser.error("--stack-size cannot be negative")
        if args.asm and args.file is None:
            parser.error("--asm needs a file")
        if args.asm and args.strategy != "vm":
            parser.error("--asm listings only run on the stack machine (--strategy vm)")

        options = dict(strategy=args.strategy, stack_size=args.stack_size, emit=args.emit)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, asm=args.asm, **options)
            sess.run()

            for result in sess.results:
                print(result)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()


if __name__ == "__main__":
    main()
