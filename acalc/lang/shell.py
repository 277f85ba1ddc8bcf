"""Handles interactive/command-line mode for acalc. Uses cmd as backend."""

import cmd

from acalc.lang.error import GenericException
from acalc.lang.lexical import parse
from acalc.lang.session import Session
from acalc.pure.compiler import compile_expression


class Shell(cmd.Cmd):
    """Arithmetic interpreter shell."""
    intro = "Arithmetic interpreter :: tree walker + stack machine\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary arithmetic expression."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(f"{self._tmp_line} {line}", self.line_num, False)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            if not line:
                return

            self.sess.add(line, self.line_num)
            self.sess.run()

            if self.sess.results:
                print(self.sess.pop())

    def do_emit(self, arg):
        """Prints the stack machine program an expression compiles to: emit EXPR"""
        with self.sess.error_handler:
            print(compile_expression(parse(arg)).display())

    def do_strategy(self, arg):
        """Shows or switches the execution strategy: strategy [tree|vm|both]"""
        with self.sess.error_handler:
            if not arg:
                print(self.sess.strategy)
            elif arg.strip() in Session.STRATEGIES:
                self.sess.strategy = arg.strip()
            else:
                raise GenericException("unknown strategy '{}'", arg.strip(), diagnosis=False)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the acalc interpreter!\n\n"
              "Type an arithmetic expression such as '6 + (4 + 3)' to evaluate it. Expressions \n"
              "support + - * / over decimal numbers, with the usual precedence.\n\n"
              "'strategy tree' walks the expression tree, 'strategy vm' compiles it and runs it \n"
              "on the stack machine, and 'strategy both' checks that the two agree. 'emit EXPR' \n"
              "shows the compiled program.")

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
