"""Session control for acalc. Reads expressions from a file or the command line and runs them with one of the two
execution strategies: walking the tree, or compiling it and running the program on the stack machine.
"""

import math

from acalc.lang.error import GenericException
from acalc.lang.lexical import parse, parse_instruction
from acalc.pure.bytecode import Program
from acalc.pure.compiler import compile_expression
from acalc.pure.operators import format_number, identical
from acalc.pure.tree import evaluate
from acalc.pure.vm import Stack, run


class Session:
    """Governs an acalc session: which strategy runs expressions and the stack the machine runs on."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"
    STRATEGIES = ("tree", "vm", "both")

    def __init__(self, error_handler, path, strategy="vm", stack_size=None, cmd_line=False, asm=False, emit=False):
        if strategy not in Session.STRATEGIES:
            raise GenericException("unknown strategy '{}'", strategy, diagnosis=False)

        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.strategy = strategy
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.asm = asm            # whether lines are assembly instructions instead of expressions
        self.emit = emit          # whether to output compiled listings instead of results

        self.stack = Stack(stack_size)  # reused across sequential runs
        self.to_exec = {}  # dict of line num: (expr, Expression) to execute
        self.records = []  # (tag, operand) records of an assembly listing
        self.results = []

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            exprs = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, exprs)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for expr, line_num in exprs:
                self.add(expr, line_num)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Preprocesses a line from a file or command-line. In command-line mode, exprs can be ignored (used to keep
        track of file's exprs), but add_to_prev will indicate whether a line continuation is necessary. Returns
        updated value of line and add_to_prev.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments
        line = line.strip()

        if exprs is not None:
            if line and not add_to_prev:
                exprs.append((line, line_num))
            elif add_to_prev:
                prev, prev_num = exprs.pop()
                line = f"{prev} {line}".strip()
                exprs.append((line, prev_num))

        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num):
        """Parses expr and queues it for run. In asm mode, expr is one instruction of the session's program."""
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        if self.asm:
            record = parse_instruction(expr)
            Program.from_records([record])  # rejects unknown instructions at their own line
            self.records.append(record)
        else:
            self.to_exec[line_num] = (expr, parse(expr))

        self.error_handler.remove_line(self.path)  # error was not raised

    def execute(self, expr):
        """Runs expr with this session's strategy and returns its value."""
        if self.strategy == "tree":
            return evaluate(expr)

        value = run(compile_expression(expr), self.stack)
        if self.strategy == "both":
            expected = evaluate(expr)
            if not identical(expected, value):
                msg = "strategies disagree on '{}': tree gave {}, stack machine gave {}"
                raise GenericException(msg, (str(expr), format_number(expected), format_number(value)), internal=True)
        return value

    def run(self):
        """Runs this session's queued expressions (or its assembly listing) and appends their results to
        self.results. Will raise any errors that are encountered.
        """
        if self.asm:
            program = Program.from_records(self.records)
            if self.emit:
                self.results.append(program.display())
            else:
                self._record(f"{self.path} ({len(program)} instructions)", run(program, self.stack))
            return

        for line_num, (expr, tree) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, expr, line_num)

            try:
                if self.emit:
                    self.results.append(compile_expression(tree).display())
                else:
                    self._record(expr, self.execute(tree))
            finally:
                if self.cmd_line:
                    del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def _record(self, expr, value):
        """Appends value to self.results, warning if arithmetic produced an infinity or NaN."""
        if not math.isfinite(value):
            self.error_handler.warn("'{}' evaluates to {}", (expr, format_number(value)), diagnosis=False)
        self.results.append(format_number(value))

    def pop(self):
        """Removes and returns the latest result."""
        return self.results.pop()
