import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from acalc.lang.error import ErrorHandler, GenericException, StackOverflow, StackUnderflow, UnknownInstruction
from acalc.lang.session import Session
from acalc.lang.shell import Shell


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, text, name="calc.ac"):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w") as file:
            file.write(text)
        return path

    def results(self, text, **kwargs):
        sess = Session(ErrorHandler(), self.write(text), **kwargs)
        with redirect_stdout(io.StringIO()):
            sess.run()
        return sess.results

    def test_strategies(self):
        text = "6 + (4 + 3)\n9 * 7 / 7\n\n;; comment line\n0.5 * 3 ;; trailing comment\n"
        for strategy in Session.STRATEGIES:
            self.assertEqual(["13", "9", "1.5"], self.results(text, strategy=strategy), strategy)

    def test_line_continuation(self):
        self.assertEqual(["3", "4"], self.results("(1 +\n  2)\n2 * 2\n"))

    def test_emit(self):
        expected = "0  push 2\n1  push 1\n2  apply +\n3  push 3\n4  apply *"
        self.assertEqual([expected], self.results("(2 + 1) * 3\n", emit=True))

    def test_fixed_stack(self):
        self.assertEqual(["3", "10"], self.results("1 + 2\n1 + 2 + 3 + 4\n", stack_size=2))

        sess = Session(ErrorHandler(), self.write("1 + (2 + 3)\n"), stack_size=2)
        self.assertRaises(StackOverflow, sess.run)

    def test_non_finite_warning(self):
        sess = Session(ErrorHandler(), self.write("1 / 0\n0 / 0\n"))
        output = io.StringIO()
        with redirect_stdout(output):
            sess.run()

        self.assertEqual(["inf", "nan"], sess.results)
        self.assertEqual(2, output.getvalue().count("warning: "))

    def test_asm(self):
        self.assertEqual(["15"], self.results("push 5\npush 7\napply +\npush 3 ;; three\napply +\n", asm=True))
        self.assertEqual(["0  push 5"], self.results("push 5\n", asm=True, emit=True))

        self.assertRaises(StackUnderflow, Session(ErrorHandler(), self.write("apply +\n"), asm=True).run)
        self.assertRaises(UnknownInstruction, Session, ErrorHandler(), self.write("push 1\njump 0\n"), asm=True)

    def test_errors(self):
        self.assertRaises(GenericException, Session, ErrorHandler(), self.write("1 +\n"))
        self.assertRaises(GenericException, Session, ErrorHandler(), os.path.join(self.tmp.name, "missing.ac"))
        self.assertRaises(GenericException, Session, ErrorHandler(), Session.SH_FILE)
        self.assertRaises(GenericException, Session, ErrorHandler(), self.write("1\n"), strategy="jit")

    def test_error_traceback(self):
        handler = ErrorHandler()
        output = io.StringIO()
        with redirect_stdout(output):
            with self.assertRaises(SystemExit):
                with handler:
                    Session(handler, self.write("1 + 1\n2 * (3 +\n4))\n"))
        self.assertIn("line 2", output.getvalue())
        self.assertIn("mismatched parentheses", output.getvalue())


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(), Session.SH_FILE, cmd_line=True))

    def onecmd(self, line):
        output = io.StringIO()
        with redirect_stdout(output):
            self.shell.onecmd(line)
        return output.getvalue()

    def test_evaluate(self):
        self.assertEqual("13\n", self.onecmd("6 + (4 + 3)"))
        self.assertEqual("inf\n", self.onecmd("inf * 2").splitlines(True)[-1])

    def test_continuation(self):
        self.assertEqual("", self.onecmd("(1 +"))
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.assertEqual("3\n", self.onecmd("2)"))
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)

    def test_errors_are_not_fatal(self):
        self.assertIn("error: ", self.onecmd("1 +"))
        self.assertEqual("2\n", self.onecmd("1 + 1"))

    def test_stack_overflow(self):
        self.shell = Shell(Session(ErrorHandler(), Session.SH_FILE, stack_size=1, cmd_line=True))
        self.assertIn("stack overflow", self.onecmd("1 + 1"))
        self.assertEqual("1\n", self.onecmd("1"))

    def test_emit(self):
        self.assertEqual("0  push 2\n1  push 3\n2  apply *\n", self.onecmd("emit 2 * 3"))

    def test_strategy(self):
        self.onecmd("strategy both")
        self.assertEqual("both\n", self.onecmd("strategy"))
        self.assertIn("error: ", self.onecmd("strategy jit"))
        self.assertEqual("both", self.shell.sess.strategy)

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))


if __name__ == '__main__':
    unittest.main()
