import math
import unittest

from acalc.lang.error import GenericException, UnknownInstruction
from acalc.lang.lexical import Lexer, parse, parse_instruction, parse_listing
from acalc.pure.bytecode import Apply, Program, PushConstant
from acalc.pure.operators import Operator
from acalc.pure.tree import BinaryOp, Literal, evaluate


class LexerTestCase(unittest.TestCase):

    def test_tokenize(self):
        tokens = Lexer.tokenize("6 + (4.5*3)")
        self.assertEqual(["6", "+", "(", "4.5", "*", "3", ")"], [token.text for token in tokens])
        self.assertEqual(["number", "operator", "paren", "number", "operator", "number", "paren"],
                         [token.kind for token in tokens])
        self.assertEqual([0, 2, 4, 5, 8, 9, 10], [token.start for token in tokens])

    def test_illegal(self):
        should_raise = ["1 % 2", "x + 1", "2 ^ 3", "1 + 2;"]
        for case in should_raise:
            self.assertRaises(GenericException, Lexer.tokenize, case)

        with self.assertRaises(GenericException) as context:
            Lexer.tokenize("1 + x")
        self.assertEqual((4, 5), (context.exception.start, context.exception.end))


class ParseTestCase(unittest.TestCase):

    def test_parse(self):
        cases = {
            "2": Literal(2),
            "-2.5": Literal(-2.5),
            "((2))": Literal(2),
            "6 + (4 + 3)": BinaryOp(Operator.ADD, Literal(6), BinaryOp(Operator.ADD, Literal(4), Literal(3))),
            "(2 + 1) * 3": BinaryOp(Operator.MULTIPLY, BinaryOp(Operator.ADD, Literal(2), Literal(1)), Literal(3)),
            "3 - -2": BinaryOp(Operator.SUBTRACT, Literal(3), Literal(-2)),
            "1e3/.5": BinaryOp(Operator.DIVIDE, Literal(1000), Literal(0.5)),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse(case), case)

    def test_precedence(self):
        cases = {"8 - 2 - 1": 5.0, "2 + 3 * 4": 14.0, "24 / 4 / 2": 3.0, "9 * 7 / 7": 9.0, "1 - 2 * 3 + 4": -1.0}
        for case, expected in cases.items():
            self.assertEqual(expected, evaluate(parse(case)), case)

    def test_special_values(self):
        self.assertEqual(math.inf, evaluate(parse("inf")))
        self.assertEqual(-math.inf, evaluate(parse("-inf")))
        self.assertTrue(math.isnan(evaluate(parse("nan + 1"))))

    def test_parse_errors(self):
        should_raise = ["", "   ", "1 +", "(1 + 2", "1 + 2)", "()", "1 2", "* 3", "- 3", "-(3)", "1 + + 2"]
        for case in should_raise:
            self.assertRaises(GenericException, parse, case)

    def test_error_span(self):
        with self.assertRaises(GenericException) as context:
            parse("1 + * 2")
        self.assertEqual("1 + * 2", context.exception.expr)
        self.assertEqual((4, 5), (context.exception.start, context.exception.end))


class ListingTestCase(unittest.TestCase):

    def test_parse_instruction(self):
        cases = {
            "push 5": ("push", 5.0),
            "PUSH -0.5": ("push", -0.5),
            "  push   1e2 ": ("push", 100.0),
            "apply +": ("apply", "+"),
            "jump 3": ("jump", "3"),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_instruction(case), case)

        should_raise = ["push", "push 1 2", "push five", "push --3", "apply"]
        for case in should_raise:
            self.assertRaises(GenericException, parse_instruction, case)

    def test_parse_listing(self):
        program = parse_listing(["push 2", "", "push 1", "apply +", "push 3", "apply *"])
        expected = Program([
            PushConstant(2), PushConstant(1), Apply(Operator.ADD), PushConstant(3), Apply(Operator.MULTIPLY)
        ])
        self.assertEqual(expected, program)

        self.assertRaises(UnknownInstruction, parse_listing, ["push 1", "jump 0"])
        self.assertRaises(UnknownInstruction, parse_listing, ["push 1", "apply %"])


if __name__ == '__main__':
    unittest.main()
