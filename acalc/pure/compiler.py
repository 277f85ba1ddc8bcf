"""Lowers expression trees into stack machine programs.

Emission is post-order: a BinaryOp emits its left subtree, then its right subtree, then Apply(operator). The left
result is therefore always beneath the right one when Apply executes, matching the evaluator's left-before-right
order. A tree with L leaves lowers to exactly 2L - 1 instructions (L pushes, L - 1 applies).
"""

from acalc.lang.error import MalformedExpression
from acalc.pure.bytecode import Apply, Program, PushConstant
from acalc.pure.tree import BinaryOp, Literal


def compile_expression(expr):
    """Returns the Program that computes expr. Raises MalformedExpression on a node that isn't a Literal/BinaryOp."""
    instructions = []

    def _emit(node):
        if isinstance(node, Literal):
            instructions.append(PushConstant(node.value))
        elif isinstance(node, BinaryOp):
            _emit(node.left)
            _emit(node.right)
            instructions.append(Apply(node.operator))
        else:
            raise MalformedExpression(node, "not a Literal or BinaryOp")

    _emit(expr)
    return Program(tuple(instructions))
