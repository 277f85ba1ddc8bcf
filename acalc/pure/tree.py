"""Arithmetic expression trees and the recursive tree-walking evaluator.

An Expression is one of exactly two node types:

```
<expression> ::= Literal(<float>)
               | BinaryOp(<operator>, <expression>, <expression>)
```

Nodes are frozen and checked on construction, so every tree built through these constructors is well-formed. The
evaluator (and the compiler in acalc.pure.compiler) still reject anything else with MalformedExpression, e.g. a raw
number or list passed where a node was expected.

Recursion depth of `evaluate` equals tree depth, so pathologically deep trees can exhaust Python's recursion limit.
The stack machine path avoids that cost for repeated execution.
"""

from dataclasses import dataclass
from numbers import Real

from acalc.lang.error import MalformedExpression
from acalc.pure.operators import Operator, apply, format_number


class Expression:
    """Superclass of all expression tree nodes."""
    __slots__ = ()

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        BinaryOp(+, [
            Literal(6),
            BinaryOp(+, [
                ...
            ])
        ])
        """
        raise NotImplementedError


@dataclass(frozen=True)
class Literal(Expression):
    """Leaf node holding one constant."""
    value: float

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, Real):
            raise MalformedExpression(self, "literal value must be a real number")
        try:
            object.__setattr__(self, "value", float(self.value))
        except OverflowError:
            raise MalformedExpression(self, "literal value is out of double precision range")

    def display(self, indents=0):
        return f"{'    ' * indents}Literal({format_number(self.value)})"

    def __str__(self):
        return format_number(self.value)


@dataclass(frozen=True)
class BinaryOp(Expression):
    """Internal node combining exactly two sub-expressions with an Operator."""
    operator: Operator
    left: Expression
    right: Expression

    def __post_init__(self):
        if not isinstance(self.operator, Operator):
            raise MalformedExpression(self, f"unrecognized operator {self.operator!r}")
        if not isinstance(self.left, Expression) or not isinstance(self.right, Expression):
            raise MalformedExpression(self, "binary node needs two expression children")

    def display(self, indents=0):
        result = f"{'    ' * indents}BinaryOp({self.operator}, ["
        for node in (self.left, self.right):
            result += "\n" + node.display(indents + 1) + ","
        return result[:-1] + f"\n{'    ' * indents}])"

    def __str__(self):
        return f"({self.left} {self.operator} {self.right})"


def evaluate(expr):
    """Returns the value of expr. The left subtree is evaluated fully before the right one."""
    if isinstance(expr, Literal):
        return expr.value
    elif isinstance(expr, BinaryOp):
        lhs = evaluate(expr.left)
        rhs = evaluate(expr.right)
        return apply(expr.operator, lhs, rhs)
    raise MalformedExpression(expr, "not a Literal or BinaryOp")


def leaves(expr):
    """Returns the number of Literal leaves in expr."""
    if isinstance(expr, Literal):
        return 1
    elif isinstance(expr, BinaryOp):
        return leaves(expr.left) + leaves(expr.right)
    raise MalformedExpression(expr, "not a Literal or BinaryOp")
